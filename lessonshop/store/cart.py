from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from lessonshop.store.catalog import Catalog


class CartIndexError(IndexError):
    pass


@dataclass(frozen=True)
class CartLine:
    # копия полей урока на момент добавления, не ссылка на Lesson
    id: Any
    subject: str
    location: str
    price: float
    icon: str


Listener = Callable[["Cart"], None]


class Cart:
    def __init__(self, catalog: Catalog) -> None:
        self.catalog = catalog
        self._lines: List[CartLine] = []
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._lines)

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def add(self, lesson_id: Any) -> Optional[CartLine]:
        """Put one unit of a lesson into the cart.

        Returns None without touching anything when the lesson is unknown or
        sold out.
        """
        lesson = self.catalog.get(lesson_id)
        if lesson is None or lesson.spaces <= 0:
            return None

        line = CartLine(
            id=lesson.id,
            subject=lesson.subject,
            location=lesson.location,
            price=lesson.price,
            icon=lesson.icon,
        )
        # сначала списываем место: если его уже нет, строка в корзину не попадёт
        self.catalog.decrement_seat(lesson.id)
        self._lines.append(line)
        self._notify()
        return line

    def remove(self, index: int) -> CartLine:
        if not 0 <= index < len(self._lines):
            raise CartIndexError(f"cart index {index} out of range (cart has {len(self._lines)} lines)")
        line = self._lines.pop(index)
        self.catalog.increment_seat(line.id)
        self._notify()
        return line

    def clear(self) -> None:
        # места не возвращаются: после заказа они считаются проданными
        self._lines = []
        self._notify()

    def count(self, lesson_id: Any) -> int:
        return sum(1 for line in self._lines if line.id == lesson_id)

    def distinct_lesson_ids(self) -> List[Any]:
        seen: List[Any] = []
        for line in self._lines:
            if line.id not in seen:
                seen.append(line.id)
        return seen

    def total(self) -> float:
        return sum(float(line.price) for line in self._lines)
