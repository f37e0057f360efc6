from __future__ import annotations

from dataclasses import dataclass
from functools import cmp_to_key
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from lessonshop.constants import DEFAULT_ICON, SORT_ASC, SORT_DESC, SORT_FIELDS, SUBJECT_ICONS


def icon_for(subject: str) -> str:
    return SUBJECT_ICONS.get(subject, DEFAULT_ICON)


@dataclass
class Lesson:
    id: Any
    subject: str
    location: str
    price: float
    spaces: int
    remote_id: Any = None  # _id на бэкенде, идёт в PUT /lessons/{_id}
    icon: str = DEFAULT_ICON

    @classmethod
    def from_record(cls, rec: Dict[str, Any]) -> "Lesson":
        if not isinstance(rec, dict):
            raise ValueError(f"lesson record must be an object, got {rec!r}")
        lesson_id = rec.get("id", rec.get("_id"))
        if lesson_id is None:
            raise ValueError(f"lesson record has no id: {rec!r}")
        try:
            price = float(rec.get("price", 0))
            spaces = int(rec.get("spaces", 0))
        except (TypeError, ValueError) as e:
            raise ValueError(f"lesson {lesson_id}: bad price/spaces: {e}") from e
        if price < 0:
            raise ValueError(f"lesson {lesson_id}: price must be >= 0")
        if spaces < 0:
            raise ValueError(f"lesson {lesson_id}: spaces must be >= 0")
        subject = str(rec.get("subject", ""))
        return cls(
            id=lesson_id,
            subject=subject,
            location=str(rec.get("location", "")),
            price=price,
            spaces=spaces,
            remote_id=rec.get("_id", lesson_id),
            icon=icon_for(subject),
        )


Listener = Callable[["Catalog"], None]


def _sort_key(value: Any) -> Any:
    return value.lower() if isinstance(value, str) else value


def _compare(a: Any, b: Any) -> int:
    return 1 if a > b else -1 if a < b else 0


class Catalog:
    """Live list of lessons and their remaining spaces.

    The catalog is the only place spaces are stored; the cart moves them
    in and out through decrement_seat / increment_seat.
    """

    def __init__(self) -> None:
        self._lessons: List[Lesson] = []
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        return len(self._lessons)

    def __iter__(self) -> Iterator[Lesson]:
        return iter(self._lessons)

    @property
    def lessons(self) -> List[Lesson]:
        return list(self._lessons)

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def _notify(self) -> None:
        for listener in self._listeners:
            listener(self)

    def load(self, records: Iterable[Dict[str, Any]]) -> List[Lesson]:
        self._lessons = [Lesson.from_record(r) for r in records]
        self._notify()
        return self.lessons

    def get(self, lesson_id: Any) -> Optional[Lesson]:
        for lesson in self._lessons:
            if lesson.id == lesson_id:
                return lesson
        return None

    def resolve_id(self, raw: str) -> Optional[Any]:
        # id из формы/команды приходит строкой, а в каталоге может быть int
        raw = raw.strip()
        for lesson in self._lessons:
            if str(lesson.id) == raw:
                return lesson.id
        return None

    def sorted_view(self, by: str = "subject", order: str = SORT_ASC) -> List[Lesson]:
        if by not in SORT_FIELDS:
            raise ValueError(f"cannot sort by {by!r}, expected one of {', '.join(SORT_FIELDS)}")
        if order not in (SORT_ASC, SORT_DESC):
            raise ValueError(f"sort order must be {SORT_ASC} or {SORT_DESC}, got {order!r}")

        sign = 1 if order == SORT_ASC else -1

        def cmp(a: Lesson, b: Lesson) -> int:
            return sign * _compare(_sort_key(getattr(a, by)), _sort_key(getattr(b, by)))

        return sorted(self._lessons, key=cmp_to_key(cmp))

    def decrement_seat(self, lesson_id: Any) -> None:
        lesson = self.get(lesson_id)
        if lesson is None:
            return
        if lesson.spaces <= 0:
            raise ValueError(f"lesson {lesson_id} has no spaces left")
        lesson.spaces -= 1
        self._notify()

    def increment_seat(self, lesson_id: Any) -> None:
        lesson = self.get(lesson_id)
        if lesson is None:
            return
        lesson.spaces += 1
        self._notify()

    def unique_locations(self) -> int:
        return len({lesson.location for lesson in self._lessons})

    def total_spaces(self) -> int:
        return sum(lesson.spaces for lesson in self._lessons)
