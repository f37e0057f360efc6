from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Set

from lessonshop.config import settings
from lessonshop.constants import DEFAULT_SORT_FIELD, SORT_ASC, STATIC_LESSONS
from lessonshop.services.api_client import LessonsApi, NetworkFailure
from lessonshop.store.cart import Cart, CartLine
from lessonshop.store.catalog import Catalog, Lesson
from lessonshop.utils.validators import can_checkout

logger = logging.getLogger(__name__)

LOAD_FAILED_MSG = "Failed to load lessons. Please ensure the backend is running on {url}"
ORDER_FAILED_MSG = "Failed to submit order. Please ensure the backend is running."


class CatalogLoadError(Exception):
    pass


class OrderSubmissionError(Exception):
    pass


@dataclass
class CheckoutForm:
    name: str = ""
    phone: str = ""

    @property
    def valid(self) -> bool:
        return can_checkout(self.name, self.phone)

    def clear(self) -> None:
        self.name = ""
        self.phone = ""


@dataclass(frozen=True)
class Order:
    name: str
    phone: str
    lesson_ids: List[Any]
    spaces: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phone": self.phone,
            "lessonIDs": list(self.lesson_ids),
            "spaces": self.spaces,
        }


@dataclass
class OrderResult:
    order: Order
    confirmation: Any
    lines: List[CartLine]
    total: float
    number: str = field(default_factory=lambda: uuid.uuid4().hex[:8].upper())
    created_at: str = field(default_factory=lambda: datetime.now().strftime("%Y-%m-%d %H:%M:%S"))

    def summary(self) -> str:
        return (
            "Order submitted successfully!\n\n"
            f"Name: {self.order.name}\n"
            f"Phone: {self.order.phone}\n"
            f"Total Items: {self.order.spaces}"
        )


class Storefront:
    """One shopper's session: catalog, cart, checkout form and view state."""

    def __init__(self, api: Optional[LessonsApi] = None, catalog_source: Optional[str] = None) -> None:
        self.api = api or LessonsApi()
        self.catalog_source = catalog_source or settings.catalog_source
        self.catalog = Catalog()
        self.cart = Cart(self.catalog)
        self.form = CheckoutForm()
        self.sort_by = DEFAULT_SORT_FIELD
        self.sort_order = SORT_ASC
        self.show_cart = False
        self._sync_tasks: Set[asyncio.Task] = set()

    # ---------------- catalog ----------------

    async def load_catalog(self) -> List[Lesson]:
        if self.catalog_source == "static":
            lessons = self.catalog.load(STATIC_LESSONS)
            logger.info("Loaded %d static lessons", len(lessons))
            return lessons

        try:
            records = await self.api.fetch_lessons()
            lessons = self.catalog.load(records)
        except (NetworkFailure, ValueError) as e:
            logger.error("Error fetching lessons: %s", e)
            raise CatalogLoadError(LOAD_FAILED_MSG.format(url=self.api.base_url)) from e

        logger.info("Lessons loaded from API: %d", len(lessons))
        return lessons

    def sorted_lessons(self) -> List[Lesson]:
        return self.catalog.sorted_view(self.sort_by, self.sort_order)

    def set_sort(self, by: Optional[str] = None, order: Optional[str] = None) -> None:
        # проверяем до присваивания, чтобы не оставить сессию в кривом состоянии
        self.catalog.sorted_view(by or self.sort_by, order or self.sort_order)
        self.sort_by = by or self.sort_by
        self.sort_order = order or self.sort_order

    # ---------------- checkout ----------------

    @property
    def can_checkout(self) -> bool:
        return self.form.valid

    def build_order(self) -> Order:
        return Order(
            name=self.form.name,
            phone=self.form.phone,
            lesson_ids=self.cart.distinct_lesson_ids(),
            spaces=len(self.cart),
        )

    async def submit_order(self) -> Optional[OrderResult]:
        if not self.can_checkout or len(self.cart) == 0:
            return None

        order = self.build_order()
        try:
            confirmation = await self.api.create_order(order.to_payload())
        except NetworkFailure as e:
            logger.error("Error submitting order: %s", e)
            raise OrderSubmissionError(ORDER_FAILED_MSG) from e

        logger.info("Order submitted: %s", confirmation)
        result = OrderResult(
            order=order,
            confirmation=confirmation,
            lines=self.cart.lines,
            total=self.cart.total(),
        )

        self.sync_spaces(order.lesson_ids)
        self.cart.clear()
        self.form.clear()
        self.show_cart = False
        return result

    # ---------------- seat sync ----------------

    def sync_spaces(self, lesson_ids: List[Any]) -> List[asyncio.Task]:
        """Push current local spaces for each lesson to the backend.

        Fire-and-forget: one task per lesson, failures are only logged.
        """
        tasks = []
        for lesson_id in lesson_ids:
            lesson = self.catalog.get(lesson_id)
            if lesson is None:
                continue
            task = asyncio.create_task(self._push_spaces(lesson.remote_id, lesson.spaces))
            self._sync_tasks.add(task)
            task.add_done_callback(self._sync_tasks.discard)
            tasks.append(task)
        return tasks

    async def _push_spaces(self, remote_id: Any, spaces: int) -> None:
        try:
            data = await self.api.update_lesson_spaces(remote_id, spaces)
        except NetworkFailure as e:
            logger.error("Error updating lesson spaces for %s: %s", remote_id, e)
            return
        logger.info("Lesson spaces updated: %s -> %s (%s)", remote_id, spaces, data)

    async def pending_sync(self) -> None:
        if self._sync_tasks:
            await asyncio.gather(*list(self._sync_tasks))
