import logging
from typing import Optional, Tuple

from aiogram import Router
from aiogram.filters import Command
from aiogram.fsm.context import FSMContext
from aiogram.types import FSInputFile, Message, ReplyKeyboardRemove

from lessonshop.bot.keyboards import main_kb
from lessonshop.bot.states import SESSIONS, Checkout
from lessonshop.constants import SORT_ASC, SORT_DESC, SORT_FIELDS
from lessonshop.services.api_client import LessonsApi
from lessonshop.services.receipt_pdf import generate_receipt_pdf
from lessonshop.services.storefront import CatalogLoadError, OrderSubmissionError, Storefront
from lessonshop.store.cart import CartIndexError
from lessonshop.utils.formatters import lesson_line, money
from lessonshop.utils.validators import is_valid_name, is_valid_phone

logger = logging.getLogger(__name__)

router = Router()

LOAD_FAILED_TEXT = "❌ Не удалось загрузить уроки, бэкенд недоступен. Попробуйте /reload"
ORDER_FAILED_TEXT = "❌ Заказ не отправлен, бэкенд недоступен. Корзина сохранена, повторите /checkout"

_API: Optional[LessonsApi] = None


def _api() -> LessonsApi:
    global _API
    if _API is None:
        _API = LessonsApi()
    return _API


async def close_api() -> None:
    global _API
    if _API is not None:
        await _API.aclose()
        _API = None


async def _session(message: Message) -> Storefront:
    chat_id = message.chat.id
    store = SESSIONS.get(chat_id)
    if store is None:
        store = Storefront(api=_api())
        SESSIONS[chat_id] = store
        try:
            await store.load_catalog()
        except CatalogLoadError:
            await message.answer(LOAD_FAILED_TEXT)
    return store


def parse_sort_args(text: str) -> Tuple[Optional[str], Optional[str]]:
    """/lessons [FIELD] [asc|desc] -> (field, order); missing parts are None."""
    parts = (text or "").split()[1:]
    field = None
    order = None
    for p in parts:
        p = p.strip().lower()
        if p in (SORT_ASC, SORT_DESC):
            order = p
        elif p in SORT_FIELDS:
            field = p
        else:
            raise ValueError(p)
    return field, order


def lessons_text(store: Storefront) -> str:
    lessons = store.sorted_lessons()
    if not lessons:
        return "Уроков пока нет."
    lines = [
        f"<b>Уроки</b> ({store.sort_by}, {store.sort_order}) — "
        f"городов: {store.catalog.unique_locations()}, свободных мест: {store.catalog.total_spaces()}",
    ]
    for lesson in lessons:
        mark = "" if lesson.spaces > 0 else " ⛔"
        lines.append(f"• {lesson_line(lesson)}{mark}")
    lines.append("\nДобавить: /add ID")
    return "\n".join(lines)


def cart_text(store: Storefront) -> str:
    if len(store.cart) == 0:
        return "Корзина пуста. Добавь: /add ID"
    lines = ["<b>Корзина:</b>"]
    for i, line in enumerate(store.cart.lines, start=1):
        lines.append(f"{i}. {line.subject} — {line.location} | {money(float(line.price))}")
    lines.append(f"\nИтого: {money(store.cart.total())}")
    lines.append("Удалить: /remove N · Оформить: /checkout")
    return "\n".join(lines)


def order_text(result) -> str:
    return (
        "✅ Заказ оформлен!\n\n"
        f"Имя: {result.order.name}\n"
        f"Телефон: {result.order.phone}\n"
        f"Всего мест: {result.order.spaces}\n"
        f"Итого: {money(result.total)}"
    )


@router.message(Command("start"))
async def cmd_start(message: Message):
    store = await _session(message)
    await message.answer("✅ Lesson Shop", reply_markup=main_kb())
    if len(store.catalog):
        await message.answer(lessons_text(store))


@router.message(Command("cancel"))
async def cmd_cancel(message: Message, state: FSMContext):
    await state.clear()
    await message.answer("❎ Отменено. Можно вводить команды заново.", reply_markup=main_kb())


@router.message(Command("help"))
async def cmd_help(message: Message):
    text = (
        "<b>Lesson Shop — команды</b>\n\n"
        "/lessons — список уроков\n"
        f"/lessons FIELD [asc|desc] — сортировка ({', '.join(SORT_FIELDS)})\n"
        "/reload — заново загрузить уроки\n"
        "/add ID — добавить урок в корзину\n"
        "/cart — показать корзину\n"
        "/remove N — убрать позицию N из корзины\n"
        "/checkout — оформить заказ\n"
        "/cancel — отмена ввода\n"
    )
    await message.answer(text)


@router.message(Command("lessons"))
async def cmd_lessons(message: Message):
    store = await _session(message)
    try:
        field, order = parse_sort_args(message.text or "")
        store.set_sort(field, order)
    except ValueError as e:
        await message.answer(f"❌ Не понимаю '{e}'. Формат: /lessons [{'|'.join(SORT_FIELDS)}] [asc|desc]")
        return
    store.show_cart = False
    await message.answer(lessons_text(store))


@router.message(Command("reload"))
async def cmd_reload(message: Message):
    store = await _session(message)
    try:
        await store.load_catalog()
    except CatalogLoadError:
        await message.answer(LOAD_FAILED_TEXT)
        return
    await message.answer(lessons_text(store))


@router.message(Command("add"))
async def cmd_add(message: Message):
    store = await _session(message)
    parts = (message.text or "").split(maxsplit=1)
    if len(parts) < 2:
        await message.answer("Формат: /add ID")
        return

    lesson_id = store.catalog.resolve_id(parts[1])
    if lesson_id is None:
        await message.answer(f"❌ Урок не найден: {parts[1].strip()}")
        return

    line = store.cart.add(lesson_id)
    if line is None:
        await message.answer("⛔ Мест нет.")
        return
    lesson = store.catalog.get(lesson_id)
    await message.answer(f"✅ В корзине: {line.subject} — {line.location}. Осталось мест: {lesson.spaces}")


@router.message(Command("cart"))
async def cmd_cart(message: Message):
    store = await _session(message)
    store.show_cart = len(store.cart) > 0
    await message.answer(cart_text(store))


@router.message(Command("remove"))
async def cmd_remove(message: Message):
    store = await _session(message)
    parts = (message.text or "").split()
    if len(parts) != 2 or not parts[1].isdigit():
        await message.answer("Формат: /remove N (номер из /cart)")
        return

    try:
        line = store.cart.remove(int(parts[1]) - 1)
    except CartIndexError:
        await message.answer(f"❌ Нет позиции {parts[1]} в корзине")
        return
    await message.answer(f"🗑 Убрано: {line.subject} — {line.location}\n\n{cart_text(store)}")


@router.message(Command("checkout"))
async def cmd_checkout(message: Message, state: FSMContext):
    store = await _session(message)
    if len(store.cart) == 0:
        await message.answer("Корзина пуста. Добавь: /add ID")
        return

    await state.set_state(Checkout.waiting_name)
    await message.answer(
        "1/2) Введите имя (только буквы и пробелы)\nОтмена: /cancel",
        reply_markup=ReplyKeyboardRemove(),
    )


@router.message(Checkout.waiting_name)
async def checkout_name(message: Message, state: FSMContext):
    name = message.text or ""
    if not is_valid_name(name) or not name.strip():
        await message.answer("Имя — только буквы и пробелы. Отмена: /cancel")
        return

    store = await _session(message)
    store.form.name = name
    await state.set_state(Checkout.waiting_phone)
    await message.answer("2/2) Введите телефон (только цифры)\nОтмена: /cancel")


@router.message(Checkout.waiting_phone)
async def checkout_phone(message: Message, state: FSMContext):
    phone = message.text or ""
    if not is_valid_phone(phone) or not phone.strip():
        await message.answer("Телефон — только цифры. Отмена: /cancel")
        return

    store = await _session(message)
    store.form.phone = phone

    try:
        result = await store.submit_order()
    except OrderSubmissionError:
        # корзина и форма остаются, можно повторить /checkout
        await message.answer(ORDER_FAILED_TEXT)
        await state.clear()
        return

    await state.clear()
    if result is None:
        await message.answer("Корзина пуста или форма неверна. /cart", reply_markup=main_kb())
        return

    await message.answer(order_text(result), reply_markup=main_kb())
    try:
        pdf_path = generate_receipt_pdf(result)
        await message.answer_document(FSInputFile(pdf_path))
    except Exception as e:
        logger.error("Receipt for order %s was not sent: %s", result.number, e)
