import pytest

from lessonshop.bot.handlers import cart_text, lessons_text, order_text, parse_sort_args
from lessonshop.services.storefront import Storefront


@pytest.fixture
async def store(api):
    s = Storefront(api=api, catalog_source="static")
    await s.load_catalog()
    return s


@pytest.mark.parametrize(
    "text, expected",
    [
        ("/lessons", (None, None)),
        ("/lessons price", ("price", None)),
        ("/lessons desc", (None, "desc")),
        ("/lessons Location DESC", ("location", "desc")),
    ],
)
def test_parse_sort_args(text, expected):
    assert parse_sort_args(text) == expected


def test_parse_sort_args_rejects_unknown():
    with pytest.raises(ValueError):
        parse_sort_args("/lessons colour")


async def test_lessons_text(store):
    store.set_sort("price", "asc")
    text = lessons_text(store)
    assert text.index("Sports") < text.index("Art")
    assert "городов: 8" in text
    assert "Lessons" not in text


async def test_cart_text(store):
    assert "Корзина пуста" in cart_text(store)
    store.cart.add(1)
    store.cart.add(6)
    text = cart_text(store)
    assert "1. Math — London" in text
    assert "2. Art — London" in text
    assert "Итого: 210.00" in text
    assert "Total" not in text


async def test_order_text(store):
    store.cart.add(1)
    store.cart.add(1)
    store.form.name = "John Smith"
    store.form.phone = "1234567890"
    result = await store.submit_order()
    await store.pending_sync()

    text = order_text(result)
    assert "Заказ оформлен" in text
    assert "Имя: John Smith" in text
    assert "Всего мест: 2" in text
    assert "Итого: 200.00" in text
