from typing import Dict

from aiogram.fsm.state import State, StatesGroup

from lessonshop.services.storefront import Storefront


class Checkout(StatesGroup):
    waiting_name = State()
    waiting_phone = State()


SESSIONS: Dict[int, Storefront] = {}  # chat_id -> storefront session
