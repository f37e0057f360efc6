import re

NAME_RE = re.compile(r"[A-Za-z\s]+")
PHONE_RE = re.compile(r"[0-9]+")


def is_valid_name(name: str) -> bool:
    return bool(NAME_RE.fullmatch(name or ""))


def is_valid_phone(phone: str) -> bool:
    return bool(PHONE_RE.fullmatch(phone or ""))


def can_checkout(name: str, phone: str) -> bool:
    return (
        is_valid_name(name)
        and is_valid_phone(phone)
        and (name or "").strip() != ""
        and (phone or "").strip() != ""
    )
