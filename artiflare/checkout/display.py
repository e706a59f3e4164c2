"""
Display helpers for names and phone numbers shown to people (and in emails).
"""

from __future__ import annotations

import re

from artiflare.schemas import User

_NON_DIGITS = re.compile(r"\D")


def format_phone_number(phone_number: str | None) -> str:
    """``(555) 123-4567`` for 10 digits, ``+1 (555) 123-4567`` for 11 starting with 1."""
    if not phone_number:
        return ""
    digits = _NON_DIGITS.sub("", phone_number)
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+1 ({digits[1:4]}) {digits[4:7]}-{digits[7:]}"
    return phone_number


def _has_real_name(user: User) -> bool:
    name = user.display_name
    return bool(name) and name != "User" and not name.startswith("User ")


def display_name(user: User | None) -> str:
    """The chosen name, else the formatted phone number, else ``User``."""
    if user is None:
        return "User"
    if _has_real_name(user):
        return user.display_name
    if user.phone_number:
        return format_phone_number(user.phone_number)
    return "User"


def initials(user: User | None) -> str:
    if user is None:
        return "U"
    if _has_real_name(user):
        return "".join(part[:1].upper() for part in user.display_name.split(" "))
    if user.phone_number:
        return user.phone_number[-4:]
    return "U"


def artisan_label(artisan: User | None) -> str:
    """Company name, then display name, then ``Artisan``."""
    if artisan is None:
        return "Artisan"
    return artisan.company_name or artisan.display_name or "Artisan"


__all__ = ("format_phone_number", "display_name", "initials", "artisan_label")
