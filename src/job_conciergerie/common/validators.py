from __future__ import annotations

import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

EMAIL_RE = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
FRENCH_PHONE_RE = re.compile(r"^(?:(?:\+|00)33|0)\s*[1-9](?:[\s.-]*\d{2}){4}$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} est requis")
    return str(value).strip()


def require_email(value: Optional[str], field_name: str = "Email") -> str:
    email = require_non_empty(value, field_name)
    if not EMAIL_RE.match(email):
        raise ValidationError(f"{field_name} invalide")
    return email


def require_french_phone(value: Optional[str], field_name: str = "Téléphone") -> str:
    tel = require_non_empty(value, field_name)
    if not FRENCH_PHONE_RE.match(tel):
        raise ValidationError(f"{field_name} invalide")
    return tel


def require_non_negative_number(value: Any, field_name: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} doit être un nombre")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} doit être un nombre")
    if number < 0:
        raise ValidationError(f"{field_name} doit être positif")
    return number


def clean_string_list(values: Any) -> list[str]:
    """Trim every item and drop the blank ones."""
    if not values:
        return []
    if isinstance(values, str):
        values = [values]
    return [str(v).strip() for v in values if v is not None and str(v).strip()]
