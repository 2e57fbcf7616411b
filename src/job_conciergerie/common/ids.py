"""Device id helpers.

Employees can log in from several devices. Device ids awaiting approval are
stored with a ``$`` prefix.
"""
from __future__ import annotations

import secrets
import string
from typing import Iterable

from ..core.constants import NEW_DEVICE_PREFIX

_ALPHABET = string.ascii_lowercase + string.digits


def generate_simple_id(length: int = 22) -> str:
    return "".join(secrets.choice(_ALPHABET) for _ in range(length))


def strip_prefix(device_id: str) -> str:
    return device_id.replace(NEW_DEVICE_PREFIX, "")


def is_new_device(device_id: str) -> bool:
    return device_id.startswith(NEW_DEVICE_PREFIX)


def get_new_device(device_id: str) -> str:
    return NEW_DEVICE_PREFIX + device_id


def contains_id(ids: Iterable[str], device_id: str) -> bool:
    target = strip_prefix(device_id)
    return any(strip_prefix(i) == target for i in ids)
