"""
JSON-ready conversion of engine values.

Dataclasses become dicts, enums become their values, dates become ISO
strings and tuples become lists. Callable fields (rule conditions) are
dropped.
"""

from __future__ import annotations

import dataclasses
from datetime import date, datetime
from enum import Enum
from typing import Any


def to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_jsonable(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if not callable(getattr(value, f.name))
        }
    if isinstance(value, dict):
        return {_key(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        items = [to_jsonable(v) for v in value]
        if isinstance(value, (set, frozenset)):
            items.sort(key=str)
        return items
    return value


def _key(key: Any) -> Any:
    if isinstance(key, Enum):
        return key.value
    if isinstance(key, (str, int, float, bool)) or key is None:
        return key
    return str(key)
