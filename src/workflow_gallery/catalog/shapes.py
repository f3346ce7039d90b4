"""Decode aggregate workflow documents whose top-level shape varies.

Recognised shapes, tried in order:

    list                       -> the items themselves
    {"workflows": [...]}       -> the ``workflows`` array
    {"0001": {...}, ...}       -> one item per numeric key (key becomes ``id``)
    {"...": [...many...]}      -> the single property holding a long array

Anything else decodes to kind="unrecognized" with no items.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Literal, Optional

ShapeKind = Literal["list", "workflows_property", "keyed_object", "data_array", "unrecognized"]

MIN_DATA_ARRAY_LENGTH = 10

_NUMERIC_KEY = re.compile(r"^\d+$")


@dataclass
class Decoded:
    kind: ShapeKind
    items: list[Any] = field(default_factory=list)
    source_key: Optional[str] = None

    @property
    def recognized(self) -> bool:
        return self.kind != "unrecognized"


def _as_list(document: Any) -> Optional[Decoded]:
    if isinstance(document, list):
        return Decoded("list", list(document))
    return None


def _as_workflows_property(document: Any) -> Optional[Decoded]:
    if isinstance(document, dict) and isinstance(document.get("workflows"), list):
        return Decoded("workflows_property", list(document["workflows"]), "workflows")
    return None


def _as_keyed_object(document: Any) -> Optional[Decoded]:
    if not isinstance(document, dict) or not document:
        return None
    if not all(_NUMERIC_KEY.match(str(key)) for key in document):
        return None
    items: list[Any] = []
    for key, value in document.items():
        if isinstance(value, dict) and "id" not in value:
            value = {"id": key, **value}
        items.append(value)
    return Decoded("keyed_object", items)


def _as_data_array(document: Any) -> Optional[Decoded]:
    if not isinstance(document, dict):
        return None
    candidates = [
        (key, value)
        for key, value in document.items()
        if isinstance(value, list) and len(value) > MIN_DATA_ARRAY_LENGTH
    ]
    if len(candidates) != 1:
        return None
    key, value = candidates[0]
    return Decoded("data_array", list(value), key)


DECODERS: tuple[Callable[[Any], Optional[Decoded]], ...] = (
    _as_list,
    _as_workflows_property,
    _as_keyed_object,
    _as_data_array,
)


def decode_aggregate(document: Any) -> Decoded:
    """Return the first shape that decodes ``document``."""
    for decoder in DECODERS:
        decoded = decoder(document)
        if decoded is not None:
            return decoded
    return Decoded("unrecognized")
