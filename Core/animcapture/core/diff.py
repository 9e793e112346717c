"""Reduces before/after snapshot pairs to their significant changes."""

from __future__ import annotations

import re
from typing import Iterable, Mapping

from animcapture.config.schema import DEFAULT_STYLE_PROPERTIES
from animcapture.core.metadata import (
    ClassChange,
    DiffRecord,
    ElementSnapshot,
    PropertyChange,
    StyleDiff,
    StyleSnapshot,
)

GEOMETRY_PROPERTIES = frozenset({"width", "height", "top", "left", "right", "bottom"})
GEOMETRY_THRESHOLD = 1.0
OPACITY_THRESHOLD = 0.01

# Same prefix rule as JavaScript's parseFloat: "12.5px" -> 12.5, "auto" -> None.
_LEADING_FLOAT = re.compile(r"^\s*[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def parse_leading_float(value: str) -> float | None:
    match = _LEADING_FLOAT.match(str(value) if value is not None else "")
    if match is None:
        return None
    return float(match.group(0))


def is_significant_change(property_name: str, before: str, after: str) -> bool:
    if not before and not after:
        return False
    if property_name in GEOMETRY_PROPERTIES:
        threshold = GEOMETRY_THRESHOLD
    elif property_name == "opacity":
        threshold = OPACITY_THRESHOLD
    else:
        return True
    before_number = parse_leading_float(before)
    after_number = parse_leading_float(after)
    if before_number is None or after_number is None:
        return True
    return abs(after_number - before_number) >= threshold


def diff_structural(before: ElementSnapshot | None, after: ElementSnapshot | None) -> DiffRecord | None:
    """Returns the attribute, class and text changes, or None when there are none."""

    if before is None or after is None:
        return None

    attributes = _diff_attributes(before.attributes, after.attributes)

    before_classes = set(before.classes)
    after_classes = set(after.classes)
    added = tuple(name for name in after.classes if name not in before_classes)
    removed = tuple(name for name in before.classes if name not in after_classes)
    classes = ClassChange(added=added, removed=removed) if added or removed else None

    before_text = (before.text or "").strip()
    after_text = (after.text or "").strip()
    text = None
    if before_text != after_text and (before_text or after_text):
        text = PropertyChange(before=before_text, after=after_text)

    if not attributes and classes is None and text is None:
        return None
    return DiffRecord(attributes=attributes, classes=classes, text=text)


def diff_style(
    before: StyleSnapshot | Mapping[str, str] | None,
    after: StyleSnapshot | Mapping[str, str] | None,
    properties: Iterable[str] = DEFAULT_STYLE_PROPERTIES,
) -> StyleDiff:
    before_values = _computed(before)
    after_values = _computed(after)
    changes: StyleDiff = {}
    for name in properties:
        old = before_values.get(name, "")
        new = after_values.get(name, "")
        if old != new and is_significant_change(name, old, new):
            changes[name] = PropertyChange(before=old, after=new)
    return changes


def _diff_attributes(before: Mapping[str, str], after: Mapping[str, str]) -> dict[str, PropertyChange]:
    changes: dict[str, PropertyChange] = {}
    for name in [*before, *(key for key in after if key not in before)]:
        old = before.get(name, "")
        new = after.get(name, "")
        if old != new:
            changes[name] = PropertyChange(before=old, after=new)
    return changes


def _computed(style: StyleSnapshot | Mapping[str, str] | None) -> dict[str, str]:
    if style is None:
        return {}
    values = style.computed if isinstance(style, StyleSnapshot) else style
    # Malformed values are compared as opaque strings.
    return {name: "" if value is None else str(value) for name, value in values.items()}
