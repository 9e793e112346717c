from __future__ import annotations

import logging
import re
from typing import Iterable

from animcapture.config.schema import DEFAULT_STYLE_PROPERTIES
from animcapture.core.diff import diff_style
from animcapture.core.metadata import (
    AnimationProfile,
    Effect,
    EffectType,
    InteractionRecord,
    StyleDiff,
    Timing,
    Trigger,
)

log = logging.getLogger(__name__)

_NTH_OF_TYPE = re.compile(r":nth-of-type\([^)]*\)")
_IDENTIFIER = re.compile(r"[A-Za-z0-9_-]+")
# Combinators inside an attribute block belong to its value.
_COMBINATOR = re.compile(r"(?:\s*[>+~]\s*|\s+)(?![^\[]*\])")
_TRAILING_ATTRIBUTE_VALUE = re.compile(r"""\[[^\]=]*=\s*(["']?)(.*?)\1\s*\]$""")


def selector_label(selector: str) -> str:
    """Returns the trailing identifier of a selector.

    ``button.cta`` gives ``cta``; a trailing attribute block gives its value,
    so ``button[aria-label="Add to cart"]`` gives ``Add-to-cart``.
    """

    compounds = [part for part in _COMBINATOR.split(selector.strip()) if part]
    if not compounds:
        return "element"
    compound = _NTH_OF_TYPE.sub("", compounds[-1])
    match = _TRAILING_ATTRIBUTE_VALUE.search(compound)
    if match:
        words = _IDENTIFIER.findall(match.group(2))
        if words:
            return "-".join(words)
    identifiers = _IDENTIFIER.findall(compound)
    return identifiers[-1] if identifiers else "element"


def synthesize(
    records: Iterable[InteractionRecord],
    properties: Iterable[str] = DEFAULT_STYLE_PROPERTIES,
) -> list[AnimationProfile]:
    """Turns interaction records into animation profiles.

    Records are grouped by selector in order of first appearance. Each record
    with a complete snapshot pair and a significant style change yields one
    profile; identical records yield identical profiles.
    """

    properties = list(properties)
    groups: dict[str, list[InteractionRecord]] = {}
    for record in records:
        groups.setdefault(record.selector, []).append(record)

    profiles: list[AnimationProfile] = []
    for selector, group in groups.items():
        for record in group:
            if not record.is_complete:
                log.debug("Skipping incomplete record for %s", selector)
                continue
            changes = diff_style(record.before_style, record.after_style, properties)
            if not changes:
                continue
            profiles.append(_build_profile(record, changes))
    return profiles


def classify_effect(record: InteractionRecord, changes: StyleDiff) -> EffectType:
    if len(record.after_structural.classes) != len(record.before_structural.classes):
        return EffectType.CLASS_TOGGLE
    if "animation-name" in changes:
        return EffectType.ANIMATION
    return EffectType.TRANSITION


def extract_timing(record: InteractionRecord, changes: StyleDiff) -> Timing | None:
    # Gated on the shorthand key, not on transition-duration.
    if "transition" not in changes:
        return None
    computed = record.after_style.computed
    return Timing(
        duration=computed.get("transition-duration") or "0s",
        easing=computed.get("transition-timing-function") or "ease",
        delay=computed.get("transition-delay") or None,
    )


def _build_profile(record: InteractionRecord, changes: StyleDiff) -> AnimationProfile:
    return AnimationProfile(
        name=f"{record.event_kind}-on-{selector_label(record.selector)}",
        trigger=Trigger(event_kind=record.event_kind, selector=record.selector),
        effect=Effect(
            type=classify_effect(record, changes),
            target=record.selector,
            properties=changes,
            timing=extract_timing(record, changes),
        ),
    )
