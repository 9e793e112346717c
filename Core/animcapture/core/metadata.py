from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Hashable


class MutationKind(StrEnum):
    ATTRIBUTES = "attributes"
    CHILD_LIST = "childList"


class Intent(StrEnum):
    STYLE_CHANGE = "style-change"
    CONTENT_UPDATE = "content-update"
    DOM_RESTRUCTURE = "dom-restructure"
    ATTRIBUTE_CHANGE = "attribute-change"
    UNKNOWN = "unknown"


class EffectType(StrEnum):
    TRANSITION = "transition"
    ANIMATION = "animation"
    CLASS_TOGGLE = "class-toggle"
    DOM_MANIPULATION = "dom-manipulation"


@dataclass(frozen=True, slots=True)
class ElementSnapshot:
    selector: str
    html: str
    attributes: dict[str, str] = field(default_factory=dict)
    classes: tuple[str, ...] = ()
    text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "selector": self.selector,
            "html": self.html,
            "attributes": dict(self.attributes),
            "classes": list(self.classes),
            "text": self.text,
        }


@dataclass(frozen=True, slots=True)
class StyleSnapshot:
    selector: str
    computed: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"selector": self.selector, "computed": dict(self.computed)}


@dataclass(frozen=True, slots=True)
class PropertyChange:
    before: str
    after: str

    def to_dict(self) -> dict[str, str]:
        return {"from": self.before, "to": self.after}


@dataclass(frozen=True, slots=True)
class ClassChange:
    added: tuple[str, ...] = ()
    removed: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, list[str]]:
        return {"added": list(self.added), "removed": list(self.removed)}


@dataclass(frozen=True, slots=True)
class DiffRecord:
    attributes: dict[str, PropertyChange] = field(default_factory=dict)
    classes: ClassChange | None = None
    text: PropertyChange | None = None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.attributes:
            payload["attributes"] = {name: change.to_dict() for name, change in self.attributes.items()}
        if self.classes is not None:
            payload["classes"] = self.classes.to_dict()
        if self.text is not None:
            payload["text"] = self.text.to_dict()
        return payload


StyleDiff = dict[str, PropertyChange]


def style_diff_to_dict(diff: StyleDiff) -> dict[str, dict[str, str]]:
    return {name: change.to_dict() for name, change in diff.items()}


@dataclass(frozen=True, slots=True)
class MutationNotification:
    kind: MutationKind
    target: Hashable
    attribute_name: str | None = None
    target_tag: str = ""
    added_count: int = 0
    removed_count: int = 0
    old_value: str | None = None
    # Live handle for describing the target; not part of the value.
    element: Any = field(default=None, compare=False, repr=False)


@dataclass(frozen=True, slots=True)
class MutationBatch:
    notifications: tuple[MutationNotification, ...] = ()
    batch_id: int | None = None
    timestamp: float | None = None

    def __len__(self) -> int:
        return len(self.notifications)

    def __iter__(self):
        return iter(self.notifications)


@dataclass(frozen=True, slots=True)
class CompressedIntent:
    intent: Intent
    summary: str
    affected_element_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "intent": str(self.intent),
            "summary": self.summary,
            "affected_element_count": self.affected_element_count,
        }


@dataclass(frozen=True, slots=True)
class IntentRecord:
    timestamp: float
    intent: CompressedIntent
    changes: tuple[dict[str, Any], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            **self.intent.to_dict(),
            "changes": [dict(change) for change in self.changes],
        }


@dataclass(frozen=True, slots=True)
class InteractionEvent:
    kind: str
    x: float | None = None
    y: float | None = None
    value: str | None = None
    key: str | None = None

    @property
    def coordinates(self) -> tuple[float, float] | None:
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)


@dataclass(frozen=True, slots=True)
class InteractionRecord:
    timestamp: float
    event_kind: str
    selector: str
    coordinates: tuple[float, float] | None = None
    value: str | None = None
    key: str | None = None
    before_structural: ElementSnapshot | None = None
    before_style: StyleSnapshot | None = None
    after_structural: ElementSnapshot | None = None
    after_style: StyleSnapshot | None = None

    @property
    def is_complete(self) -> bool:
        return None not in (
            self.before_structural,
            self.before_style,
            self.after_structural,
            self.after_style,
        )


@dataclass(frozen=True, slots=True)
class Timing:
    duration: str
    easing: str | None = None
    delay: str | None = None

    def to_dict(self) -> dict[str, str]:
        payload = {"duration": self.duration}
        if self.easing is not None:
            payload["easing"] = self.easing
        if self.delay is not None:
            payload["delay"] = self.delay
        return payload


@dataclass(frozen=True, slots=True)
class Trigger:
    event_kind: str
    selector: str


@dataclass(frozen=True, slots=True)
class Effect:
    type: EffectType
    target: str
    properties: StyleDiff = field(default_factory=dict)
    timing: Timing | None = None


@dataclass(frozen=True, slots=True)
class AnimationProfile:
    name: str
    trigger: Trigger
    effect: Effect

    def to_dict(self) -> dict[str, Any]:
        effect: dict[str, Any] = {
            "type": str(self.effect.type),
            "target": self.effect.target,
            "properties": style_diff_to_dict(self.effect.properties),
        }
        if self.effect.timing is not None:
            effect["timing"] = self.effect.timing.to_dict()
        return {
            "name": self.name,
            "trigger": {"event_kind": self.trigger.event_kind, "selector": self.trigger.selector},
            "effect": effect,
        }


@dataclass(frozen=True, slots=True)
class CaptureToken:
    token_id: str


@dataclass(frozen=True, slots=True)
class NetworkRequest:
    url: str
    method: str
    status: int
    timing_ms: float
    timestamp: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"url": self.url, "method": self.method, "status": self.status, "timing": self.timing_ms}
