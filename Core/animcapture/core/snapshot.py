from __future__ import annotations

import logging

from animcapture.config.schema import SnapshotSettings
from animcapture.core.exceptions import DomAccessError
from animcapture.core.metadata import ElementSnapshot, StyleSnapshot
from animcapture.core.selectors import SelectorResolver, is_framework_noise, is_hash_class
from animcapture.dom.protocol import ElementHandle

log = logging.getLogger(__name__)

EXCLUDED_ATTRIBUTES = frozenset({"style", "class"})


class SnapshotCapturer:
    """Captures structural and style snapshots of an element as plain values."""

    def __init__(self, resolver: SelectorResolver | None = None, settings: SnapshotSettings | None = None) -> None:
        self.resolver = resolver or SelectorResolver()
        self.settings = settings or SnapshotSettings()

    @property
    def style_properties(self) -> list[str]:
        return self.settings.style_properties

    def capture(self, element) -> tuple[ElementSnapshot, StyleSnapshot] | None:
        if not isinstance(element, ElementHandle):
            return None
        selector = self.resolver.generate(element)
        structural = self.capture_structural(element, selector=selector)
        style = self.capture_style(element, selector=selector)
        if structural is None or style is None:
            return None
        return structural, style

    def capture_structural(self, element, selector: str | None = None) -> ElementSnapshot | None:
        if not isinstance(element, ElementHandle):
            return None
        try:
            attributes = self.meaningful_attributes(element.attributes())
            classes = self.meaningful_classes(element.class_list())
            html = element.outer_html()[: self.settings.max_markup_length]
            text = element.direct_text().strip()[: self.settings.max_text_length]
        except DomAccessError as exc:
            log.debug("Structural capture failed: %s", exc)
            return None
        return ElementSnapshot(
            selector=selector or self.resolver.generate(element),
            html=html,
            attributes=attributes,
            classes=tuple(classes),
            text=text,
        )

    def capture_style(self, element, selector: str | None = None) -> StyleSnapshot | None:
        if not isinstance(element, ElementHandle):
            return None
        try:
            computed = element.computed_style(self.style_properties)
        except DomAccessError as exc:
            log.debug("Style capture failed: %s", exc)
            return None
        return StyleSnapshot(
            selector=selector or self.resolver.generate(element),
            computed={name: computed[name] for name in self.style_properties if computed.get(name)},
        )

    def meaningful_attributes(self, attributes: dict[str, str]) -> dict[str, str]:
        patterns = self.resolver.settings.ignored_patterns
        return {
            name: value
            for name, value in attributes.items()
            if name not in EXCLUDED_ATTRIBUTES and not any(name.startswith(pattern) for pattern in patterns)
        }

    def meaningful_classes(self, classes: list[str]) -> list[str]:
        patterns = self.resolver.settings.ignored_patterns
        meaningful: list[str] = []
        for name in classes:
            if is_framework_noise(name, patterns) or is_hash_class(name) or name in meaningful:
                continue
            meaningful.append(name)
        return meaningful
