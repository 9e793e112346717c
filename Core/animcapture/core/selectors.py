from __future__ import annotations

import logging
import re

from animcapture.config.schema import SelectorSettings
from animcapture.core.exceptions import DomAccessError, InvalidSelectorError
from animcapture.dom.protocol import ElementHandle

log = logging.getLogger(__name__)

HASH_CLASS_PATTERN = re.compile(r"^[a-z]+-[a-f0-9]{6,}$", re.IGNORECASE)
NUMERIC_PATTERN = re.compile(r"^\d+$")
FALLBACK_SELECTOR = "*"


def is_hash_class(class_name: str) -> bool:
    return bool(HASH_CLASS_PATTERN.match(class_name))


def is_framework_noise(name: str, patterns: list[str]) -> bool:
    return any(pattern in name for pattern in patterns)


class SelectorResolver:
    """Derives a durable CSS selector for an element.

    Tiers are tried in order: a preferred attribute, then meaningful classes,
    then a bounded structural path. The first two are only accepted when the
    selector matches exactly this element in its document; the structural
    path is always accepted.
    """

    def __init__(self, settings: SelectorSettings | None = None) -> None:
        self.settings = settings or SelectorSettings()
        self._prefix_pattern = self._build_prefix_pattern(self.settings.value_prefixes)

    def generate(self, element: ElementHandle) -> str:
        selector = self._attribute_selector(element)
        if selector and self.is_unique(element, selector):
            return selector
        if selector:
            log.debug("Attribute selector %s is not unique, trying classes", selector)

        selector = self._class_selector(element)
        if selector:
            return selector

        return self._structural_path(element)

    def is_unique(self, element: ElementHandle, selector: str) -> bool:
        try:
            matches = element.document.query_all(selector)
            return len(matches) == 1 and element.same_node(matches[0])
        except (InvalidSelectorError, DomAccessError) as exc:
            log.debug("Selector %s rejected: %s", selector, exc)
            return False

    def meaningful_classes(self, element: ElementHandle) -> list[str]:
        try:
            classes = element.class_list()
        except DomAccessError:
            return []
        return [name for name in classes if self._is_meaningful_class(name)]

    def clean_attribute_value(self, value: str) -> str:
        if self._prefix_pattern is None:
            return value
        return self._prefix_pattern.sub("", value, count=1)

    def _attribute_selector(self, element: ElementHandle) -> str | None:
        try:
            tag = element.tag_name
            for attribute in self.settings.preferred_attributes:
                value = element.get_attribute(attribute)
                if not value:
                    continue
                cleaned = self.clean_attribute_value(value)
                if cleaned:
                    return f'{tag}[{attribute}="{cleaned}"]'
        except DomAccessError as exc:
            log.debug("Attribute tier skipped: %s", exc)
        return None

    def _class_selector(self, element: ElementHandle) -> str | None:
        classes = self.meaningful_classes(element)
        if not classes:
            return None
        try:
            tag = element.tag_name
        except DomAccessError:
            return None
        for class_name in classes:
            selector = f"{tag}.{class_name}"
            if self.is_unique(element, selector):
                return selector
        if len(classes) > 1:
            selector = f"{tag}.{'.'.join(classes)}"
            if self.is_unique(element, selector):
                return selector
        log.debug("No unique class selector among %s", classes)
        return None

    def _structural_path(self, element: ElementHandle) -> str:
        path: list[str] = []
        current: ElementHandle | None = element
        depth = 0
        try:
            while current is not None and not current.is_document_root() and depth < self.settings.max_depth:
                step = current.tag_name
                index, count = current.same_tag_position()
                if count > 1:
                    step += f":nth-of-type({index})"
                path.insert(0, step)
                current = current.parent()
                depth += 1
        except DomAccessError as exc:
            log.debug("Structural walk stopped early: %s", exc)
        if path:
            return " > ".join(path)
        try:
            return element.tag_name or FALLBACK_SELECTOR
        except DomAccessError:
            return FALLBACK_SELECTOR

    def _is_meaningful_class(self, class_name: str) -> bool:
        if is_framework_noise(class_name, self.settings.ignored_patterns):
            return False
        if is_hash_class(class_name):
            return False
        if len(class_name) < 3 or NUMERIC_PATTERN.match(class_name):
            return False
        return True

    @staticmethod
    def _build_prefix_pattern(prefixes: list[str]) -> re.Pattern[str] | None:
        if not prefixes:
            return None
        return re.compile("^(" + "|".join(re.escape(prefix) for prefix in prefixes) + ")")
