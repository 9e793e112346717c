from __future__ import annotations

from typing import Any, Iterable

from selenium.common.exceptions import InvalidSelectorException, WebDriverException
from selenium.webdriver.common.by import By

from animcapture.core.exceptions import DomAccessError, InvalidSelectorError

ATTRIBUTES_SCRIPT = """
const attrs = {};
for (const attr of arguments[0].attributes) {
  attrs[attr.name] = attr.value;
}
return attrs;
"""

CLASS_LIST_SCRIPT = "return Array.from(arguments[0].classList);"

OUTER_HTML_SCRIPT = "return arguments[0].outerHTML;"

DIRECT_TEXT_SCRIPT = """
let text = "";
for (const node of arguments[0].childNodes) {
  if (node.nodeType === Node.TEXT_NODE) text += node.textContent || "";
}
return text;
"""

COMPUTED_STYLE_SCRIPT = """
const computed = window.getComputedStyle(arguments[0]);
const styles = {};
for (const prop of arguments[1]) {
  const value = computed.getPropertyValue(prop);
  if (value) styles[prop] = value;
}
return styles;
"""

PARENT_SCRIPT = "return arguments[0].parentElement;"

SAME_TAG_POSITION_SCRIPT = """
const node = arguments[0];
const parent = node.parentElement;
if (!parent) return [1, 1];
const sameTag = Array.from(parent.children).filter((sibling) => sibling.tagName === node.tagName);
return [sameTag.indexOf(node) + 1, sameTag.length];
"""

IS_DOCUMENT_ROOT_SCRIPT = "return arguments[0] === document.documentElement;"


class SeleniumDocument:
    """Document handle over the page loaded in a WebDriver session."""

    def __init__(self, driver) -> None:
        self.driver = driver

    def query_all(self, selector: str) -> list["SeleniumElement"]:
        try:
            matches = self.driver.find_elements(By.CSS_SELECTOR, selector)
        except InvalidSelectorException as exc:
            raise InvalidSelectorError(str(exc)) from exc
        except WebDriverException as exc:
            raise DomAccessError(str(exc)) from exc
        return [SeleniumElement(self, match) for match in matches]

    def execute(self, script: str, *args: Any) -> Any:
        try:
            return self.driver.execute_script(script, *args)
        except WebDriverException as exc:
            raise DomAccessError(str(exc)) from exc


class SeleniumElement:
    """Element handle over a live WebElement; every read goes to the page."""

    def __init__(self, document: SeleniumDocument, web_element) -> None:
        self._document = document
        self.web_element = web_element

    @classmethod
    def wrap(cls, driver, web_element) -> "SeleniumElement":
        return cls(SeleniumDocument(driver), web_element)

    @property
    def tag_name(self) -> str:
        try:
            return self.web_element.tag_name.lower()
        except WebDriverException as exc:
            raise DomAccessError(str(exc)) from exc

    @property
    def document(self) -> SeleniumDocument:
        return self._document

    def get_attribute(self, name: str) -> str | None:
        try:
            return self.web_element.get_dom_attribute(name)
        except WebDriverException as exc:
            raise DomAccessError(str(exc)) from exc

    def attributes(self) -> dict[str, str]:
        return self._document.execute(ATTRIBUTES_SCRIPT, self.web_element) or {}

    def class_list(self) -> list[str]:
        return list(self._document.execute(CLASS_LIST_SCRIPT, self.web_element) or [])

    def outer_html(self) -> str:
        return self._document.execute(OUTER_HTML_SCRIPT, self.web_element) or ""

    def direct_text(self) -> str:
        return self._document.execute(DIRECT_TEXT_SCRIPT, self.web_element) or ""

    def computed_style(self, properties: Iterable[str]) -> dict[str, str]:
        return self._document.execute(COMPUTED_STYLE_SCRIPT, self.web_element, list(properties)) or {}

    def parent(self) -> "SeleniumElement | None":
        parent = self._document.execute(PARENT_SCRIPT, self.web_element)
        if parent is None:
            return None
        return SeleniumElement(self._document, parent)

    def same_tag_position(self) -> tuple[int, int]:
        index, count = self._document.execute(SAME_TAG_POSITION_SCRIPT, self.web_element)
        return int(index), int(count)

    def is_document_root(self) -> bool:
        return bool(self._document.execute(IS_DOCUMENT_ROOT_SCRIPT, self.web_element))

    def same_node(self, other) -> bool:
        live = getattr(other, "live", other)
        return isinstance(live, SeleniumElement) and live.web_element == self.web_element


class RecordedElement:
    """Element state captured in-page at one instant, tied to its live node.

    Content reads come from the recorded state; structure and identity are
    delegated to the live element so the selector resolver can still query
    the page.
    """

    def __init__(self, state: dict[str, Any], live: SeleniumElement) -> None:
        self.state = state
        self.live = live

    @property
    def tag_name(self) -> str:
        return (self.state.get("tag") or self.live.tag_name).lower()

    @property
    def document(self) -> SeleniumDocument:
        return self.live.document

    def get_attribute(self, name: str) -> str | None:
        return self.attributes().get(name)

    def attributes(self) -> dict[str, str]:
        return dict(self.state.get("attributes") or {})

    def class_list(self) -> list[str]:
        return list(self.state.get("classes") or [])

    def outer_html(self) -> str:
        return self.state.get("html") or ""

    def direct_text(self) -> str:
        return self.state.get("text") or ""

    def computed_style(self, properties: Iterable[str]) -> dict[str, str]:
        recorded = self.state.get("styles") or {}
        return {name: recorded[name] for name in properties if recorded.get(name)}

    def parent(self) -> SeleniumElement | None:
        return self.live.parent()

    def same_tag_position(self) -> tuple[int, int]:
        return self.live.same_tag_position()

    def is_document_root(self) -> bool:
        return self.live.is_document_root()

    def same_node(self, other) -> bool:
        return self.live.same_node(other)
