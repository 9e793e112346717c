"""Element handles over parsed HTML.

Used for saved page sources and for exercising the core without a browser.
There is no layout engine here, so ``computed_style`` reports the inline
``style`` declarations of the element.
"""

from __future__ import annotations

from typing import Iterable

from bs4 import BeautifulSoup, Comment, NavigableString, Tag
from soupsieve import SelectorSyntaxError

from animcapture.core.exceptions import DomAccessError, InvalidSelectorError


def parse_inline_style(declarations: str) -> dict[str, str]:
    styles: dict[str, str] = {}
    for declaration in declarations.split(";"):
        name, separator, value = declaration.partition(":")
        if not separator:
            continue
        name = name.strip().lower()
        value = value.strip()
        if name and value:
            styles[name] = value
    return styles


class SoupDocument:
    """Document handle backed by a BeautifulSoup tree."""

    def __init__(self, markup: str | BeautifulSoup, parser: str = "html.parser") -> None:
        self.soup = markup if isinstance(markup, BeautifulSoup) else BeautifulSoup(markup, parser)

    def query_all(self, selector: str) -> list["SoupElement"]:
        try:
            matches = self.soup.select(selector)
        except SelectorSyntaxError as exc:
            raise InvalidSelectorError(str(exc)) from exc
        return [SoupElement(tag, self) for tag in matches]

    def query(self, selector: str) -> "SoupElement":
        matches = self.query_all(selector)
        if not matches:
            raise DomAccessError(f"No element matches {selector!r}")
        return matches[0]

    def root(self) -> "SoupElement":
        html = self.soup.find("html")
        if html is None:
            html = self.soup.find(True)
        if html is None:
            raise DomAccessError("Document has no elements")
        return SoupElement(html, self)

    def element_for(self, tag: Tag) -> "SoupElement":
        return SoupElement(tag, self)


class SoupElement:
    """Element handle over a single bs4 Tag."""

    def __init__(self, tag: Tag, document: SoupDocument) -> None:
        self.tag = tag
        self._document = document

    def __repr__(self) -> str:
        return f"SoupElement(<{self.tag.name}>)"

    @property
    def tag_name(self) -> str:
        return self.tag.name.lower()

    @property
    def document(self) -> SoupDocument:
        return self._document

    def get_attribute(self, name: str) -> str | None:
        return self.attributes().get(name)

    def attributes(self) -> dict[str, str]:
        attributes: dict[str, str] = {}
        for name, value in self.tag.attrs.items():
            attributes[name] = " ".join(value) if isinstance(value, list) else str(value)
        return attributes

    def class_list(self) -> list[str]:
        classes = self.tag.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        return list(classes)

    def outer_html(self) -> str:
        return str(self.tag)

    def direct_text(self) -> str:
        parts = [
            str(child)
            for child in self.tag.children
            if isinstance(child, NavigableString) and not isinstance(child, Comment)
        ]
        return "".join(parts)

    def computed_style(self, properties: Iterable[str]) -> dict[str, str]:
        inline = parse_inline_style(self.attributes().get("style", ""))
        return {name: inline[name] for name in properties if inline.get(name)}

    def parent(self) -> "SoupElement | None":
        parent = self.tag.parent
        if parent is None or isinstance(parent, BeautifulSoup):
            return None
        return SoupElement(parent, self._document)

    def same_tag_position(self) -> tuple[int, int]:
        parent = self.tag.parent
        if parent is None:
            return (1, 1)
        siblings = parent.find_all(self.tag.name, recursive=False)
        for index, sibling in enumerate(siblings, start=1):
            if sibling is self.tag:
                return (index, len(siblings))
        return (1, 1)

    def is_document_root(self) -> bool:
        return isinstance(self.tag.parent, BeautifulSoup) and self.tag is self._document.soup.find(True)

    def same_node(self, other) -> bool:
        return isinstance(other, SoupElement) and other.tag is self.tag
