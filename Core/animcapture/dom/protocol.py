from __future__ import annotations

from typing import Iterable, Protocol, runtime_checkable


@runtime_checkable
class DocumentHandle(Protocol):
    """Query surface of a page, live or parsed."""

    def query_all(self, selector: str) -> list["ElementHandle"]:
        """Returns every match of a CSS selector.

        Raises InvalidSelectorError for unparsable selectors and
        DomAccessError when the document cannot be queried.
        """


@runtime_checkable
class ElementHandle(Protocol):
    """Read-only view of one DOM element.

    Adapters raise DomAccessError when the node can no longer be read.
    """

    @property
    def tag_name(self) -> str: ...

    @property
    def document(self) -> DocumentHandle: ...

    def get_attribute(self, name: str) -> str | None: ...

    def attributes(self) -> dict[str, str]: ...

    def class_list(self) -> list[str]: ...

    def outer_html(self) -> str: ...

    def direct_text(self) -> str: ...

    def computed_style(self, properties: Iterable[str]) -> dict[str, str]: ...

    def parent(self) -> "ElementHandle | None": ...

    def same_tag_position(self) -> tuple[int, int]:
        """Returns (1-based index, count) among siblings sharing the tag."""

    def is_document_root(self) -> bool: ...

    def same_node(self, other: "ElementHandle") -> bool: ...
