"""DOM access used by the link rewriter.

The rewriter only needs to select elements and mutate attributes or text, so
it talks to a :class:`PageDocument` instead of a concrete browser handle.
:class:`SoupDocument` implements it over the rendered HTML snapshot.
"""

from __future__ import annotations

from typing import Any, List, Optional, Protocol

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag


class PageDocument(Protocol):
    def select(self, selector: str) -> List[Any]:
        ...

    def get_attribute(self, element: Any, name: str) -> Optional[str]:
        ...

    def set_attribute(self, element: Any, name: str, value: str) -> None:
        ...

    def get_text(self, element: Any) -> str:
        ...

    def set_text(self, element: Any, text: str) -> None:
        ...

    def remove(self, element: Any) -> None:
        ...

    def serialize(self) -> str:
        ...


class SoupDocument:
    """``PageDocument`` backed by BeautifulSoup."""

    def __init__(self, html: str, parser: str = "html.parser") -> None:
        self.soup = BeautifulSoup(html, parser)

    def select(self, selector: str) -> List[Tag]:
        return list(self.soup.select(selector))

    def get_attribute(self, element: Tag, name: str) -> Optional[str]:
        value = element.get(name)
        if value is None:
            return None
        if isinstance(value, list):
            return " ".join(value)
        return str(value)

    def set_attribute(self, element: Tag, name: str, value: str) -> None:
        element[name] = value

    def get_text(self, element: Tag) -> str:
        # Direct text children only; <style> and <script> hold Stylesheet/Script strings.
        return "".join(child for child in element.children if isinstance(child, NavigableString))

    def set_text(self, element: Tag, text: str) -> None:
        current = element.string
        container = type(current) if current is not None else NavigableString
        element.string = container(text)

    def remove(self, element: Tag) -> None:
        element.decompose()

    def serialize(self) -> str:
        return str(self.soup)
