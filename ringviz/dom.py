from __future__ import annotations
import re
from typing import List, Optional

from dominate import tags
from dominate.util import raw

# Minimal in-process DOM: a flat list of addressable elements, each owning an HTML
# fragment. It is the only surface the overlay logic writes to.

_root_class_pat = re.compile(r'^\s*<[A-Za-z][\w-]*\b[^>]*?\bclass="([^"]*)"')


def root_classes(html_fragment: str | None) -> List[str]:
    """Class names of the fragment's root tag ([] if it has none)."""
    if not html_fragment:
        return []
    m = _root_class_pat.match(html_fragment)
    if not m:
        return []
    return [c for c in m.group(1).split() if c]


class Element:
    def __init__(self, class_names: List[str], inner_html: str = "", *, tag: str = "div"):
        self.tag = tag
        self.class_names = list(class_names)
        self.inner_html = inner_html
        self.attached = True

    def has_class(self, name: str) -> bool:
        return name in self.class_names

    def render(self) -> str:
        node = getattr(tags, self.tag)(raw(self.inner_html or ""), _class=" ".join(self.class_names))
        return node.render(pretty=False)

    def __repr__(self) -> str:
        return f"Element({self.tag}, classes={self.class_names!r})"


class Document:
    """Holds mounted annotation nodes; lookups follow document (mount) order."""

    def __init__(self) -> None:
        self._elements: List[Element] = []

    def mount_html(self, html_fragment: str | None, *, container_class: str = "annotation-html") -> Element:
        """
        Mount an html annotation. The root tag's classes are hoisted onto the mounted
        node so it is addressable by class, the way the engine's html container is.
        """
        classes = [container_class] + [c for c in root_classes(html_fragment) if c != container_class]
        el = Element(classes, html_fragment or "")
        self._elements.append(el)
        return el

    def get_elements_by_class_name(self, name: str) -> List[Element]:
        return [el for el in self._elements if el.attached and el.has_class(name)]

    def first_by_class(self, name: str) -> Optional[Element]:
        found = self.get_elements_by_class_name(name)
        return found[0] if found else None

    def remove(self, el: Element) -> None:
        el.attached = False
        self._elements = [e for e in self._elements if e is not el]

    def elements(self) -> List[Element]:
        return list(self._elements)
