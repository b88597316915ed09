"""Content-based lookup and in-place text replacement over rendered HTML.

Matching policy for replacements: a plain-text replace inside a single text
node comes first, so surrounding markup is untouched. Next the node's
serialized markup is searched and rewritten. Last, a fragment that spans
several inline elements is rewritten across the text nodes it covers, keeping
the elements themselves. All paths replace the first occurrence only.
"""
import asyncio
import html
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from bs4 import BeautifulSoup, NavigableString, Tag

PARSER = "html.parser"


class DocumentIndex(ABC):
    @abstractmethod
    def find_first_containing(self, text: str, tag: str = "*", root=None):
        """Innermost element (of `tag`) whose text contains `text`, or None."""

    @abstractmethod
    def replace_fragment(self, node, old: str, new: str) -> bool:
        """Replace the first `old` under `node` with `new`. False if absent."""

    @abstractmethod
    def select(self, selector: str, root=None) -> list:
        """All nodes matching a CSS selector."""

    def select_first(self, selector: str, root=None):
        found = self.select(selector, root)
        return found[0] if found else None


class HtmlDocument(DocumentIndex):
    """A parsed page that remembers its unpatched markup."""

    def __init__(self, markup: str = ""):
        self.load(markup)

    def load(self, markup: str):
        """Replace the page content; the new markup becomes the baseline."""
        self.baseline = markup
        self.soup = BeautifulSoup(markup, PARSER)

    def restore_baseline(self):
        self.soup = BeautifulSoup(self.baseline, PARSER)

    @property
    def html(self) -> str:
        return str(self.soup)

    @property
    def text(self) -> str:
        return self.soup.get_text()

    def find_first_containing(self, text: str, tag: str = "*", root=None) -> Optional[Tag]:
        root = self.soup if root is None else root
        name = True if tag in (None, "*") else tag
        for el in root.find_all(name):
            if text not in el.get_text():
                continue
            # a deeper element of the same kind holds the whole phrase
            if any(text in child.get_text() for child in el.find_all(name)):
                continue
            return el
        return None

    def replace_fragment(self, node, old: str, new: str) -> bool:
        if node is None or not old:
            return False
        for s in node.find_all(string=True):
            if type(s) is NavigableString and old in s:
                s.replace_with(NavigableString(s.replace(old, new, 1)))
                return True

        markup = node.decode_contents()
        old_markup = html.escape(old, quote=False)
        if old_markup in markup:
            patched = markup.replace(old_markup, html.escape(new, quote=False), 1)
            fragment = BeautifulSoup(patched, PARSER)
            node.clear()
            for child in list(fragment.contents):
                node.append(child.extract())
            return True

        return self._replace_across_strings(node, old, new)

    def _replace_across_strings(self, node, old: str, new: str) -> bool:
        strings = [s for s in node.find_all(string=True) if type(s) is NavigableString]
        start = "".join(strings).find(old)
        if start < 0:
            return False
        end = start + len(old)
        offset = 0
        for s in strings:
            s_start, s_end = offset, offset + len(s)
            offset = s_end
            if s_end <= start or s_start >= end:
                continue
            head = s[:start - s_start] if s_start < start else ""
            tail = s[end - s_start:] if s_end > end else ""
            # the replacement lands in the first text node the fragment touches
            body = new if s_start <= start else ""
            s.replace_with(NavigableString(head + body + tail))
        return True

    def select(self, selector: str, root=None) -> list:
        root = self.soup if root is None else root
        return root.select(selector)


async def wait_for_elements(
    index: DocumentIndex,
    selector: str,
    timeout: float = 5.0,
    interval: float = 0.1,
    clock: Callable[[], float] = time.monotonic,
) -> list:
    """Poll until `selector` matches something; [] once the deadline passes."""
    deadline = clock() + timeout
    while True:
        found = index.select(selector)
        if found:
            return found
        if clock() >= deadline:
            return []
        await asyncio.sleep(interval)
