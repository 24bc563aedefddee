"""Text-region scanners for build descriptors.

Build files are patched as text, without a full parser.  Two dialects are
supported:

* ``brace`` -- Gradle style ``name { ... }`` blocks that nest arbitrarily.
  The true end of a block is found with a depth counter.
* ``tag`` -- Maven style ``<name>...</name>`` pairs.  The tags used here
  never nest inside themselves, so a plain start/end search is enough.

Every function in this module is pure and returns ``None`` instead of
raising when a region cannot be found.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Iterator, Literal

Dialect = Literal["brace", "tag"]

_QUOTES = ("'", '"')


# ---------------------------------------------------------------------------
# Brace dialect
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BlockSpan:
    """Location of a ``header { ... }`` block.

    ``start`` is the index of the header, ``open_index`` the index of the
    block's own ``{`` and ``close_index`` the index of its matching ``}``.
    """
    start: int
    open_index: int
    close_index: int

    @property
    def body_start(self) -> int:
        return self.open_index + 1

    @property
    def end(self) -> int:
        """Index just past the closing brace."""
        return self.close_index + 1

    def body(self, text: str) -> str:
        return text[self.body_start:self.close_index]


def _skip_literal(text: str, index: int) -> int:
    """Return the index of the quote closing the literal opened at *index*."""
    quote = text[index]
    i = index + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or ch == "\n":
            return i
        i += 1
    return len(text) - 1


def find_block_end(text: str, open_index: int) -> int | None:
    """Index of the ``}`` closing the block whose ``{`` is at *open_index*.

    Walks the characters after the opening brace with a depth counter:
    every ``{`` increments it, every ``}`` decrements it, and the brace
    that would take it below zero closes the block.  Braces inside quoted
    literals are ignored.  Returns ``None`` for an unbalanced block.
    """
    if open_index < 0 or open_index >= len(text) or text[open_index] != "{":
        return None

    depth = 0
    i = open_index + 1
    while i < len(text):
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_literal(text, i)
        elif ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return None


def brace_depth_at(text: str, index: int) -> int:
    """Nesting depth of position *index* (0 = top level)."""
    depth = 0
    i = 0
    limit = min(index, len(text))
    while i < limit:
        ch = text[i]
        if ch in _QUOTES:
            i = _skip_literal(text, i)
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
        i += 1
    return depth


def _block_candidates(text: str, header: str) -> Iterator[tuple[BlockSpan, int]]:
    """Every balanced ``header { ... }`` block with the depth of its header."""
    pattern = re.compile(r"(?<![\w.$])" + re.escape(header) + r"\s*\{")
    for match in pattern.finditer(text):
        open_index = match.end() - 1
        close_index = find_block_end(text, open_index)
        if close_index is None:
            continue
        yield BlockSpan(match.start(), open_index, close_index), brace_depth_at(text, match.start())


def find_block(text: str, header: str) -> BlockSpan | None:
    """Locate the first ``header { ... }`` block, preferring top-level matches.

    A nested match (``buildscript { dependencies { ... } }``) is only used
    when no top-level block with that header exists.
    """
    fallback: BlockSpan | None = None
    for span, depth in _block_candidates(text, header):
        if depth == 0:
            return span
        if fallback is None:
            fallback = span
    return fallback


def find_top_level_block(text: str, header: str) -> BlockSpan | None:
    """Like :func:`find_block` but never falls back to a nested block."""
    for span, depth in _block_candidates(text, header):
        if depth == 0:
            return span
    return None


# ---------------------------------------------------------------------------
# Tag dialect
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TagSpan:
    """Location of ``<tag>...</tag>``; ``end`` is just past the end tag."""
    start: int
    inner_start: int
    inner_end: int
    end: int

    def inner(self, text: str) -> str:
        return text[self.inner_start:self.inner_end]

    def contains(self, index: int) -> bool:
        return self.start <= index < self.end


def find_tag(text: str, tag: str, start: int = 0) -> TagSpan | None:
    """First ``<tag>...</tag>`` pair at or after *start*.

    Self-closing ``<tag/>`` elements are not pairs and are skipped; see
    :func:`expand_empty_tags`.
    """
    opening = re.compile(r"<" + re.escape(tag) + r"(?:\s[^>]*)?(?<!/)>")
    match = opening.search(text, start)
    if match is None:
        return None
    closing = f"</{tag}>"
    inner_end = text.find(closing, match.end())
    if inner_end == -1:
        return None
    return TagSpan(match.start(), match.end(), inner_end, inner_end + len(closing))


def find_all_tags(text: str, tag: str) -> list[TagSpan]:
    spans: list[TagSpan] = []
    position = 0
    while True:
        span = find_tag(text, tag, position)
        if span is None:
            return spans
        spans.append(span)
        position = span.end


def find_top_level_tag(
    text: str, tag: str, excluded: Iterable[str] = ()
) -> TagSpan | None:
    """First ``<tag>`` pair that does not sit inside any *excluded* region.

    Used to tell the project's own ``<dependencies>`` apart from the one
    inside ``<dependencyManagement>`` or a plugin declaration.
    """
    regions = [span for name in excluded for span in find_all_tags(text, name)]
    for span in find_all_tags(text, tag):
        if not any(region.contains(span.start) for region in regions):
            return span
    return None


def expand_empty_tags(text: str, tags: Iterable[str]) -> str:
    """Rewrite self-closing ``<tag/>`` elements as empty start/end pairs.

    The end tag goes on its own line with the indentation of the line the
    element sat on, so later insertions land inside the element.
    """
    for tag in tags:
        pattern = re.compile(r"<" + re.escape(tag) + r"\s*/>")

        def _expand(match: re.Match[str], tag: str = tag) -> str:
            line_start = text.rfind("\n", 0, match.start()) + 1
            prefix = text[line_start:match.start()]
            indent = prefix[: len(prefix) - len(prefix.lstrip(" \t"))]
            return f"<{tag}>\n{indent}</{tag}>"

        text = pattern.sub(_expand, text)
    return text


# ---------------------------------------------------------------------------
# Insertion helpers
# ---------------------------------------------------------------------------

def insert_before_line(text: str, index: int, block: str, indent: str = "") -> str:
    """Insert *block* (newline-terminated lines) ahead of the line holding *index*.

    When *index* is preceded only by indentation on its line the block goes
    at the start of that line; otherwise it is placed on a new line and
    *indent* restores the indentation of the text that followed.
    """
    line_start = text.rfind("\n", 0, index) + 1
    if text[line_start:index].strip() == "":
        return text[:line_start] + block + text[line_start:]
    return text[:index] + "\n" + block + indent + text[index:]


# ---------------------------------------------------------------------------
# Whitespace normalisation
# ---------------------------------------------------------------------------

def _collapse_line(line: str, dialect: Dialect, state: dict[str, object]) -> str:
    """Collapse interior runs of spaces on one line.

    Runs are collapsed only where it cannot change meaning: never in the
    leading indentation, never inside a quoted literal, never after a
    ``//`` comment marker (brace dialect) and, for the tag dialect, only
    inside ``<...>`` markup so element text content is left untouched.
    """
    stripped = line.lstrip(" \t")
    out = [line[: len(line) - len(stripped)]]
    quote = state.get("quote")
    in_markup = bool(state.get("in_markup"))
    prev_space = False

    i = 0
    while i < len(stripped):
        ch = stripped[i]

        if quote is not None:
            out.append(ch)
            if ch == quote:
                quote = None
            i += 1
            prev_space = False
            continue

        if dialect == "brace" and stripped.startswith("//", i):
            out.append(stripped[i:])
            break

        collapsible = dialect == "brace" or in_markup
        if ch == " " and collapsible:
            if not prev_space:
                out.append(ch)
            prev_space = True
            i += 1
            continue
        prev_space = False

        if ch in _QUOTES and (dialect == "brace" or in_markup):
            quote = ch
        elif dialect == "tag" and ch == "<":
            in_markup = True
        elif dialect == "tag" and ch == ">":
            in_markup = False
        out.append(ch)
        i += 1

    if dialect == "tag":
        state["quote"] = quote
        state["in_markup"] = in_markup
    return "".join(out)


def normalize_whitespace(text: str, dialect: Dialect) -> str:
    """Tidy a patched build file.

    Trailing spaces are removed, interior space runs are collapsed (see
    :func:`_collapse_line`), three or more consecutive newlines become
    two, and the result ends with exactly one newline.  The function is
    idempotent.
    """
    state: dict[str, object] = {}
    lines = [_collapse_line(line.rstrip(" \t"), dialect, state) for line in text.split("\n")]
    collapsed = "\n".join(line.rstrip(" \t") for line in lines)
    collapsed = re.sub(r"\n{3,}", "\n\n", collapsed)
    return collapsed.strip("\n") + "\n"
