# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Markdown text to Notion block conversion.

:func:`to_blocks` understands a small markdown subset: ``#``/``##``/``###``
headings, ``-``/``*`` bullets, ``1.`` numbered items, ``- [ ]``/``- [x]``
to-dos, ``>`` quotes, ``---`` dividers, fenced code blocks and paragraphs.
:class:`BlockEnhancer` normalizes block-type aliases before blocks are sent.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Optional

_HEADING_RE = re.compile(r"^(#{1,3})\s+(.*)$")
_TODO_RE = re.compile(r"^[-*]\s+\[([ xX])\]\s+(.*)$")
_BULLET_RE = re.compile(r"^[-*]\s+(.*)$")
_NUMBERED_RE = re.compile(r"^\d+[.)]\s+(.*)$")
_DIVIDER_RE = re.compile(r"^(-{3,}|\*{3,}|_{3,})$")
_FENCE_RE = re.compile(r"^```\s*([\w+-]*)\s*$")

# Notion rejects rich text items longer than this
MAX_TEXT_LENGTH = 2000
# and more than this many blocks in one create or append request
MAX_BLOCKS_PER_REQUEST = 100


def rich_text(text: str) -> List[Dict[str, Any]]:
    """Split ``text`` into rich text items of at most :data:`MAX_TEXT_LENGTH` characters."""
    return [
        {"type": "text", "text": {"content": text[i : i + MAX_TEXT_LENGTH]}}
        for i in range(0, len(text), MAX_TEXT_LENGTH)
    ]


def make_block(block_type: str, text: str = "", **extra: Any) -> Dict[str, Any]:
    """Build a text-bearing block of ``block_type``."""
    body: Dict[str, Any] = {"rich_text": rich_text(text)}
    body.update(extra)
    return {"object": "block", "type": block_type, block_type: body}


def make_divider() -> Dict[str, Any]:
    return {"object": "block", "type": "divider", "divider": {}}


def batch_blocks(blocks: List[Dict[str, Any]], size: int = MAX_BLOCKS_PER_REQUEST) -> Iterator[List[Dict[str, Any]]]:
    for i in range(0, len(blocks), size):
        yield blocks[i : i + size]


def to_blocks(text: Optional[str]) -> List[Dict[str, Any]]:
    """
    Convert markdown text into a list of Notion block objects.

    Consecutive plain lines join into one paragraph; blank lines end it.

    Example::

        to_blocks("# Notes\\n- first\\n- second")
        # [heading_1 "Notes", bulleted_list_item "first", bulleted_list_item "second"]
    """
    if not text:
        return []
    blocks: List[Dict[str, Any]] = []
    paragraph: List[str] = []
    code_lang: Optional[str] = None
    code_lines: List[str] = []

    def flush_paragraph() -> None:
        if paragraph:
            blocks.append(make_block("paragraph", "\n".join(paragraph)))
            paragraph.clear()

    for raw_line in text.splitlines():
        line = raw_line.rstrip()

        if code_lang is not None:
            if _FENCE_RE.match(line.strip()):
                blocks.append(make_block("code", "\n".join(code_lines), language=code_lang or "plain text"))
                code_lang = None
                code_lines = []
            else:
                code_lines.append(raw_line)
            continue

        stripped = line.strip()
        fence = _FENCE_RE.match(stripped)
        if fence:
            flush_paragraph()
            code_lang = fence.group(1)
            continue
        if not stripped:
            flush_paragraph()
            continue
        if _DIVIDER_RE.match(stripped):
            flush_paragraph()
            blocks.append(make_divider())
            continue

        m = _HEADING_RE.match(stripped)
        if m:
            flush_paragraph()
            blocks.append(make_block(f"heading_{len(m.group(1))}", m.group(2)))
            continue
        m = _TODO_RE.match(stripped)
        if m:
            flush_paragraph()
            blocks.append(make_block("to_do", m.group(2), checked=m.group(1).lower() == "x"))
            continue
        m = _BULLET_RE.match(stripped)
        if m:
            flush_paragraph()
            blocks.append(make_block("bulleted_list_item", m.group(1)))
            continue
        m = _NUMBERED_RE.match(stripped)
        if m:
            flush_paragraph()
            blocks.append(make_block("numbered_list_item", m.group(1)))
            continue
        if stripped.startswith(">"):
            flush_paragraph()
            blocks.append(make_block("quote", stripped[1:].strip()))
            continue
        paragraph.append(stripped)

    if code_lang is not None:
        # Unterminated fence: keep what was collected
        blocks.append(make_block("code", "\n".join(code_lines), language=code_lang or "plain text"))
    flush_paragraph()
    return blocks


_TYPE_ALIASES = {
    "h1": "heading_1",
    "h2": "heading_2",
    "h3": "heading_3",
    "heading": "heading_1",
    "bullet": "bulleted_list_item",
    "bulleted_list": "bulleted_list_item",
    "numbered": "numbered_list_item",
    "numbered_list": "numbered_list_item",
    "todo": "to_do",
    "checkbox": "to_do",
    "blockquote": "quote",
    "hr": "divider",
    "text": "paragraph",
}


class BlockEnhancer:
    """
    Normalize block-type names to the ones the Notion API accepts.

    Unknown types are returned unchanged. Pass ``aliases`` to extend or override
    the built-in table.
    """

    def __init__(self, aliases: Optional[Dict[str, str]] = None) -> None:
        self._aliases = dict(_TYPE_ALIASES)
        if aliases:
            self._aliases.update(aliases)

    def enhance_block_type(self, block_type: str) -> str:
        return self._aliases.get(block_type.lower(), block_type)

    def enhance_blocks(self, blocks: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Apply :meth:`enhance_block_type` to every block with a string ``type``.

        When the type changes, the type-keyed body is moved to the new key.
        """
        out = []
        for block in blocks:
            block_type = block.get("type") if isinstance(block, dict) else None
            if not isinstance(block_type, str):
                out.append(block)
                continue
            enhanced = self.enhance_block_type(block_type)
            new_block = dict(block)
            new_block["type"] = enhanced
            if enhanced != block_type and block_type in new_block:
                new_block[enhanced] = new_block.pop(block_type)
            out.append(new_block)
        return out


__all__ = [
    "to_blocks",
    "make_block",
    "make_divider",
    "rich_text",
    "batch_blocks",
    "BlockEnhancer",
    "MAX_TEXT_LENGTH",
    "MAX_BLOCKS_PER_REQUEST",
]
