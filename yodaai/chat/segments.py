"""Split assistant message content into text, tool-call and tool-result segments.

Assistant content may embed tool activity inline:

    Let me look that up.
    <tool_call>{"name": "Search.web", "arguments": {"q": "cats"}}</tool_call>
    <tool_result name="Search.web">3 results ...</tool_result>
    Cats are ...

`parse_segments` turns such content into an ordered list of segments for
rendering. It never raises: regions that cannot be understood stay part of
the surrounding literal text.
"""

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TypeAlias

from yodaai.platform.mcp.tool_calls import (
    TOOL_CALL_OPEN,
    TOOL_CALL_PATTERN,
    TOOL_RESULT_PATTERN,
    load_tool_call_payload,
)

# Groups: 1 tool call region, 2 JSON payload, 3 tool result region, 4 name, 5 body
_SEGMENT_RE = re.compile(f"({TOOL_CALL_PATTERN})|({TOOL_RESULT_PATTERN})")


@dataclass(frozen=True)
class TextSegment:
    text: str

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class ToolCallSegment:
    """A tool invocation.

    Attributes:
        name: Tool name as written by the model
        arguments: Pretty-printed JSON arguments, None unless an object or array
    """

    name: str
    arguments: str | None = None


@dataclass(frozen=True)
class ToolResultSegment:
    """A tool's textual output, whitespace-trimmed."""

    name: str
    result: str


Segment: TypeAlias = TextSegment | ToolCallSegment | ToolResultSegment


def parse_segments(content: str) -> list[Segment]:
    """Parse message content into segments, in order of appearance.

    - Literal text between regions becomes a TextSegment; empty or
      whitespace-only runs are dropped.
    - A tool call whose payload is not a JSON object with a string "name"
      is left in place as literal text.
    - If nothing at all is produced, the whole content is returned as a
      single TextSegment, so the result is never empty.
    """
    segments: list[Segment] = []
    last_end = 0
    pos = 0

    while (match := _SEGMENT_RE.search(content, pos)) is not None:
        if match.group(1) is not None:
            segment = _tool_call_segment(match.group(2))
            if segment is None:
                # Rescan past the opening tag so regions inside the failed span still match
                pos = match.start() + len(TOOL_CALL_OPEN)
                continue
        else:
            segment = ToolResultSegment(name=match.group(4), result=match.group(5).strip())

        _append_text(segments, content[last_end : match.start()])
        segments.append(segment)
        last_end = pos = match.end()

    _append_text(segments, content[last_end:])

    if not segments:
        return [TextSegment(content)]
    return segments


def _append_text(segments: list[Segment], text: str) -> None:
    if text.strip():
        segments.append(TextSegment(text))


def _tool_call_segment(payload: str) -> ToolCallSegment | None:
    data = load_tool_call_payload(payload)
    if data is None:
        return None

    arguments = data.get("arguments")
    if not isinstance(arguments, (dict, list)):
        return ToolCallSegment(name=data["name"])
    return ToolCallSegment(name=data["name"], arguments=json.dumps(arguments, indent=2, ensure_ascii=False))


class SegmentedContent:
    """Memoised segment projection of one message, plus per-segment UI state.

    Streaming re-renders call `update` on every delta; the content is only
    re-parsed when it actually changed. Segment indices double as keys for
    the expanded/collapsed state of tool calls and results.
    """

    def __init__(self, content: str = "") -> None:
        self._content = content
        self._segments = parse_segments(content)
        self._expanded: set[int] = set()

    @property
    def content(self) -> str:
        return self._content

    @property
    def segments(self) -> list[Segment]:
        return list(self._segments)

    def update(self, content: str) -> bool:
        """Set new content; returns True if it changed and was re-parsed."""
        if content == self._content:
            return False
        self._content = content
        self._segments = parse_segments(content)
        return True

    def toggle(self, index: int) -> bool:
        """Flip the expanded state of a segment; returns the new state."""
        if index in self._expanded:
            self._expanded.discard(index)
            return False
        self._expanded.add(index)
        return True

    def is_expanded(self, index: int) -> bool:
        return index in self._expanded

    def expand_all(self) -> None:
        self._expanded = {
            index
            for index, segment in enumerate(self._segments)
            if not isinstance(segment, TextSegment)
        }

    def visible_segments(self) -> Iterator[tuple[int, Segment]]:
        """Yield (index, segment) pairs, skipping blank text segments."""
        for index, segment in enumerate(self._segments):
            if isinstance(segment, TextSegment) and segment.is_blank:
                continue
            yield index, segment
