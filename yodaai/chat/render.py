"""Terminal rendering of chat messages.

Assistant content is rendered segment by segment: literal text as-is, tool
calls and tool results as one-line headers that expand to show their
arguments or output.
"""

import click

from yodaai.chat.segments import SegmentedContent, TextSegment, ToolCallSegment, ToolResultSegment
from yodaai.chat.thread import Message
from yodaai.platform.llm.messages import Role

INDENT = "    "


def render_segments(content: SegmentedContent, color: bool = True) -> str:
    """Render visible segments; collapsed tool segments show only their header."""
    blocks = []
    for index, segment in content.visible_segments():
        expanded = content.is_expanded(index)
        if isinstance(segment, TextSegment):
            blocks.append(segment.text.strip("\n"))
        elif isinstance(segment, ToolCallSegment):
            blocks.append(_render_tool_call(segment, index, expanded, color))
        elif isinstance(segment, ToolResultSegment):
            blocks.append(_render_tool_result(segment, index, expanded, color))
    return "\n".join(blocks)


def render_message(message: Message, content: SegmentedContent | None = None, color: bool = True) -> str:
    if message.role is Role.USER:
        return f"{click.style('You', fg='cyan', bold=True) if color else 'You'}: {message.content}"

    if content is None:
        content = SegmentedContent(message.content)
    else:
        content.update(message.content)
    label = click.style("Assistant", fg="green", bold=True) if color else "Assistant"
    return f"{label}:\n{render_segments(content, color=color)}"


def _render_tool_call(segment: ToolCallSegment, index: int, expanded: bool, color: bool) -> str:
    header = f"[{index}] {'▾' if expanded else '▸'} Tool: {segment.name}"
    if color:
        header = click.style(header, fg="yellow")
    if not expanded or segment.arguments is None:
        return header
    return f"{header}\n{_indent(segment.arguments)}"


def _render_tool_result(segment: ToolResultSegment, index: int, expanded: bool, color: bool) -> str:
    header = f"[{index}] {'▾' if expanded else '▸'} Result: {segment.name}"
    if color:
        header = click.style(header, fg="blue")
    if not expanded or not segment.result:
        return header
    return f"{header}\n{_indent(segment.result)}"


def _indent(text: str) -> str:
    return "\n".join(INDENT + line for line in text.splitlines())
