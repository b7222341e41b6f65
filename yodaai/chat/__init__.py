"""Chat features built on the platform layer.

This module provides:
- Segment parsing of assistant content (text, tool calls, tool results)
- Chat threads, slash commands and app context
- The chat session that streams replies and runs the tool loop
"""

from yodaai.chat.segments import (
    Segment,
    SegmentedContent,
    TextSegment,
    ToolCallSegment,
    ToolResultSegment,
    parse_segments,
)
from yodaai.chat.session import ChatSession, RequestOptions
from yodaai.chat.thread import ChatThread, Message, export_markdown, generate_thread_title

__all__ = [
    # Segments
    "Segment",
    "SegmentedContent",
    "TextSegment",
    "ToolCallSegment",
    "ToolResultSegment",
    "parse_segments",
    # Session
    "ChatSession",
    "RequestOptions",
    # Threads
    "ChatThread",
    "Message",
    "export_markdown",
    "generate_thread_title",
]
