"""Chat threads and their messages.

Threads live in memory for the lifetime of a session; exporting a thread to
Markdown is the way to keep a transcript.
"""

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime

from yodaai.chat.context import AppContextSnapshot
from yodaai.platform.llm.messages import ChatMessage, Role

DEFAULT_THREAD_TITLE = "New Chat"
MAX_TITLE_LENGTH = 40


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Message:
    """A message in a chat thread.

    Attributes:
        role: Message role
        content: Message text; assistant content grows while streaming and may
            embed <tool_call>/<tool_result> regions
        app_contexts: App context snapshots attached when the message was sent
    """

    role: Role
    content: str
    app_contexts: list[AppContextSnapshot] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utc_now)

    def to_chat_message(self) -> ChatMessage:
        return ChatMessage(role=self.role.value, content=self.content)


@dataclass
class ChatThread:
    title: str = DEFAULT_THREAD_TITLE
    messages: list[Message] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=_utc_now)

    def append(self, role: Role, content: str, **kwargs) -> Message:
        message = Message(role=role, content=content, **kwargs)
        self.messages.append(message)
        return message

    def remove(self, message_id: str) -> bool:
        before = len(self.messages)
        self.messages = [message for message in self.messages if message.id != message_id]
        return len(self.messages) != before

    def truncate_after(self, message_id: str, inclusive: bool = False) -> list[Message]:
        """Drop every message after the given one (and the message itself if inclusive).

        Returns:
            The removed messages
        """
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                cut = index if inclusive else index + 1
                removed = self.messages[cut:]
                self.messages = self.messages[:cut]
                return removed
        return []

    def last_message(self, role: Role) -> Message | None:
        for message in reversed(self.messages):
            if message.role is role:
                return message
        return None

    @property
    def has_default_title(self) -> bool:
        return self.title == DEFAULT_THREAD_TITLE


def generate_thread_title(text: str) -> str:
    """Derive a thread title from the first user message.

    Takes the first line; anything longer than 40 characters is cut at the
    last word boundary (or hard at 40) and suffixed with "...".
    """
    lines = text.splitlines()
    first_line = (lines[0] if lines else text).strip()
    if len(first_line) <= MAX_TITLE_LENGTH:
        return first_line

    prefix = first_line[:MAX_TITLE_LENGTH]
    last_space = prefix.rfind(" ")
    if last_space != -1:
        return prefix[:last_space] + "..."
    return prefix + "..."


def export_markdown(thread: ChatThread) -> str:
    lines = [f"# {thread.title}", ""]
    for message in sorted(thread.messages, key=lambda m: m.created_at):
        if message.role is Role.SYSTEM:
            continue
        speaker = "**You**" if message.role is Role.USER else "**Assistant**"
        lines.append(f"{speaker}:")
        lines.append(message.content)
        lines.append("")
    return "\n".join(lines)
