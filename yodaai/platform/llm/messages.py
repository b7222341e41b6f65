"""Wire-level message types for OpenAI-compatible chat completions.

These types mirror the request/response shapes of the `/chat/completions`
and `/models` endpoints, including multimodal (vision) content parts.
"""

import base64
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Role(StrEnum):
    """Chat message role."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class ContentPart:
    """Content part for multimodal messages.

    Attributes:
        type: "text" or "image_url"
        text: Text content for text parts
        image_url: URL (or data URL) for image parts
        detail: Vision detail hint for image parts ("auto", "low", "high")
    """

    type: str
    text: str | None = None
    image_url: str | None = None
    detail: str | None = None

    @classmethod
    def from_text(cls, text: str) -> "ContentPart":
        return cls(type="text", text=text)

    @classmethod
    def from_image_url(cls, url: str, detail: str | None = "auto") -> "ContentPart":
        return cls(type="image_url", image_url=url, detail=detail)

    def to_dict(self) -> dict[str, Any]:
        if self.type == "image_url":
            image: dict[str, Any] = {"url": self.image_url}
            if self.detail is not None:
                image["detail"] = self.detail
            return {"type": "image_url", "image_url": image}
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ChatMessage:
    """Message sent to the chat completions endpoint.

    Attributes:
        role: Message role ("system", "user", "assistant")
        content: Plain text, or a list of content parts for multimodal messages
    """

    role: str
    content: str | list[ContentPart]

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            return {"role": self.role, "content": self.content}
        return {"role": self.role, "content": [part.to_dict() for part in self.content]}


@dataclass(frozen=True)
class ModelInfo:
    """Model entry returned by the `/models` endpoint."""

    id: str
    created: int | None = None
    object: str | None = None
    owned_by: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelInfo":
        return cls(
            id=data["id"],
            created=data.get("created"),
            object=data.get("object"),
            owned_by=data.get("owned_by"),
        )


def encode_image_data_url(data: bytes, mime_type: str) -> str:
    """Encode raw image bytes as a base64 data URL for vision requests."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"
