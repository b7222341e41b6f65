"""Unit tests for wire-level chat message types."""

from yodaai.platform.llm.messages import ChatMessage, ContentPart, ModelInfo, encode_image_data_url


class TestChatMessage:
    def test_text_message(self):
        assert ChatMessage(role="user", content="Hi").to_dict() == {"role": "user", "content": "Hi"}

    def test_multimodal_message(self):
        message = ChatMessage(
            role="user",
            content=[
                ContentPart.from_text("What is this?"),
                ContentPart.from_image_url("data:image/png;base64,AAAA", detail="low"),
            ],
        )
        assert message.to_dict() == {
            "role": "user",
            "content": [
                {"type": "text", "text": "What is this?"},
                {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA", "detail": "low"}},
            ],
        }

    def test_image_part_without_detail(self):
        part = ContentPart.from_image_url("https://example.com/cat.png", detail=None)
        assert part.to_dict() == {"type": "image_url", "image_url": {"url": "https://example.com/cat.png"}}


class TestModelInfo:
    def test_from_dict_optional_fields(self):
        assert ModelInfo.from_dict({"id": "llama3.1"}) == ModelInfo(id="llama3.1")


def test_encode_image_data_url():
    assert encode_image_data_url(b"\x89PNG", "image/png") == "data:image/png;base64,iVBORw=="
