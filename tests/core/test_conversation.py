"""Tests for the conversation builder."""

from __future__ import annotations

import pytest

from mcpkit.core.content import AudioContent, ImageContent, PromptMessage, TextContent
from mcpkit.core.conversation import Conversation, Speaker, coerce_prompt_output, conversation


class TestSpeaker:
    def test_say(self) -> None:
        msg = Speaker("user").say("hello")
        assert msg.to_wire() == {"role": "user", "content": {"type": "text", "text": "hello"}}

    def test_attach_image(self) -> None:
        msg = Speaker("user").attach("aGk=", "image/png")
        assert isinstance(msg.content, ImageContent)
        assert msg.to_wire()["content"] == {"type": "image", "data": "aGk=", "mimeType": "image/png"}

    def test_attach_audio(self) -> None:
        assert isinstance(Speaker("assistant").attach("aGk=", "audio/wav").content, AudioContent)

    def test_attach_text_keeps_mime_type(self) -> None:
        msg = Speaker("user").attach("trace...", "text/plain")
        assert isinstance(msg.content, TextContent)
        assert msg.to_wire()["content"] == {"type": "text", "text": "trace...", "mimeType": "text/plain"}


class TestConversation:
    def test_order_preserved(self) -> None:
        conv = conversation(lambda user, ai: [user.say("one"), ai.say("two"), user.say("three")])
        assert [m.role for m in conv.messages] == ["user", "assistant", "user"]
        assert len(conv) == 3

    def test_nested_fragments_flattened_one_level(self) -> None:
        conv = conversation(lambda user, ai: [user.say("a"), [user.say("b"), ai.say("c")], []])
        assert [m.content.text for m in conv.messages] == ["a", "b", "c"]  # type: ignore[union-attr]

    def test_none_fragments_skipped(self) -> None:
        conv = conversation(lambda user, ai: [user.say("a"), None, ai.say("b")])
        assert len(conv) == 2

    def test_duplicates_kept(self) -> None:
        conv = conversation(lambda user, ai: [user.say("same"), user.say("same")])
        assert len(conv) == 2

    def test_non_message_rejected(self) -> None:
        with pytest.raises(TypeError):
            conversation(lambda user, ai: [["not a message"]])

    def test_to_wire(self) -> None:
        conv = conversation(lambda user, ai: [ai.say("hi")])
        assert conv.to_wire() == [{"role": "assistant", "content": {"type": "text", "text": "hi"}}]


class TestCoercePromptOutput:
    def test_string_is_single_user_message(self) -> None:
        conv = coerce_prompt_output("Review this")
        assert len(conv) == 1
        assert conv.messages[0].role == "user"

    def test_conversation_unchanged(self) -> None:
        conv = Conversation()
        assert coerce_prompt_output(conv) is conv

    def test_single_message(self) -> None:
        msg = PromptMessage(role="assistant", content=TextContent(text="x"))
        assert coerce_prompt_output(msg).messages == (msg,)

    def test_list_of_messages(self) -> None:
        user = Speaker("user")
        assert len(coerce_prompt_output([user.say("a"), user.say("b")])) == 2

    def test_unsupported(self) -> None:
        with pytest.raises(TypeError):
            coerce_prompt_output(42)
