"""Tests for translator/message_normalizer.py — content flattening and prefix stripping."""

import pytest

from translator.message_normalizer import (
    COMPACTION_MARKER,
    clean_user_text,
    content_to_text,
    message_text,
    normalize_messages,
)
from translator.models import NormalizedMessage


# ---------------------------------------------------------------------------
# content_to_text
# ---------------------------------------------------------------------------


class TestContentToText:
    def test_plain_string(self):
        assert content_to_text("hello") == "hello"

    def test_none_is_empty(self):
        assert content_to_text(None) == ""

    def test_text_parts_joined_by_newline(self):
        content = [
            {"type": "text", "text": "first"},
            {"type": "text", "text": "second"},
        ]
        assert content_to_text(content) == "first\nsecond"

    def test_non_text_parts_skipped(self):
        content = [
            {"type": "image_url", "image_url": {"url": "http://x/y.png"}},
            {"type": "text", "text": "caption"},
        ]
        assert content_to_text(content) == "caption"

    def test_other_shapes_stringified(self):
        assert content_to_text(42) == "42"
        assert content_to_text({"text": "hi"}) == "{'text': 'hi'}"

    def test_bare_string_parts(self):
        assert content_to_text(["hi", {"type": "text", "text": "there"}, 3]) == "hi\nthere"


# ---------------------------------------------------------------------------
# clean_user_text
# ---------------------------------------------------------------------------


class TestCleanUserText:
    def test_strips_whatsapp_prefix(self):
        text = "[WhatsApp +15551234567 2025-01-01 10:00 PST] fix the login bug"
        assert clean_user_text(text) == "fix the login bug"

    def test_strips_telegram_prefix_case_insensitive(self):
        assert clean_user_text("[telegram @alice] hi there") == "hi there"

    def test_removes_message_id_anywhere(self):
        text = "please check this [message_id: 3EB0ABC] thanks"
        assert clean_user_text(text) == "please check this thanks"

    def test_leaves_other_brackets_alone(self):
        assert clean_user_text("[draft] my notes") == "[draft] my notes"

    def test_nested_prefixes_removed_in_one_call(self):
        text = "[message_id: 1] [WhatsApp +1555] [Telegram bob] hello"
        assert clean_user_text(text) == "hello"

    @pytest.mark.parametrize(
        "text",
        [
            "[WhatsApp +1555 2025-01-01] hey",
            "[Discord #general] ship it [msg_id: 99]",
            "plain message",
            "",
        ],
    )
    def test_idempotent(self, text):
        once = clean_user_text(text)
        assert clean_user_text(once) == once


# ---------------------------------------------------------------------------
# message_text / normalize_messages
# ---------------------------------------------------------------------------


class TestMessageText:
    def test_prefix_stripped_for_user_only(self):
        raw = "[WhatsApp +1555] hello"
        assert message_text({"role": "user", "content": raw}) == "hello"
        assert message_text({"role": "assistant", "content": raw}) == raw

    def test_list_content_with_prefix(self):
        msg = {"role": "user", "content": [{"type": "text", "text": "[Slack #dev] deploy now"}]}
        assert message_text(msg) == "deploy now"


class TestNormalizeMessages:
    def test_preserves_order_and_roles(self):
        messages = [
            {"role": "system", "content": "be nice"},
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": "hello!"},
        ]
        assert normalize_messages(messages) == [
            NormalizedMessage("system", "be nice"),
            NormalizedMessage("user", "hi"),
            NormalizedMessage("assistant", "hello!"),
        ]

    def test_drops_compaction_notice(self):
        messages = [
            {"role": "user", "content": COMPACTION_MARKER + ". Summary: ..."},
            {"role": "user", "content": "continue"},
        ]
        result = normalize_messages(messages)
        assert [m.text for m in result] == ["continue"]

    def test_drops_compaction_notice_in_text_parts(self):
        messages = [
            {"role": "user", "content": [{"type": "text", "text": COMPACTION_MARKER}]},
        ]
        assert normalize_messages(messages) == []

    def test_drops_empty_user_messages(self):
        messages = [
            {"role": "user", "content": "[WhatsApp +1555]  "},
            {"role": "assistant", "content": None},
            {"role": "user", "content": "real question"},
        ]
        assert [m.text for m in normalize_messages(messages)] == ["real question"]

    def test_normalizing_normalized_text_is_noop(self):
        messages = [
            {"role": "user", "content": "[Signal +44] what's up [id: 5]"},
            {"role": "user", "content": [{"type": "text", "text": "a"}, {"type": "text", "text": "b"}]},
        ]
        first = normalize_messages(messages)
        second = normalize_messages([{"role": m.role, "content": m.text} for m in first])
        assert second == first
