import json

import pytest

from tblock_tool.document import dump_document
from tblock_tool.errors import ValidationError
from tblock_tool.merge import merge
from tblock_tool.snippet import build_snippet
from tblock_tool.validator import validate


def _merged_text(chat_id: str = "123", token: str = "T") -> str:
    return dump_document(merge({"Foo": 1}, build_snippet(token, chat_id)))


def test_valid_merge_passes() -> None:
    result = validate(_merged_text(), "123", "T")

    assert result.ok
    assert bool(result) is True
    result.raise_for_error()


@pytest.mark.parametrize("text", ["", "   \n", "# only a comment\n"])
def test_empty_documents_fail(text: str) -> None:
    result = validate(text, "123")

    assert not result.ok
    assert result.reason


@pytest.mark.parametrize("text", ["Foo: [1, 2\n", "- just\n- a list\n", "plain scalar\n"])
def test_malformed_documents_fail_without_raising(text: str) -> None:
    assert not validate(text, "123").ok


def test_missing_template_fails() -> None:
    assert not validate("Foo: 1\n", "123").ok


def test_broken_template_json_fails() -> None:
    text = "WebhookTemplate: '{\"chat_id\":\"123\",\"text\":\"unterminated}'\n"

    result = validate(text, "123")

    assert not result.ok
    assert "JSON" in result.reason


def test_empty_chat_id_in_template_fails() -> None:
    text = dump_document({"Foo": 1, "WebhookTemplate": json.dumps({"chat_id": " ", "text": "%s"})})

    result = validate(text, " ")

    assert not result.ok
    assert "chat_id" in result.reason


def test_mismatched_chat_id_fails() -> None:
    assert not validate(_merged_text(chat_id="123"), "456").ok


def test_token_missing_from_url_fails() -> None:
    assert not validate(_merged_text(token="T"), "123", "OTHER").ok


def test_raise_for_error_raises_validation_error() -> None:
    with pytest.raises(ValidationError):
        validate("", "123").raise_for_error()
