import copy

from tblock_tool.document import dump_document, load_document
from tblock_tool.merge import merge
from tblock_tool.snippet import BYPASS_IPS, build_snippet


def test_overlay_keys_win_and_base_keys_survive() -> None:
    base = {"Foo": 1, "BypassIPS": ["10.0.0.1"], "SendWebhook": False}
    merged = merge(base, {"BypassIPS": ["127.0.0.1"], "SendWebhook": True})

    assert merged == {"Foo": 1, "BypassIPS": ["127.0.0.1"], "SendWebhook": True}


def test_nested_maps_merge_recursively() -> None:
    base = {"Limits": {"perUser": 3, "window": 60}, "Other": {"a": 1}}
    overlay = {"Limits": {"window": 120, "burst": 5}, "Other": "flat"}

    merged = merge(base, overlay)

    assert merged["Limits"] == {"perUser": 3, "window": 120, "burst": 5}
    assert merged["Other"] == "flat"


def test_inputs_are_not_mutated() -> None:
    base = {"Limits": {"perUser": 3}, "BypassIPS": ["10.0.0.1"]}
    overlay = {"Limits": {"window": 1}, "BypassIPS": ["127.0.0.1"]}
    base_before = copy.deepcopy(base)
    overlay_before = copy.deepcopy(overlay)

    merged = merge(base, overlay)
    merged["BypassIPS"].append("x")
    merged["Limits"]["perUser"] = 99

    assert base == base_before
    assert overlay == overlay_before


def test_empty_base_produces_empty_result() -> None:
    assert merge(None, {"Foo": 1}) is None
    assert merge({}, {"Foo": 1}) is None


def test_bypass_list_replaced_not_unioned_on_repeat() -> None:
    snippet = build_snippet("T", "123")
    once = merge({"BypassIPS": ["10.0.0.1", "127.0.0.1"]}, snippet)
    twice = merge(once, build_snippet("T", "123"))

    assert twice["BypassIPS"] == list(BYPASS_IPS)


def test_serialized_merge_parses_back_to_same_structure() -> None:
    base = {"Foo": 1, "Nested": {"list": [1, "two", None], "flag": True}}
    merged = merge(base, build_snippet("123456:ABC-def", "-1001234567890"))

    assert load_document(dump_document(merged)) == merged


def test_scenario_from_minimal_config() -> None:
    merged = merge({"Foo": 1}, build_snippet("T", "123"))

    assert merged["Foo"] == 1
    assert merged["StorageDir"] == "/opt/tblocker"
    assert merged["SendWebhook"] is True
    assert "botT/sendMessage" in merged["WebhookURL"]
    assert '"chat_id":"123"' in merged["WebhookTemplate"]
