"""Tests for the node-type catalog."""

from flowbridge import catalog


def test_lookup_returns_defaults():
    data = catalog.get_node_data("arweave-upload")

    assert data.label == "Upload to Arweave"
    assert data.icon == "upload"
    assert data.config == {"tags": "", "permanent": "true"}


def test_lookup_unknown_type():
    assert catalog.get_node_data("teleport") is None
    assert not catalog.has_node_type("teleport")


def test_lookup_returns_fresh_copy():
    first = catalog.get_node_data("telegram")
    first.config["chatId"] = "42"

    assert catalog.get_node_data("telegram").config["chatId"] == ""


def test_categories():
    assert catalog.list_categories() == {
        "trigger": ["telegram-receive"],
        "action": ["telegram", "arweave-upload"],
        "logic": ["delay"],
    }
    assert catalog.list_node_types() == ["telegram-receive", "telegram", "arweave-upload", "delay"]
