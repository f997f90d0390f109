from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from candlesync._api.documents import build_patch_payload, parse_document_response
from candlesync.config import SyncConfig
from candlesync.exceptions import MalformedDocument
from candlesync.models.document import dump_items, parse_items
from candlesync.models.item import Item


def test_item_keeps_integer_positions() -> None:
    item = Item.model_validate({"id": 1, "x": 10, "y": 20.5, "name": ""})

    assert isinstance(item.x, int)
    assert isinstance(item.y, float)
    assert item.to_wire() == {"id": 1, "x": 10, "y": 20.5, "name": ""}


def test_item_name_defaults_to_empty() -> None:
    assert Item(id=3, x=1, y=2).name == ""


@pytest.mark.parametrize(
    "payload",
    [
        {"id": "1", "x": 1, "y": 1},
        {"id": True, "x": 1, "y": 1},
        {"id": 1, "x": "1", "y": 1},
        {"id": 1, "x": 1, "y": 1, "name": 5},
        {"x": 1, "y": 1},
    ],
)
def test_item_rejects_wrongly_typed_fields(payload: dict[str, object]) -> None:
    with pytest.raises(ValidationError):
        Item.model_validate(payload)


def test_item_preserves_unknown_keys_through_changes() -> None:
    item = Item.model_validate({"id": 1, "x": 1, "y": 2, "name": "a", "color": "gold"})

    renamed = item.with_changes(name="b")

    assert renamed.name == "b"
    assert renamed.to_wire()["color"] == "gold"


def test_with_changes_validates() -> None:
    item = Item(id=1, x=1, y=2)
    with pytest.raises(ValidationError):
        item.with_changes(x="left")


@pytest.mark.parametrize("content", [None, "", "   \n", "null"])
def test_parse_items_treats_missing_content_as_empty(content: str | None) -> None:
    assert parse_items(content) == ()


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        '{"id": 1}',
        '"candles"',
        '[{"id": 1, "x": 1}]',
        '[1, 2, 3]',
    ],
)
def test_parse_items_raises_malformed(content: str) -> None:
    with pytest.raises(MalformedDocument):
        parse_items(content)


def test_parse_items_keeps_first_of_duplicate_ids() -> None:
    content = json.dumps(
        [
            {"id": 1, "x": 1, "y": 1, "name": "first"},
            {"id": 2, "x": 2, "y": 2, "name": ""},
            {"id": 1, "x": 9, "y": 9, "name": "second"},
        ]
    )

    items = parse_items(content)

    assert [item.id for item in items] == [1, 2]
    assert items[0].name == "first"


def test_dump_items_is_stable_through_parse() -> None:
    content = json.dumps(
        [{"id": 1, "x": 10, "y": 20, "name": ""}, {"id": 2, "x": 3.25, "y": 4, "name": "Ada"}],
        indent=2,
    )

    assert dump_items(parse_items(content)) == content


def test_parse_document_response_reads_revision_and_file() -> None:
    config = SyncConfig(document_id="gist-1")
    body = {
        "updated_at": "2026-01-01T00:00:05Z",
        "files": {
            "other.txt": {"content": "ignored"},
            "candles.json": {"content": '[{"id": 4, "x": 1, "y": 2, "name": "x"}]'},
        },
    }

    document = parse_document_response(config, body)

    assert document.revision == "2026-01-01T00:00:05Z"
    assert [item.id for item in document.items] == [4]
    assert document.malformed is False


def test_parse_document_response_without_tracked_file_is_empty() -> None:
    config = SyncConfig(document_id="gist-1")

    document = parse_document_response(config, {"updated_at": "r1", "files": {"other.txt": {"content": "x"}}})

    assert document.items == ()
    assert document.revision == "r1"
    assert document.malformed is False


def test_parse_document_response_flags_malformed_content() -> None:
    config = SyncConfig(document_id="gist-1")

    document = parse_document_response(config, {"updated_at": "r1", "files": {"candles.json": {"content": "[oops"}}})

    assert document.items == ()
    assert document.malformed is True


def test_build_patch_payload_targets_configured_file() -> None:
    config = SyncConfig(document_id="gist-1", filename="memorial.json")

    payload = build_patch_payload(config, [Item(id=1, x=10, y=20)])

    assert list(payload["files"]) == ["memorial.json"]
    assert json.loads(payload["files"]["memorial.json"]["content"]) == [{"id": 1, "x": 10, "y": 20, "name": ""}]
