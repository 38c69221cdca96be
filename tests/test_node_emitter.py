"""Tests for core.node_emitter and core.node_ids."""

import json
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from chisel_source_shared import InMemoryNodeStore

from core.node_emitter import NodeEmitter
from core.node_ids import node_id, node_key


def sample_payload():
    created = datetime(2024, 3, 1, 8, 30, tzinfo=timezone.utc)
    return {
        "id": "P1",
        "title": "Hello world",
        "date": created,
        "createdAt": created,
        "updatedAt": created,
        "body": "First post",
        "author___NODE": "some-node-id",
    }


def test_node_key():
    assert node_key("BlogAuthor", "A1") == "BlogAuthor-A1"


def test_node_id_uses_host_factory():
    factory = MagicMock(return_value="generated")
    assert node_id("BlogAuthor", "A1", factory) == "generated"
    factory.assert_called_once_with("BlogAuthor-A1")


def test_node_id_is_deterministic():
    store = InMemoryNodeStore()
    first = node_id("BlogPost", "P1", store.create_node_id)
    second = node_id("BlogPost", "P1", InMemoryNodeStore().create_node_id)
    assert first == second
    assert first != node_id("BlogAuthor", "P1", store.create_node_id)
    assert first != node_id("BlogPost", "P2", store.create_node_id)


def test_emit_adds_metadata():
    store = InMemoryNodeStore()
    node = NodeEmitter(store).emit(sample_payload(), "BlogPost")

    assert node["id"] == store.create_node_id("BlogPost-P1")
    assert node["parent"] is None
    assert node["children"] == []
    assert node["internal"]["type"] == "BlogPost"
    assert node["internal"]["contentDigest"] == store.create_content_digest(sample_payload())
    assert json.loads(node["internal"]["content"])["id"] == "P1"
    assert node["title"] == "Hello world"
    assert node["author___NODE"] == "some-node-id"


def test_emit_commits_to_store():
    store = MagicMock()
    store.create_node_id.side_effect = lambda value: f"id:{value}"
    store.create_content_digest.return_value = "digest"

    node = NodeEmitter(store).emit(sample_payload(), "BlogPost")

    store.create_node.assert_called_once_with(node)
    assert node["id"] == "id:BlogPost-P1"
    assert node["internal"]["contentDigest"] == "digest"


def test_emit_does_not_mutate_payload():
    payload = sample_payload()
    NodeEmitter(InMemoryNodeStore()).emit(payload, "BlogPost")
    assert payload == sample_payload()


def test_emit_is_idempotent():
    first = NodeEmitter(InMemoryNodeStore()).emit(sample_payload(), "BlogPost")
    second = NodeEmitter(InMemoryNodeStore()).emit(sample_payload(), "BlogPost")
    assert first == second


def test_digest_changes_with_content():
    store = InMemoryNodeStore()
    emitter = NodeEmitter(store)
    changed = sample_payload()
    changed["body"] = "Edited"
    assert (emitter.build_node(sample_payload(), "BlogPost")["internal"]["contentDigest"]
            != emitter.build_node(changed, "BlogPost")["internal"]["contentDigest"])


def test_failed_commit_keeps_earlier_nodes():
    store = InMemoryNodeStore()
    emitter = NodeEmitter(store)
    bad = sample_payload()
    bad["id"] = "P2"
    store_create = store.create_node

    def create_node(node):
        if node["title"] == "boom":
            raise RuntimeError("store full")
        store_create(node)

    store.create_node = create_node
    bad["title"] = "boom"

    with pytest.raises(RuntimeError):
        emitter.emit_all([sample_payload(), bad], "BlogPost")
    assert len(store.nodes) == 1
