"""Tests for core.orchestrator: configuration, source_nodes() and run()."""

import json
import os
from unittest.mock import patch, MagicMock

import pytest
import requests

from chisel_source_shared import InMemoryNodeStore

from core.orchestrator import SourceOptions, SourceOrchestrator, source_nodes
from core.schema_loader import DuplicateTypeNameError


_BASE_ENV = {
    "PARSE_APP_ID": "app-id",
    "PARSE_MASTER_KEY": "master-key",
    "PARSE_SERVER_URL": "https://parse.example.com/parse",
    "CHISEL_SITE_ID": "S1",
    "TYPE_NAME_PREFIX": "Blog",
    "SAVE_JSON": "true",
    "DEBUG": "false",
    "OUTPUT_DIR": "/tmp/chisel_test_output",
    "OUTPUT_RETENTION_DAYS": "30",
    "PROVIDER_NAME": "Chisel_Parse_Source",
}

OPTIONS = SourceOptions(
    app_id="app-id",
    master_key="master-key",
    server_url="https://parse.example.com/parse",
    site_id="S1",
    type_name="Blog",
)


def _make_orchestrator(env_overrides=None):
    env = dict(_BASE_ENV)
    if env_overrides:
        env.update(env_overrides)

    with patch.dict(os.environ, env, clear=True):
        orchestrator = SourceOrchestrator(env_file="/nonexistent/.env")
    return orchestrator


# --- configuration ---------------------------------------------------------

def test_config_is_read_from_environment():
    orch = _make_orchestrator()
    assert orch.app_id == "app-id"
    assert orch.site_id == "S1"
    assert orch.type_name_prefix == "Blog"
    assert orch.query_limit == 1000
    assert orch.save_json is True
    assert orch.debug is False


def test_type_name_prefix_default():
    env = {k: v for k, v in _BASE_ENV.items() if k != "TYPE_NAME_PREFIX"}
    with patch.dict(os.environ, env, clear=True):
        orch = SourceOrchestrator(env_file="/nonexistent/.env")
    assert orch.type_name_prefix == "Chisel"


def test_validate_config_valid():
    assert _make_orchestrator().validate_config() is True


def test_validate_config_missing_credentials():
    assert _make_orchestrator({"PARSE_APP_ID": ""}).validate_config() is False
    assert _make_orchestrator({"PARSE_MASTER_KEY": ""}).validate_config() is False


def test_validate_config_server_url():
    assert _make_orchestrator({"PARSE_SERVER_URL": ""}).validate_config() is False
    assert _make_orchestrator({"PARSE_SERVER_URL": "parse.example.com"}).validate_config() is False


def test_validate_config_missing_site():
    assert _make_orchestrator({"CHISEL_SITE_ID": ""}).validate_config() is False


def test_validate_config_query_limit():
    assert _make_orchestrator({"PARSE_QUERY_LIMIT": "0"}).validate_config() is False


def test_options_mirror_config():
    options = _make_orchestrator().options
    assert options == SourceOptions(
        app_id="app-id",
        master_key="master-key",
        server_url="https://parse.example.com/parse",
        site_id="S1",
        type_name="Blog",
        query_limit=1000,
        timeout=30,
    )


# --- source_nodes() ----------------------------------------------------------

def test_source_nodes_counts(fake_client):
    store = InMemoryNodeStore()
    counts = source_nodes(store, OPTIONS, client=fake_client)
    assert counts == {"MediaItem": 2, "BlogPost": 2, "BlogAuthor": 2, "BlogEmpty": 1}
    assert len(store.nodes) == 7


def test_media_items_are_sourced_first(fake_client):
    source_nodes(InMemoryNodeStore(), OPTIONS, client=fake_client)
    assert fake_client.calls[0] == ("MediaItem", None)


def test_only_published_records_are_sourced(fake_client):
    store = InMemoryNodeStore()
    source_nodes(store, OPTIONS, client=fake_client)
    assert store.get_node(store.create_node_id("BlogPost-P2")) is None
    assert ("ct_post", {"t__status": "Published"}) in fake_client.calls


def test_post_links_to_author(fake_client):
    store = InMemoryNodeStore()
    source_nodes(store, OPTIONS, client=fake_client)

    post = store.get_node(store.create_node_id("BlogPost-P1"))
    assert post["internal"]["type"] == "BlogPost"
    assert post["author___NODE"] == store.create_node_id("BlogAuthor-A1")
    assert store.get_node(post["author___NODE"])["name"] == "Ada Lovelace"


def test_media_item_node(fake_client):
    store = InMemoryNodeStore()
    source_nodes(store, OPTIONS, client=fake_client)

    media = store.get_node(store.create_node_id("MediaItem-M1"))
    assert media["id"] == store.create_node_id("MediaItem-M1")
    assert media["url"] == "https://x/y.png"


def test_disabled_field_never_emitted(fake_client):
    store = InMemoryNodeStore()
    source_nodes(store, OPTIONS, client=fake_client)
    assert all("secret" not in node for node in store.get_nodes_by_type("BlogPost"))


def test_all_links_resolve(fake_client):
    store = InMemoryNodeStore()
    source_nodes(store, OPTIONS, client=fake_client)
    assert store.dangling_links() == []


def test_rerun_is_byte_identical(fake_client):
    first, second = InMemoryNodeStore(), InMemoryNodeStore()
    source_nodes(first, OPTIONS, client=fake_client)
    source_nodes(second, OPTIONS, client=fake_client)

    assert list(first.nodes) == list(second.nodes)
    for node_id, node in first.nodes.items():
        assert node["internal"] == second.nodes[node_id]["internal"]


def test_record_query_failure_aborts(fake_client):
    original_find = fake_client.find

    def find(class_name, where=None):
        if class_name == "ct_author":
            raise requests.HTTPError("500 Server Error")
        return original_find(class_name, where)

    fake_client.find = find
    with pytest.raises(requests.HTTPError):
        source_nodes(InMemoryNodeStore(), OPTIONS, client=fake_client)


def test_malformed_title_does_not_abort(fake_client, parse_site):
    post = next(r for r in parse_site["ct_post"] if r["objectId"] == "P1")
    post["Title"] = {"__type": "Pointer", "className": "X"}

    store = InMemoryNodeStore()
    counts = source_nodes(store, OPTIONS, client=fake_client)

    assert counts["BlogPost"] == 2
    assert store.get_node(store.create_node_id("BlogPost-P1"))["title"] is None


def test_duplicate_type_names_abort_before_records(fake_client, parse_site):
    parse_site["Model"].append({
        "objectId": "MOD_AUTHOR_2",
        "nameId": "Author",
        "tableName": "ct_writer",
        "site": {"__type": "Pointer", "className": "Site", "objectId": "S1"},
    })
    with pytest.raises(DuplicateTypeNameError):
        source_nodes(InMemoryNodeStore(), OPTIONS, client=fake_client)
    assert not any(c[0].startswith("ct_") for c in fake_client.calls)


# --- run() ---------------------------------------------------------------------

def test_run_writes_output(fake_client, tmp_path):
    orch = _make_orchestrator({"OUTPUT_DIR": str(tmp_path)})
    results = orch.run(client=fake_client)

    assert results["success"] is True
    assert results["summary"]["nodes"] == {
        "MediaItem": 2, "BlogPost": 2, "BlogAuthor": 2, "BlogEmpty": 1,
    }
    assert results["summary"]["total_nodes"] == 7
    assert results["summary"]["dangling_links"] == 0

    with open(results["json_path"]) as f:
        nodes = json.load(f)
    assert len(nodes) == 7

    results_path = orch.output_manager.get_output_path("sourcing_results.json")
    with open(results_path) as f:
        assert json.load(f)["success"] is True


def test_run_without_saving_nodes(fake_client, tmp_path):
    orch = _make_orchestrator({"OUTPUT_DIR": str(tmp_path), "SAVE_JSON": "false"})
    results = orch.run(client=fake_client)
    assert results["success"] is True
    assert "json_path" not in results


def test_run_and_source_nodes_emit_the_same_nodes(fake_client, tmp_path):
    orch = _make_orchestrator({"OUTPUT_DIR": str(tmp_path), "SAVE_JSON": "false"})
    results = orch.run(client=fake_client)

    store = InMemoryNodeStore()
    counts = source_nodes(store, orch.options, client=fake_client)

    assert results["summary"]["nodes"] == counts
    assert {k: n["internal"] for k, n in store.nodes.items()} == \
        {k: n["internal"] for k, n in orch.store.nodes.items()}


def test_run_reports_connection_failure(tmp_path):
    orch = _make_orchestrator({"OUTPUT_DIR": str(tmp_path)})
    client = MagicMock()
    client.test_connection.side_effect = requests.ConnectionError("unreachable")

    with patch("core.orchestrator.create_client", return_value=client):
        results = orch.run()

    assert results["success"] is False
    assert "unreachable" in results["error"]
    client.find.assert_not_called()


def test_print_summary(capsys):
    orch = _make_orchestrator()
    orch.print_summary({
        "success": True,
        "summary": {"models": 1, "nodes": {"BlogPost": 3}, "total_nodes": 3},
    })
    out = capsys.readouterr().out
    assert "SUCCESS" in out
    assert "BlogPost: 3" in out
