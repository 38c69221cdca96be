"""
Node Store — The host node graph the sourced nodes are handed to.

The connector only needs three callbacks from its host:

  create_node(node)              commit a finished node
  create_node_id(value) -> str   derive a stable node id from a string
  create_content_digest(value)   fingerprint a payload

Any object exposing those can be passed to core.source_nodes(). This module
provides InMemoryNodeStore, the host used by the CLI: it keeps nodes in a dict
keyed by id, derives ids as UUIDv5 of the input string under a namespace
derived from the plugin name, and digests payloads as the MD5 hex of their
deterministic JSON serialization. Re-running against unchanged data therefore
yields the same ids and digests.
"""

import hashlib
import json
import uuid
from datetime import date, datetime
from typing import Any, Dict, List, Optional

DEFAULT_PLUGIN_NAME = "chisel-parse-source"


def json_default(value: Any) -> Any:
    """json `default` hook: ISO dates, to_json() for Parse values, str() otherwise."""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "to_json"):
        return value.to_json()
    return str(value)


def serialize_payload(value: Any) -> str:
    """Serialize a payload to JSON deterministically (sorted keys, ISO dates)."""
    return json.dumps(value, sort_keys=True, separators=(",", ":"), default=json_default)


class InMemoryNodeStore:
    """Collects nodes in memory, keyed by node id.

    Attributes:
        plugin_name: Seeds the UUID namespace for create_node_id().
        nodes: Committed nodes by id, in insertion order.
    """

    def __init__(self, plugin_name: str = DEFAULT_PLUGIN_NAME):
        self.plugin_name = plugin_name
        self.namespace = uuid.uuid5(uuid.NAMESPACE_URL, plugin_name)
        self.nodes: Dict[str, Dict[str, Any]] = {}

    def create_node_id(self, value: str) -> str:
        return str(uuid.uuid5(self.namespace, value))

    def create_content_digest(self, value: Any) -> str:
        content = value if isinstance(value, str) else serialize_payload(value)
        return hashlib.md5(content.encode("utf-8")).hexdigest()

    def create_node(self, node: Dict[str, Any]):
        """Commit a node. A node with the same id replaces the previous one.

        Raises:
            ValueError: If the node has no id or no internal.type.
        """
        if not node.get("id"):
            raise ValueError("Node is missing an id")
        if not node.get("internal", {}).get("type"):
            raise ValueError(f"Node {node['id']} is missing internal.type")
        self.nodes[node["id"]] = node

    def get_node(self, node_id: str) -> Optional[Dict[str, Any]]:
        return self.nodes.get(node_id)

    def get_nodes_by_type(self, type_name: str) -> List[Dict[str, Any]]:
        return [n for n in self.nodes.values() if n["internal"]["type"] == type_name]

    def dangling_links(self) -> List[Dict[str, str]]:
        """List ___NODE links whose target id is not in the store."""
        dangling = []
        for node in self.nodes.values():
            for key, value in node.items():
                if not key.endswith("___NODE"):
                    continue
                targets = value if isinstance(value, list) else [value]
                for target in targets:
                    if target not in self.nodes:
                        dangling.append({"node": node["id"], "field": key, "target": target})
        return dangling

    def to_list(self) -> List[Dict[str, Any]]:
        return list(self.nodes.values())
