"""
Node Emitter — Commits transformed payloads to the host node store.

A payload becomes a node by merging identity and bookkeeping metadata over it:

    {
      ...payload,
      "id": node_id(type_name, payload["id"]),
      "parent": None,
      "children": [],
      "internal": {
        "type": type_name,
        "content": <deterministic JSON of the payload>,
        "contentDigest": store.create_content_digest(payload),
      },
    }

The payload's own "id" (the Parse objectId) is replaced by the derived node
id. Calling store.create_node() is the only point where anything becomes
visible to the host; there is no rollback if a later node fails.

Pipeline context:
    Used by the Media Prefetcher (Step 2) and for every model's payloads in
    Step 4 of the orchestrator pipeline.
"""

from typing import Any, Dict, Iterable, List

from chisel_source_shared import serialize_payload

from .node_ids import node_id


class NodeEmitter:
    """Wraps payloads as nodes and hands them to a node store.

    Attributes:
        store: Host node store exposing create_node, create_node_id and
               create_content_digest.
        debug: If True, prints every emitted node id.
    """

    def __init__(self, store, debug: bool = False):
        self.store = store
        self.debug = debug

    def build_node(self, payload: Dict[str, Any], type_name: str) -> Dict[str, Any]:
        """Return the node for a payload without committing it."""
        metadata = {
            "id": node_id(type_name, payload["id"], self.store.create_node_id),
            "parent": None,
            "children": [],
            "internal": {
                "type": type_name,
                "content": serialize_payload(payload),
                "contentDigest": self.store.create_content_digest(payload),
            },
        }
        node = dict(payload)
        node.update(metadata)
        return node

    def emit(self, payload: Dict[str, Any], type_name: str) -> Dict[str, Any]:
        """Build a node from a payload and commit it to the store."""
        node = self.build_node(payload, type_name)
        self.store.create_node(node)
        if self.debug:
            print(f"    + {type_name} {payload['id']} -> {node['id']}")
        return node

    def emit_all(self, payloads: Iterable[Dict[str, Any]], type_name: str) -> List[Dict[str, Any]]:
        """Emit payloads in order."""
        return [self.emit(payload, type_name) for payload in payloads]
