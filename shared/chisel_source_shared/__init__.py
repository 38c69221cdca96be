"""
chisel-source-shared — Shared building blocks for the Chisel Parse source connector.

  node_store.py       InMemoryNodeStore, the default host node graph
                      (create_node / create_node_id / create_content_digest),
                      and the deterministic payload serializer.
  output_manager.py   Timestamped output directory creation and
                      retention-based cleanup of old runs.
"""

from .node_store import InMemoryNodeStore, serialize_payload, json_default, DEFAULT_PLUGIN_NAME
from .output_manager import OutputManager
