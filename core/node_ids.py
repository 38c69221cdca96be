"""
Node IDs — The one place node identifiers are derived.

A node's id is the host's create_node_id() applied to "<TypeName>-<objectId>".
Both the Node Emitter (when a record becomes a node) and the Record
Transformer (when a reference or media field points at a record) go through
node_id(), so a link always equals the id of the node it targets, whether that
node is created earlier or later in the build.
"""

from typing import Callable

NodeIdFactory = Callable[[str], str]


def node_key(type_name: str, object_id: str) -> str:
    """The string a node id is derived from: "<TypeName>-<objectId>"."""
    return f"{type_name}-{object_id}"


def node_id(type_name: str, object_id: str, create_node_id: NodeIdFactory) -> str:
    """Derive the node id for a backend record of the given type.

    Args:
        type_name: The node type name (e.g. "BlogPost", "MediaItem").
        object_id: The Parse objectId of the record.
        create_node_id: The host's id factory.

    Returns:
        The derived node id.
    """
    return create_node_id(node_key(type_name, object_id))
