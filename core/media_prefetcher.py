"""
Media Prefetcher — Sources every MediaItem before any content model.

MediaItem is a fixed Chisel class that is not described by the Model/ModelField
schema, so it gets its own pass: all MediaItem records are fetched (no site or
status filter) and emitted as nodes of type "MediaItem". Media fields of other
models link to these nodes through node_id("MediaItem", objectId).

Besides the common metadata (id, title, timestamps), a media node carries
"url", taken from the record's "file" property when it is set:

    {"file": {"__type": "File", "name": "y.png", "url": "https://x/y.png"}}
        -> node["url"] == "https://x/y.png"

Records without a file get no "url" key at all.

Pipeline context:
    Step 2 of the orchestrator pipeline; always completes before Step 4
    sources any model records.
"""

from typing import Any, Dict, List

from config import MEDIA_ITEM_CLASS_NAME, MEDIA_ITEM_TYPE_NAME, FILE_PROPERTY

from .field_resolver import resolve_property
from .node_emitter import NodeEmitter
from .parse_client import ParseClient, ParseFile, ParseObject
from .record_transformer import build_base_payload


def build_media_payload(record: ParseObject) -> Dict[str, Any]:
    """Build the payload of one MediaItem record."""
    payload = build_base_payload(record)

    file_value = resolve_property(record, FILE_PROPERTY).value_or_none()

    if isinstance(file_value, ParseFile) and file_value.url:
        payload["url"] = file_value.url
    elif file_value is not None and not isinstance(file_value, ParseFile):
        print(f"  Warning: MediaItem/{record.id} has a non-file '{FILE_PROPERTY}' value")

    return payload


class MediaPrefetcher:
    """Fetches and emits all MediaItem records.

    Attributes:
        client: The ParseClient used for the query.
        emitter: The NodeEmitter the media nodes are committed through.
        debug: If True, prints each media URL.
    """

    def __init__(self, client: ParseClient, emitter: NodeEmitter, debug: bool = False):
        self.client = client
        self.emitter = emitter
        self.debug = debug

    def run(self) -> List[Dict[str, Any]]:
        """Fetch every MediaItem and emit it.

        Returns:
            The emitted nodes.
        """
        records = self.client.find(MEDIA_ITEM_CLASS_NAME)
        payloads = [build_media_payload(record) for record in records]

        if self.debug:
            for payload in payloads:
                print(f"    MediaItem {payload['id']}: {payload.get('url', '(no file)')}")

        return self.emitter.emit_all(payloads, MEDIA_ITEM_TYPE_NAME)
