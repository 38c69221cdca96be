"""
Core package — The sourcing pipeline modules.

This package contains all the modules that implement the 5-step sourcing
pipeline. Each module handles one concern:

  orchestrator.py        Pipeline coordination (Steps 1-5) and source_nodes()
  parse_client.py        HTTP communication with the Parse Server
  schema.py              Model / Field descriptors and FieldResolution
  schema_loader.py       Discover a site's models and fields (Step 3)
  type_names.py          Derive a model's node type name
  node_ids.py            Derive node ids from (type name, objectId)
  field_resolver.py      Read one field of one record, tolerating faults
  record_transformer.py  Turn raw records into node payloads (Step 4)
  media_prefetcher.py    Source every MediaItem up front (Step 2)
  node_emitter.py        Commit payloads as nodes to the node store
"""

from .orchestrator import SourceOrchestrator, SourceOptions, source_nodes
from .parse_client import ParseClient, ParseObject, ParseFile, ParseError, ParseDecodeError
from .schema import Field, FieldType, Model, FieldResolution, ResolutionStatus
from .schema_loader import SchemaLoader, DuplicateTypeNameError
from .type_names import create_type_name
from .node_ids import node_id, node_key
from .field_resolver import resolve_property, resolve_field, get_field_value
from .record_transformer import RecordTransformer, build_base_payload
from .media_prefetcher import MediaPrefetcher
from .node_emitter import NodeEmitter
