"""
Record Transformer — Converts raw Parse records into node payloads.

For one Model and its published records, this module produces one payload
dict per record. It sits between the record query (Step 4 of the
orchestrator) and the Node Emitter, and has no side effects of its own.

Every payload starts with the same metadata, taken from backend-managed
properties:

    id          the record's objectId (replaced by the node id on emit)
    title       the "Title" property
    date        createdAt
    createdAt   createdAt
    updatedAt   updatedAt

Then each field of the Model is mapped according to its FieldType:

  REFERENCE   The value is a pointer (or a list of pointers) to a record of
              another model. The target model is found by matching the
              pointer's className against the known models' tableName, and
              the link becomes "<nameId>___NODE" = node_id(target type, id).
              Pointers into unknown tables are dropped without a warning.

  MEDIA       Same shape as REFERENCE, but the target type is always
              MediaItem, so no table lookup is needed.

  SCALAR      The resolved value is copied under "<nameId>".

List fields produce a list of node ids. The list property is only set when at
least one element resolved; a field with nothing to link is left unset rather
than set to an empty list. Single and list fields use the same key rule.

Field faults (see field_resolver.py) degrade to an absent value; they never
fail the record.
"""

from typing import Any, Dict, List, Optional

from config import MEDIA_ITEM_TYPE_NAME, TITLE_PROPERTY, FOREIGN_KEY_SUFFIX

from .field_resolver import resolve_field, resolve_property
from .node_ids import NodeIdFactory, node_id
from .parse_client import ParseObject
from .schema import Field, FieldType, Model


def foreign_key(field: Field) -> str:
    """The payload key of a link field: "<nameId>___NODE"."""
    return f"{field.name_id}{FOREIGN_KEY_SUFFIX}"


def build_base_payload(record: ParseObject) -> Dict[str, Any]:
    """Build the metadata every payload carries (id, title and timestamps).

    A malformed Title or timestamp is warned about and left as None.
    """
    created_at = resolve_property(record, "createdAt", lambda: record.created_at).value_or_none()
    return {
        "id": record.id,
        "title": resolve_property(record, TITLE_PROPERTY).value_or_none(),
        "date": created_at,
        "createdAt": created_at,
        "updatedAt": resolve_property(record, "updatedAt", lambda: record.updated_at).value_or_none(),
    }


class RecordTransformer:
    """Maps raw records of a Model into node payloads.

    Attributes:
        models: Every model of the site, used to resolve reference targets.
        create_node_id: The host's node id factory.
        debug: If True, prints per-model transform counts.
    """

    def __init__(self, models: List[Model], create_node_id: NodeIdFactory, debug: bool = False):
        self.models = models
        self.create_node_id = create_node_id
        self.debug = debug
        self._type_names_by_table = {m.table_name: m.type_name for m in models}

    def type_name_for_table(self, table_name: Optional[str]) -> Optional[str]:
        """Return the type name of the model stored in table_name, or None."""
        return self._type_names_by_table.get(table_name)

    def transform(self, model: Model, records: List[ParseObject]) -> List[Dict[str, Any]]:
        """Transform all records of a model.

        Args:
            model: The Model the records belong to.
            records: Raw records fetched from model.table_name.

        Returns:
            One payload per record, in the same order.
        """
        payloads = [self.transform_record(model, record) for record in records]
        if self.debug:
            print(f"    Transformed {len(payloads)} {model.type_name} record(s)")
        return payloads

    def transform_record(self, model: Model, record: ParseObject) -> Dict[str, Any]:
        """Transform a single record into a payload."""
        payload = build_base_payload(record)

        for field in model.iter_fields():
            if field.is_link:
                self._map_link(payload, record, field)
            else:
                payload[field.name_id] = resolve_field(record, field).value_or_none()

        return payload

    def _map_link(self, payload: Dict[str, Any], record: ParseObject, field: Field):
        """Set "<nameId>___NODE" for a REFERENCE or MEDIA field, when resolvable."""
        value = resolve_field(record, field).value_or_none()
        if value is None:
            return

        if field.is_list:
            values = value if isinstance(value, list) else [value]
            linked = [
                target for target in (self._link_target(record, field, v) for v in values)
                if target is not None
            ]
            if linked:
                payload[foreign_key(field)] = linked
        else:
            target = self._link_target(record, field, value)
            if target is not None:
                payload[foreign_key(field)] = target

    def _link_target(self, record: ParseObject, field: Field, value: Any) -> Optional[str]:
        """Return the node id a single linked value points at, or None."""
        if not isinstance(value, ParseObject) or not value.id:
            print(f"  Warning: field '{field.name_id}' on {record.class_name}/{record.id} "
                  f"holds a non-object value, skipping: {value!r}")
            return None

        if field.type is FieldType.MEDIA:
            foreign_type_name = MEDIA_ITEM_TYPE_NAME
        else:
            foreign_type_name = self.type_name_for_table(value.class_name)
            if foreign_type_name is None:
                return None

        return node_id(foreign_type_name, value.id, self.create_node_id)
