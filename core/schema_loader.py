"""
Schema Loader — Discovers the content models of a Chisel site.

Chisel keeps its content schema in two Parse classes:

  Model       one row per content type
              { site: Pointer<Site>, nameId, tableName, ... }
  ModelField  one row per attribute of a content type
              { model: Pointer<Model>, nameId, name, type, isList, isDisabled }

For a given site this module queries the site's Model rows, then for each one
its enabled ModelField rows, and returns the ordered list of Model
descriptors (see schema.py). Queries run one after another: a model's fields
are fully read before the next model is looked at.

Type names are derived with create_type_name() and must be unique across the
site and distinct from the fixed MediaItem type. A collision raises
DuplicateTypeNameError, since two models sharing a type would silently merge
into one node type.

Errors:
    Any backend failure propagates; there is no partial schema.

Pipeline context:
    Used in Step 3 of the orchestrator pipeline. The returned models drive the
    record queries of Step 4 and the reference lookups of the Record
    Transformer.
"""

from typing import Dict, List, Optional, Tuple

from config import (
    SITE_CLASS_NAME,
    MODEL_CLASS_NAME,
    MODEL_FIELD_CLASS_NAME,
    MEDIA_ITEM_TYPE_NAME,
)

from .parse_client import ParseClient, ParseObject
from .schema import Field, FieldType, Model
from .type_names import create_type_name


class DuplicateTypeNameError(ValueError):
    """Two models (or a model and MediaItem) derive the same node type name."""


class SchemaLoader:
    """Loads Model descriptors for a site from the Parse backend.

    Attributes:
        client: The ParseClient used for all queries.
        type_name_prefix: Prefix passed to create_type_name().
        debug: If True, prints each model and its field count.
    """

    def __init__(self, client: ParseClient, type_name_prefix: str = "", debug: bool = False):
        self.client = client
        self.type_name_prefix = type_name_prefix
        self.debug = debug

    def load(self, site_id: str) -> List[Model]:
        """Return the site's models, each with its enabled fields.

        Args:
            site_id: objectId of the Site.

        Returns:
            Models in backend order.

        Raises:
            DuplicateTypeNameError: If two models derive the same type name.
        """
        model_records = self.client.find(
            MODEL_CLASS_NAME,
            {"site": self.client.pointer(SITE_CLASS_NAME, site_id)},
        )

        models = []
        for record in model_records:
            model = self._build_model(record)
            models.append(model)
            if self.debug:
                field_count = len(model.fields) if model.fields else 0
                print(f"    {model.type_name} ({model.table_name}): {field_count} field(s)")

        check_unique_type_names(models)
        return models

    def _build_model(self, record: ParseObject) -> Model:
        name = record.get("nameId")
        return Model(
            name=name,
            type_name=create_type_name(name, self.type_name_prefix),
            id=record.id,
            table_name=record.get("tableName"),
            fields=self.load_fields(record.id),
        )

    def load_fields(self, model_id: str) -> Optional[Tuple[Field, ...]]:
        """Return the enabled fields of a model, or None when it has none.

        Args:
            model_id: objectId of the Model.
        """
        field_records = self.client.find(
            MODEL_FIELD_CLASS_NAME,
            {
                "model": self.client.pointer(MODEL_CLASS_NAME, model_id),
                "isDisabled": False,
            },
        )

        if not field_records:
            return None

        return tuple(
            Field(
                name_id=r.get("nameId"),
                name=r.get("name"),
                is_list=bool(r.get("isList")),
                type=FieldType.from_backend(r.get("type")),
            )
            for r in field_records
        )


def check_unique_type_names(models: List[Model]):
    """Raise DuplicateTypeNameError if two models share a type name.

    The MediaItem type is reserved for media records.
    """
    seen: Dict[str, Model] = {}
    for model in models:
        if model.type_name == MEDIA_ITEM_TYPE_NAME:
            raise DuplicateTypeNameError(
                f"Model '{model.name}' ({model.id}) derives the reserved type name "
                f"'{MEDIA_ITEM_TYPE_NAME}'"
            )
        other = seen.get(model.type_name)
        if other is not None:
            raise DuplicateTypeNameError(
                f"Models '{other.name}' ({other.id}) and '{model.name}' ({model.id}) "
                f"both derive the type name '{model.type_name}'"
            )
        seen[model.type_name] = model
