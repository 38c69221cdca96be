"""
Schema — Typed descriptors for the Chisel content schema.

The Schema Loader turns the Model and ModelField records of a site into these
immutable descriptors; every later step reads them instead of looking up
properties by key string.

  Model   One content type: short name, derived node type name, backend id,
          Parse class (table) name, and its enabled fields.
  Field   One attribute of a Model. Its kind is the closed FieldType enum:
          SCALAR values are copied as-is, REFERENCE and MEDIA values become
          links to other nodes.

FieldResolution is the explicit outcome of reading one field from one record
(PRESENT, ABSENT or ERROR); see field_resolver.py.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterator, Optional, Tuple


class FieldType(Enum):
    SCALAR = "Scalar"
    REFERENCE = "Reference"
    MEDIA = "Media"

    @classmethod
    def from_backend(cls, value: Optional[str]) -> "FieldType":
        """Map the ModelField "type" string to a FieldType.

        Only "Reference" and "Media" are link kinds; every other value
        (Short Text, Number, Boolean, missing, ...) is a plain scalar copy.
        """
        if value == cls.REFERENCE.value:
            return cls.REFERENCE
        if value == cls.MEDIA.value:
            return cls.MEDIA
        return cls.SCALAR


@dataclass(frozen=True)
class Field:
    name_id: str
    name: str
    is_list: bool
    type: FieldType

    @property
    def is_link(self) -> bool:
        return self.type in (FieldType.REFERENCE, FieldType.MEDIA)


@dataclass(frozen=True)
class Model:
    """A content model and its field schema.

    `fields` is None when the model has no enabled fields; use iter_fields()
    to treat None and an empty tuple the same way.
    """

    name: str
    type_name: str
    id: str
    table_name: str
    fields: Optional[Tuple[Field, ...]] = None

    def iter_fields(self) -> Iterator[Field]:
        return iter(self.fields or ())


class ResolutionStatus(Enum):
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


@dataclass(frozen=True)
class FieldResolution:
    status: ResolutionStatus
    value: Any = None
    error: Optional[BaseException] = None

    @classmethod
    def present(cls, value: Any) -> "FieldResolution":
        return cls(ResolutionStatus.PRESENT, value=value)

    @classmethod
    def absent(cls) -> "FieldResolution":
        return cls(ResolutionStatus.ABSENT)

    @classmethod
    def failed(cls, error: BaseException) -> "FieldResolution":
        return cls(ResolutionStatus.ERROR, error=error)

    @property
    def is_present(self) -> bool:
        return self.status is ResolutionStatus.PRESENT

    def value_or_none(self) -> Any:
        return self.value if self.is_present else None
