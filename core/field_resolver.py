"""
Field Resolver — Reads one field's value from one raw record.

Field-level faults are never fatal. Every lookup returns a FieldResolution:

  PRESENT  the property is set; `value` holds the decoded value
  ABSENT   the property is missing or null
  ERROR    reading/decoding the property raised; `error` holds the exception

An ERROR is printed as a warning and the Record Transformer degrades it to an
absent value, so one bad field does not invalidate the rest of the record.
The same rule covers the metadata every payload carries (Title, createdAt,
updatedAt) through resolve_property().
"""

from typing import Any, Callable, Optional

from .parse_client import ParseObject
from .schema import Field, FieldResolution


def resolve_property(
    record: ParseObject,
    key: str,
    read: Optional[Callable[[], Any]] = None,
) -> FieldResolution:
    """Resolve a single record property into an explicit outcome.

    Args:
        record: The raw record.
        key: The property name, used for the lookup and in the warning.
        read: Optional accessor to call instead of record.get(key), e.g. for
              the decoded createdAt/updatedAt timestamps.

    Returns:
        A FieldResolution (PRESENT, ABSENT or ERROR).
    """
    try:
        value = read() if read is not None else record.get(key)
    except Exception as e:
        print(f"  Warning: could not read field '{key}' on "
              f"{record.class_name}/{record.id}: {e}")
        return FieldResolution.failed(e)

    if value is None:
        return FieldResolution.absent()
    return FieldResolution.present(value)


def resolve_field(record: ParseObject, field: Field) -> FieldResolution:
    """Resolve a field on a record; its name_id is the property key."""
    return resolve_property(record, field.name_id)


def get_field_value(record: ParseObject, field: Field) -> Any:
    """Return the field's value, or None when it is absent or failed to resolve."""
    return resolve_field(record, field).value_or_none()
