"""
Config module - Connector defaults and the fixed Chisel class/property names.
"""

from .settings import (
    DEFAULT_SETTINGS,
    PROVIDER_NAME,
    SITE_CLASS_NAME,
    MODEL_CLASS_NAME,
    MODEL_FIELD_CLASS_NAME,
    MEDIA_ITEM_CLASS_NAME,
    MEDIA_ITEM_TYPE_NAME,
    STATUS_PROPERTY,
    PUBLISHED_STATUS,
    TITLE_PROPERTY,
    FILE_PROPERTY,
    FOREIGN_KEY_SUFFIX,
)
