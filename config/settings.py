"""
Settings — Default configuration values for the Chisel Parse source connector.

This module provides the DEFAULT_SETTINGS dict that the orchestrator uses as
fallback values when environment variables are not set. The actual configuration
is loaded from .env at runtime; these defaults ensure the connector works out of
the box for a standard Chisel installation.

Configuration precedence (highest to lowest):
  1. CLI flags (--debug, --no-save)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  PROVIDER_NAME           Label used in output folder naming (e.g., "Chisel_Parse_Source")
  TYPE_NAME_PREFIX        Prefix joined to every model name to form its node type
  PARSE_QUERY_LIMIT       The "limit" sent with every Parse query (no pagination)
  REQUEST_TIMEOUT         Per-request timeout in seconds
  OUTPUT_DIR              Where to write sourcing output (default: ./output)
  OUTPUT_RETENTION_DAYS   How many days to keep old output folders (0 = keep forever)
  SAVE_JSON               Whether to write the sourced nodes to disk (default: True)
  DEBUG                   Whether to print verbose output (default: False)

The Parse class and property names below are fixed by the Chisel data model
and are not read from the environment.
"""

PROVIDER_NAME = "Chisel_Parse_Source"

DEFAULT_SETTINGS = {
    "PROVIDER_NAME": PROVIDER_NAME,
    "TYPE_NAME_PREFIX": "Chisel",
    "PARSE_QUERY_LIMIT": 1000,
    "REQUEST_TIMEOUT": 30,
    "OUTPUT_DIR": "./output",
    "OUTPUT_RETENTION_DAYS": 30,
    "SAVE_JSON": True,
    "DEBUG": False,
}

# Chisel schema classes
SITE_CLASS_NAME = "Site"
MODEL_CLASS_NAME = "Model"
MODEL_FIELD_CLASS_NAME = "ModelField"
MEDIA_ITEM_CLASS_NAME = "MediaItem"

# Node type used for every MediaItem record, regardless of TYPE_NAME_PREFIX
MEDIA_ITEM_TYPE_NAME = "MediaItem"

# Content record properties
STATUS_PROPERTY = "t__status"
PUBLISHED_STATUS = "Published"
TITLE_PROPERTY = "Title"
FILE_PROPERTY = "file"

# Suffix the host graph uses to recognise foreign-key properties
FOREIGN_KEY_SUFFIX = "___NODE"
