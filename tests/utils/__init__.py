"""
Test utilities package for NLS resolver tests.

### test_helpers.py
- `create_nls_environment()`: Default catalog, French pack and user data folder
- `NLSEnvironment`: Paths of a test installation plus manifest helpers
- `create_temp_config_file()`: Context manager for temporary YAML config files
- `DEFAULT_KEYS`, `DEFAULT_MESSAGES`, `FRENCH_CONTENTS`, `FRENCH_MESSAGES`:
  sample catalog data and the expected materialized output
"""

from __future__ import annotations

from .test_helpers import (
    DEFAULT_KEYS,
    DEFAULT_MESSAGES,
    FRENCH_CONTENTS,
    FRENCH_MESSAGES,
    NLSEnvironment,
    create_nls_environment,
    create_temp_config_file,
    write_json,
)

__all__ = [
    "DEFAULT_KEYS",
    "DEFAULT_MESSAGES",
    "FRENCH_CONTENTS",
    "FRENCH_MESSAGES",
    "NLSEnvironment",
    "create_nls_environment",
    "create_temp_config_file",
    "write_json",
]
