"""
Language pack manifest loading and locale lookup.

The manifest (``languagepacks.json``) maps locale tags to installed packs. A
requested locale is matched from most to least specific by dropping the last
``-`` separated subtag until an installed pack is found.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from pathlib import Path

from .result import Diagnostic, DiagnosticKind, Err, Ok, Result
from ..utils.core.exceptions import ManifestError
from ..utils.core.fs_utils import read_json

logger = logging.getLogger(__name__)

LOCALE_SEPARATOR = "-"


def resolve_pack_locale(
    language_packs: Mapping[str, object], locale: str | None
) -> str | None:
    """
    Find the most specific installed pack for ``locale``.

    Args:
        language_packs: Manifest mapping locale tags to pack entries
        locale: Requested locale, e.g. ``"fr-CA"``

    Returns:
        The matching manifest key, or None if no tier of the locale is installed

    Examples:
        >>> resolve_pack_locale({"fr": {"hash": "h1"}}, "fr-CA")
        'fr'
        >>> resolve_pack_locale({"en-US": {"hash": "h2"}}, "en") is None
        True
    """
    try:
        while locale:
            if language_packs.get(locale):
                return locale

            index = locale.rfind(LOCALE_SEPARATOR)
            if index > 0:
                locale = locale[:index]
            else:
                return None
    except Exception as e:
        logger.error(f"Resolving language pack configuration failed: {e}")

    return None


def _load_manifest_sync(manifest_path: Path) -> dict[str, object]:
    data = read_json(manifest_path)
    if not isinstance(data, dict):
        raise ManifestError(
            f"Language pack manifest must be a JSON object, got {type(data).__name__}",
            context=manifest_path,
        )
    return data  # pyright: ignore[reportUnknownVariableType]


async def load_language_packs(manifest_path: Path) -> Result[dict[str, object]]:
    """
    Read the language pack manifest.

    A missing or unreadable manifest means no language packs are installed,
    so every failure is reported as absent input.

    Args:
        manifest_path: Location of ``languagepacks.json``

    Returns:
        Ok with the manifest mapping, or Err if there is nothing usable
    """
    try:
        manifest = await asyncio.to_thread(_load_manifest_sync, manifest_path)
    except (OSError, ValueError, ManifestError) as e:
        return Err(
            Diagnostic(
                kind=DiagnosticKind.ABSENT_INPUT,
                message=f"No language pack configuration at {manifest_path} ({e})",
            )
        )

    logger.debug(f"Loaded {len(manifest)} language pack(s) from {manifest_path}")
    return Ok(manifest)
