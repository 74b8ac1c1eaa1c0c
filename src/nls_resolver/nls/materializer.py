"""
Translation materialization.

Combines the default message catalog produced at build time with a language
pack's translations into the flat, index-addressed message list that the
application reads at runtime, and persists it into the translation cache.

Defaults come as two parallel documents: ``nls.keys.json`` lists
``[module id, [key, ...]]`` pairs and ``nls.messages.json`` lists the default
strings in exactly the order of those keys. The output keeps that order.
"""

from __future__ import annotations

import asyncio
import logging
import tempfile
from collections.abc import Mapping, Sequence
from pathlib import Path

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .cache import MESSAGES_FILE_NAME, CacheMiss
from .result import Diagnostic, Err, Ok, Result
from ..utils.core.exceptions import MaterializationError
from ..utils.core.fs_utils import read_json, remove_tree, write_json_atomic

logger = logging.getLogger(__name__)

DefaultKeys = list[tuple[str, list[str]]]

_default_keys_adapter: TypeAdapter[DefaultKeys] = TypeAdapter(DefaultKeys)
_default_messages_adapter: TypeAdapter[list[str]] = TypeAdapter(list[str])


class PackTranslationFile(BaseModel):
    """A language pack's translation document for one component."""

    contents: dict[str, dict[str, object] | None] = Field(
        default_factory=dict,
        description="Module id to key to translated message; null means no translations",
    )


def materialize_messages(
    default_keys: Sequence[tuple[str, Sequence[str]]],
    default_messages: Sequence[str],
    pack_contents: Mapping[str, Mapping[str, object] | None],
) -> list[str]:
    """
    Build the ordered message list for a language pack.

    A non-empty string translation wins; anything else falls back to the
    default message at the same flat position.

    Args:
        default_keys: Module ids with their keys, in build order
        default_messages: Default messages, one per key, in the same order
        pack_contents: Module id to key to translated message

    Returns:
        Messages in the same order and of the same length as ``default_messages``

    Raises:
        MaterializationError: If the key count does not match the message count
    """
    key_count = sum(len(keys) for _, keys in default_keys)
    if key_count != len(default_messages):
        raise MaterializationError(
            f"Default catalog has {key_count} keys but {len(default_messages)} messages"
        )

    result: list[str] = []

    nls_index = 0
    for module_id, keys in default_keys:
        module_translations = pack_contents.get(module_id) or {}
        for key in keys:
            translated = module_translations.get(key)
            if isinstance(translated, str) and translated:
                result.append(translated)
            else:
                result.append(default_messages[nls_index])
            nls_index += 1

    return result


def _parse_default_keys(data: object) -> DefaultKeys:
    try:
        return _default_keys_adapter.validate_python(data)
    except ValidationError as e:
        raise MaterializationError(f"Malformed default keys: {e.error_count()} error(s)") from e


def _parse_default_messages(data: object) -> list[str]:
    try:
        return _default_messages_adapter.validate_python(data)
    except ValidationError as e:
        raise MaterializationError(f"Malformed default messages: {e.error_count()} error(s)") from e


def _parse_pack_translations(data: object) -> PackTranslationFile:
    try:
        return PackTranslationFile.model_validate(data)
    except ValidationError as e:
        raise MaterializationError(f"Malformed pack translations: {e.error_count()} error(s)") from e


def _create_staging_dir(cache_root: Path, commit: str) -> Path:
    cache_root.mkdir(parents=True, exist_ok=True)
    return Path(tempfile.mkdtemp(dir=cache_root, prefix=f".{commit}.", suffix=".tmp"))


def _publish(staging_dir: Path, commit_dir: Path) -> None:
    """Move a fully written staging folder into place as the commit folder."""
    try:
        staging_dir.rename(commit_dir)
    except OSError:
        # Another process published identical content first
        if (commit_dir / MESSAGES_FILE_NAME).exists():
            logger.debug(f"{commit_dir} was published concurrently, discarding {staging_dir}")
            _ = remove_tree(staging_dir)
            return
        raise


async def materialize(miss: CacheMiss) -> Result[list[str]]:
    """
    Generate and persist the cache entry described by ``miss``.

    The staging folder is created while the three input documents are read.
    The messages and ``tcf.json`` are then written concurrently, and only
    after both succeed is the staging folder renamed to the commit folder.

    Args:
        miss: Paths and pack data from the cache state check

    Returns:
        Ok with the materialized messages, or Err if anything failed
    """
    paths = miss.paths
    staging_dir: Path | None = None

    try:
        staging_result, keys_data, messages_data, pack_data = await asyncio.gather(
            asyncio.to_thread(_create_staging_dir, paths.cache_root, paths.commit_dir.name),
            asyncio.to_thread(read_json, miss.default_keys_file),
            asyncio.to_thread(read_json, miss.default_messages_file),
            asyncio.to_thread(read_json, miss.pack_translations_file),
            return_exceptions=True,
        )

        if isinstance(staging_result, Path):
            staging_dir = staging_result
        for outcome in (staging_result, keys_data, messages_data, pack_data):
            if isinstance(outcome, BaseException):
                raise outcome

        messages = materialize_messages(
            _parse_default_keys(keys_data),
            _parse_default_messages(messages_data),
            _parse_pack_translations(pack_data).contents,
        )

        if staging_dir is None:
            raise MaterializationError(f"No staging folder was created in {paths.cache_root}")
        _ = await asyncio.gather(
            asyncio.to_thread(write_json_atomic, staging_dir / MESSAGES_FILE_NAME, messages),
            asyncio.to_thread(
                write_json_atomic, paths.translations_config_file, miss.translations
            ),
        )
        await asyncio.to_thread(_publish, staging_dir, paths.commit_dir)
        staging_dir = None

    except Exception as e:
        return Err(
            Diagnostic.from_exception(e, message="Generating translation files failed")
        )

    finally:
        if staging_dir is not None:
            _ = await asyncio.to_thread(remove_tree, staging_dir)

    logger.info(
        f"Generated {len(messages)} translated message(s) for {paths.language_pack_id} in {paths.commit_dir}"
    )
    return Ok(messages)
