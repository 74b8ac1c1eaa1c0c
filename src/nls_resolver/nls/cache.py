"""
Translation cache state management.

The cache lives under ``<user data>/<cache dir>/<hash>.<locale>/``:

- ``corrupted.info`` marks the whole pack folder as invalid
- ``tcf.json`` holds the pack's raw translations mapping
- ``<commit>/nls.messages.json`` holds the materialized messages of a build

A commit folder is only published once its messages are complete, so its
existence alone is treated as proof that the entry can be reused.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from dataclasses import dataclass
from pathlib import Path

from pydantic import ValidationError

from .result import Diagnostic, DiagnosticKind, Err, Ok, Result
from .types import LanguagePackEntry
from ..config.schema import ResolverConfig
from ..utils.core.exceptions import CacheError, PackValidationError
from ..utils.core.fs_utils import remove_tree, touch

logger = logging.getLogger(__name__)

MESSAGES_FILE_NAME = "nls.messages.json"
KEYS_FILE_NAME = "nls.keys.json"
TRANSLATIONS_CONFIG_FILE_NAME = "tcf.json"
CORRUPTED_FILE_NAME = "corrupted.info"


@dataclass(frozen=True)
class CachePaths:
    """Locations of one language pack's cache entry for one build."""

    language_pack_id: str
    cache_root: Path
    commit_dir: Path
    messages_file: Path
    translations_config_file: Path
    corrupted_file: Path

    @classmethod
    def build(
        cls,
        user_data_path: Path,
        cache_dir_name: str,
        pack_hash: str,
        locale: str,
        commit: str,
    ) -> CachePaths:
        """
        Compute the cache layout for a (pack, build) pair.

        Args:
            user_data_path: Root of the per-user data folder
            cache_dir_name: Name of the cache folder below the data root
            pack_hash: Content fingerprint of the language pack
            locale: Resolved locale of the pack
            commit: Build identifier

        Returns:
            CachePaths for the entry
        """
        language_pack_id = f"{pack_hash}.{locale}"
        cache_root = user_data_path / cache_dir_name / language_pack_id
        commit_dir = cache_root / commit
        return cls(
            language_pack_id=language_pack_id,
            cache_root=cache_root,
            commit_dir=commit_dir,
            messages_file=commit_dir / MESSAGES_FILE_NAME,
            translations_config_file=cache_root / TRANSLATIONS_CONFIG_FILE_NAME,
            corrupted_file=cache_root / CORRUPTED_FILE_NAME,
        )


@dataclass(frozen=True)
class CacheHit:
    """The commit folder exists and is reused as-is."""

    paths: CachePaths


@dataclass(frozen=True)
class CacheMiss:
    """Everything the materializer needs to build the entry."""

    paths: CachePaths
    default_keys_file: Path
    default_messages_file: Path
    pack_translations_file: Path
    translations: dict[str, object]


CacheState = CacheHit | CacheMiss


class TranslationCache:
    """
    Inspects and prepares cache entries for validated language packs.

    Freshness touches of reused entries run as detached background tasks;
    the cache keeps a reference to each until it completes.
    """

    def __init__(self, config: ResolverConfig) -> None:
        self._config: ResolverConfig = config
        self._background_tasks: set[asyncio.Task[None]] = set()

    async def validate_pack(self, entry: object) -> Result[LanguagePackEntry]:
        """
        Check that a manifest entry can be used.

        The entry needs a string hash, a translations mapping and an existing
        translation file for the core component.

        Args:
            entry: Raw manifest value for the resolved locale

        Returns:
            Ok with the parsed entry, or Err describing what is missing
        """
        try:
            pack = LanguagePackEntry.model_validate(entry)
        except ValidationError as e:
            return Err(
                Diagnostic.from_exception(
                    PackValidationError(
                        f"Invalid language pack entry ({e.error_count()} error(s))",
                        context=entry,
                    ),
                )
            )

        core_path = pack.core_translation_path(self._config.core_component_id)
        if core_path is None:
            return Err(
                Diagnostic.from_exception(
                    PackValidationError(
                        f"Language pack has no translation file for '{self._config.core_component_id}'"
                    )
                )
            )

        if not await asyncio.to_thread(Path(core_path).exists):
            return Err(
                Diagnostic.from_exception(
                    PackValidationError(f"Language pack translation file is missing: {core_path}")
                )
            )

        return Ok(pack)

    async def prepare(
        self,
        pack: LanguagePackEntry,
        locale: str,
        user_data_path: Path,
        commit: str,
        nls_metadata_path: Path,
    ) -> Result[CacheState]:
        """
        Decide whether the cache entry for ``pack`` and ``commit`` can be reused.

        A corrupted pack folder is deleted before anything else looks at it.

        Args:
            pack: Validated language pack entry
            locale: Locale the pack was resolved for
            user_data_path: Root of the per-user data folder
            commit: Build identifier
            nls_metadata_path: Folder holding the default message catalog

        Returns:
            Ok(CacheHit) to reuse, Ok(CacheMiss) to regenerate, Err on failure
        """
        paths = CachePaths.build(
            user_data_path, self._config.cache_dir_name, pack.hash, locale, commit
        )

        if await asyncio.to_thread(paths.corrupted_file.exists):
            logger.warning(
                f"Language pack cache {paths.language_pack_id} is marked corrupted, deleting {paths.cache_root}"
            )
            removed = await asyncio.to_thread(
                remove_tree, paths.cache_root, self._config.cleanup_max_retries
            )
            if not removed and await asyncio.to_thread(paths.commit_dir.exists):
                return Err(
                    Diagnostic(
                        kind=DiagnosticKind.CORRUPTION,
                        message=f"Could not delete corrupted cache {paths.cache_root}",
                        error=CacheError(f"{paths.cache_root} still exists"),
                    )
                )

        if await asyncio.to_thread(paths.commit_dir.is_dir):
            logger.debug(f"Reusing cached translations in {paths.commit_dir}")
            if self._config.touch_on_cache_hit:
                _ = self.create_background_task(
                    self._touch_quietly(paths.commit_dir),
                    name=f"touch-{paths.language_pack_id}",
                )
            return Ok(CacheHit(paths=paths))

        core_path = pack.core_translation_path(self._config.core_component_id)
        if core_path is None:
            return Err(
                Diagnostic.from_exception(
                    PackValidationError(
                        f"Language pack {paths.language_pack_id} has no {self._config.core_component_id} translations"
                    )
                )
            )

        return Ok(
            CacheMiss(
                paths=paths,
                default_keys_file=nls_metadata_path / KEYS_FILE_NAME,
                default_messages_file=nls_metadata_path / MESSAGES_FILE_NAME,
                pack_translations_file=Path(core_path),
                translations=dict(pack.translations),
            )
        )

    @staticmethod
    async def _touch_quietly(path: Path) -> None:
        try:
            await asyncio.to_thread(touch, path)
        except OSError as e:
            logger.debug(f"Could not touch {path}: {e}")

    def create_background_task(
        self, coro: Coroutine[object, object, None], name: str | None = None
    ) -> asyncio.Task[None]:
        """
        Create and track a background task.

        Args:
            coro: The coroutine to run as a background task
            name: Optional name for the task (for debugging)

        Returns:
            The created task
        """
        task = asyncio.create_task(coro, name=name)
        self._background_tasks.add(task)

        # Remove task from set when it completes
        task.add_done_callback(self._background_tasks.discard)

        logger.debug(f"Created background task: {name or task.get_name()}")
        return task

    @property
    def pending_background_tasks(self) -> int:
        """Number of background tasks that have not finished yet."""
        return len(self._background_tasks)

    async def wait_for_background_tasks(self) -> None:
        """Wait for pending freshness touches; their failures are ignored."""
        if not self._background_tasks:
            return
        _ = await asyncio.gather(*self._background_tasks, return_exceptions=True)

    def hand_off_background_tasks(self, keeper: set[asyncio.Task[None]]) -> None:
        """Keep pending tasks referenced by ``keeper`` until they finish."""
        for task in self._background_tasks:
            keeper.add(task)
            task.add_done_callback(keeper.discard)


def mark_cache_corrupted(corrupted_file: Path) -> None:
    """
    Write the corruption sentinel for a language pack cache folder.

    The next resolution for that pack deletes the folder and regenerates it.

    Args:
        corrupted_file: Sentinel location, e.g. ``InternalNLSConfiguration.corrupted_file``

    Raises:
        OSError: If the sentinel cannot be written
    """
    corrupted_file.parent.mkdir(parents=True, exist_ok=True)
    _ = corrupted_file.write_text("", encoding="utf-8")
    logger.info(f"Marked language pack cache as corrupted: {corrupted_file.parent}")
