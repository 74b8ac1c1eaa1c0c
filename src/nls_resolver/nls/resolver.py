"""
NLS configuration resolution for application startup.

Resolution runs as a short pipeline: load the language pack manifest, match
the requested locale, validate the pack, check the translation cache and, on
a miss, materialize the translations. Every stage returns ``Ok`` or ``Err``;
the first ``Err`` is logged once here and turns into the default
configuration, so resolution never raises.

Usage Examples:
    >>> resolver = NLSResolver()
    >>> config = await resolver.resolve_configuration(
    ...     NLSResolveContext(
    ...         user_locale="de",
    ...         os_locale="de-de",
    ...         user_data_path=Path("~/.app").expanduser(),
    ...         commit="1a2b3c",
    ...         nls_metadata_path=Path("out"),
    ...     )
    ... )
    >>> config.available_languages
    {'*': 'de'}
"""

from __future__ import annotations

import asyncio
import logging
import os
import time
from pathlib import Path
from typing import Protocol

from .cache import CacheHit, CachePaths, TranslationCache
from .manifest import load_language_packs, resolve_pack_locale
from .materializer import materialize
from .result import Diagnostic, DiagnosticKind, Err, Ok
from .types import InternalNLSConfiguration, NLSConfiguration, NLSResolveContext
from ..config.schema import ResolverConfig

logger = logging.getLogger(__name__)

WILL_GENERATE_MARK = "code/willGenerateNls"
DID_GENERATE_MARK = "code/didGenerateNls"

# Touches started by one-off resolvers, referenced until they finish
_detached_tasks: set[asyncio.Task[None]] = set()


class ResolutionObserver(Protocol):
    """Receives start and finish events of each resolution."""

    def resolution_started(self) -> None: ...

    def resolution_finished(self) -> None: ...


class PerformanceMarks:
    """Observer recording named timestamps for startup performance reporting."""

    def __init__(self) -> None:
        self.marks: list[tuple[str, float]] = []

    def resolution_started(self) -> None:
        self.marks.append((WILL_GENERATE_MARK, time.perf_counter()))

    def resolution_finished(self) -> None:
        self.marks.append((DID_GENERATE_MARK, time.perf_counter()))

    def duration(self) -> float | None:
        """Seconds between the last start and finish marks, if both exist."""
        started = [t for name, t in self.marks if name == WILL_GENERATE_MARK]
        finished = [t for name, t in self.marks if name == DID_GENERATE_MARK]
        if not started or not finished:
            return None
        return finished[-1] - started[-1]


def default_configuration(
    user_locale: str, os_locale: str, pseudo: bool | None = None
) -> NLSConfiguration:
    """
    Build the configuration that uses the built-in messages only.

    Args:
        user_locale: Locale requested by the user
        os_locale: Locale of the operating system
        pseudo: True when pseudo-localization is requested

    Returns:
        NLSConfiguration with no available languages
    """
    return NLSConfiguration(
        user_locale=user_locale,
        os_locale=os_locale,
        available_languages={},
        pseudo=pseudo,
    )


def _resolved_configuration(
    context: NLSResolveContext, resolved_locale: str, paths: CachePaths
) -> InternalNLSConfiguration:
    return InternalNLSConfiguration(
        user_locale=context.user_locale,
        os_locale=context.os_locale,
        available_languages={"*": resolved_locale},
        language_pack_id=paths.language_pack_id,
        translations_config_file=paths.translations_config_file,
        cache_root=paths.cache_root,
        resolved_language_pack_core_location=paths.commit_dir,
        corrupted_file=paths.corrupted_file,
    )


class NLSResolver:
    """
    Resolves which translations an application instance should use.

    Args:
        config: Resolver settings; defaults are used when omitted
        observer: Receives start/finish events; a ``PerformanceMarks``
            instance is created when omitted
    """

    def __init__(
        self,
        config: ResolverConfig | None = None,
        observer: ResolutionObserver | None = None,
    ) -> None:
        self.config: ResolverConfig = config or ResolverConfig()
        self.observer: ResolutionObserver = observer or PerformanceMarks()
        self.cache: TranslationCache = TranslationCache(self.config)

    def _short_circuit(self, context: NLSResolveContext) -> bool:
        if os.environ.get(self.config.dev_mode_env_var):
            logger.debug(f"{self.config.dev_mode_env_var} is set, using default messages")
            return True
        if context.user_locale == self.config.pseudo_locale:
            return True
        if self.config.is_default_locale(context.user_locale):
            return True
        if not context.commit:
            logger.debug("No commit available, translations are not cached")
            return True
        return False

    def _finish(self, configuration: NLSConfiguration) -> NLSConfiguration:
        self.observer.resolution_finished()
        return configuration

    def _fallback(self, context: NLSResolveContext, diagnostic: Diagnostic) -> NLSConfiguration:
        diagnostic.log(logger)
        return self._finish(default_configuration(context.user_locale, context.os_locale))

    async def resolve_configuration(self, context: NLSResolveContext) -> NLSConfiguration:
        """
        Resolve the NLS configuration for ``context``.

        Args:
            context: Requested locale, data folders and build identifier

        Returns:
            InternalNLSConfiguration when a language pack is used, otherwise
            the default configuration. Never raises.
        """
        self.observer.resolution_started()

        if self._short_circuit(context):
            pseudo = True if context.user_locale == self.config.pseudo_locale else None
            return self._finish(
                default_configuration(context.user_locale, context.os_locale, pseudo)
            )

        try:
            return await self._resolve(context)
        except Exception as e:
            return self._fallback(
                context,
                Diagnostic.from_exception(e, message="Generating translation files failed"),
            )

    async def _resolve(self, context: NLSResolveContext) -> NLSConfiguration:
        commit = context.commit
        if not commit:
            return self._fallback(
                context,
                Diagnostic(kind=DiagnosticKind.ABSENT_INPUT, message="No commit available"),
            )

        manifest_path = context.user_data_path / self.config.manifest_file_name
        match await load_language_packs(manifest_path):
            case Err(diagnostic=diagnostic):
                return self._fallback(context, diagnostic)
            case Ok(value=language_packs):
                pass

        resolved_locale = resolve_pack_locale(language_packs, context.user_locale)
        if not resolved_locale:
            return self._fallback(
                context,
                Diagnostic(
                    kind=DiagnosticKind.ABSENT_INPUT,
                    message=f"No language pack installed for '{context.user_locale}'",
                ),
            )

        match await self.cache.validate_pack(language_packs[resolved_locale]):
            case Err(diagnostic=diagnostic):
                return self._fallback(context, diagnostic)
            case Ok(value=pack):
                pass

        match await self.cache.prepare(
            pack,
            resolved_locale,
            context.user_data_path,
            commit,
            context.nls_metadata_path,
        ):
            case Err(diagnostic=diagnostic):
                return self._fallback(context, diagnostic)
            case Ok(value=CacheHit(paths=paths)):
                return self._finish(_resolved_configuration(context, resolved_locale, paths))
            case Ok(value=miss):
                pass

        match await materialize(miss):
            case Err(diagnostic=diagnostic):
                return self._fallback(context, diagnostic)
            case Ok():
                return self._finish(
                    _resolved_configuration(context, resolved_locale, miss.paths)
                )

    async def wait_for_background_tasks(self) -> None:
        """Wait for detached cache touches started by earlier resolutions."""
        await self.cache.wait_for_background_tasks()


async def resolve_nls_configuration(
    user_locale: str,
    os_locale: str,
    user_data_path: Path,
    commit: str | None,
    nls_metadata_path: Path,
    config: ResolverConfig | None = None,
    observer: ResolutionObserver | None = None,
) -> NLSConfiguration:
    """
    Resolve the NLS configuration with a one-off resolver.

    A freshness touch started on a cache hit keeps running after this returns.

    Args:
        user_locale: Locale requested by the user, e.g. ``"fr-CA"``
        os_locale: Locale of the operating system
        user_data_path: Folder holding ``languagepacks.json`` and the cache
        commit: Build identifier; translations are not cached without one
        nls_metadata_path: Folder holding ``nls.keys.json`` and ``nls.messages.json``
        config: Optional resolver settings
        observer: Optional start/finish observer

    Returns:
        The resolved or default configuration
    """
    resolver = NLSResolver(config=config, observer=observer)
    configuration = await resolver.resolve_configuration(
        NLSResolveContext(
            user_locale=user_locale,
            os_locale=os_locale,
            user_data_path=user_data_path,
            commit=commit,
            nls_metadata_path=nls_metadata_path,
        )
    )
    resolver.cache.hand_off_background_tasks(_detached_tasks)
    return configuration
