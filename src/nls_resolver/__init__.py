"""
NLS Resolver - picks the language pack for an application instance at startup
and caches its materialized translations on disk.
"""

import asyncio
import logging
from pathlib import Path

from .config import ConfigManager, ResolverConfig
from .nls import (
    NLSConfiguration,
    NLSResolver,
    NLSResolveContext,
    resolve_nls_configuration,
)
from .utils.core.logging_setup import attach_log_file

logger = logging.getLogger(__name__)


def resolve_configuration_sync(
    context: NLSResolveContext, config_path: Path | None = None
) -> NLSConfiguration:
    """
    Synchronous entry point for startup code that is not running an event loop.

    Waits for the cache freshness touch before returning. Invalid settings
    files are ignored in favour of the defaults.

    Args:
        context: Requested locale, data folders and build identifier
        config_path: Optional YAML file with resolver settings

    Returns:
        The resolved or default configuration
    """
    config = ConfigManager.load_or_default(config_path)

    if config.log_file is not None:
        try:
            _ = attach_log_file(
                config.log_file, logging.getLevelNamesMapping()[config.log_level]
            )
        except OSError as e:
            logger.warning(f"Could not open resolver log file {config.log_file}: {e}")

    resolver = NLSResolver(config=config)

    async def run() -> NLSConfiguration:
        configuration = await resolver.resolve_configuration(context)
        await resolver.wait_for_background_tasks()
        return configuration

    return asyncio.run(run())


__all__ = [
    "ConfigManager",
    "ResolverConfig",
    "NLSConfiguration",
    "NLSResolver",
    "NLSResolveContext",
    "resolve_nls_configuration",
    "resolve_configuration_sync",
]
