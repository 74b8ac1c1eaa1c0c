"""
Runtime access to materialized messages.

Messages are looked up by their position in the build-time catalog rather
than by key. A resolved configuration points at the cached, translated list;
the default configuration uses the catalog's own ``nls.messages.json``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path

from .cache import MESSAGES_FILE_NAME
from .types import InternalNLSConfiguration, NLSConfiguration
from ..utils.core.fs_utils import read_json

logger = logging.getLogger(__name__)

_ARGUMENT_PATTERN = re.compile(r"\{(\d+)\}")


def load_message_bundle(configuration: NLSConfiguration, nls_metadata_path: Path) -> list[str]:
    """
    Load the message list an application should use for ``configuration``.

    Falls back to the default messages if the cached list cannot be read.

    Args:
        configuration: Result of ``NLSResolver.resolve_configuration``
        nls_metadata_path: Folder holding the default ``nls.messages.json``

    Returns:
        Messages indexed the same way as the default catalog

    Raises:
        OSError: If the default messages cannot be read either
        ValueError: If the default messages are not a list of strings
    """
    if isinstance(configuration, InternalNLSConfiguration):
        try:
            return _read_messages(configuration.messages_file)
        except (OSError, ValueError) as e:
            logger.warning(
                f"Failed to load translated messages from {configuration.messages_file}: {e}"
            )
            logger.info("Using default messages")

    return _read_messages(nls_metadata_path / MESSAGES_FILE_NAME)


def _read_messages(path: Path) -> list[str]:
    data = read_json(path)
    if not isinstance(data, list) or not all(isinstance(m, str) for m in data):  # pyright: ignore[reportUnknownVariableType]
        raise ValueError(f"{path} must contain a JSON array of strings")
    return data  # pyright: ignore[reportUnknownVariableType]


def localize(messages: list[str], index: int, default: str, *args: object) -> str:
    """
    Look up message ``index`` and substitute ``{0}``, ``{1}``, ... placeholders.

    Examples:
        >>> localize(["Hallo {0}"], 0, "Hello {0}", "Welt")
        'Hallo Welt'
        >>> localize([], 3, "Hello {0}", "world")
        'Hello world'
    """
    message = messages[index] if 0 <= index < len(messages) else default

    if not args:
        return message

    def replace(match: re.Match[str]) -> str:
        position = int(match.group(1))
        if position < len(args):
            return str(args[position])
        return match.group(0)

    return _ARGUMENT_PATTERN.sub(replace, message)
