"""
Filesystem helpers used by the translation cache.

Blocking helpers are plain functions so callers can run them through
``asyncio.to_thread``. JSON writes go through a temporary file and an atomic
replace so readers never observe a partially written document.
"""

import json
import logging
import os
import shutil
import tempfile
import time
from pathlib import Path

logger = logging.getLogger(__name__)


def read_json(path: Path) -> object:
    """
    Read and parse a UTF-8 JSON document.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the content is not valid JSON
    """
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)  # pyright: ignore[reportAny]


def dump_json(data: object) -> str:
    """Serialize ``data`` the same way every time for byte-identical cache files."""
    return json.dumps(data, ensure_ascii=False)


def write_json_atomic(path: Path, data: object) -> None:
    """
    Write ``data`` as JSON to ``path`` using a temporary file and atomic move.

    Raises:
        OSError: If file operations fail
    """
    temp_file = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as temp_file:
            _ = temp_file.write(dump_json(data))
            temp_file.flush()
            temp_path = Path(temp_file.name)

        # Atomic move
        _ = temp_path.replace(path)
        logger.debug(f"Wrote {path}")

    except Exception as e:
        # Clean up temporary file if it exists
        if temp_file and Path(temp_file.name).exists():
            Path(temp_file.name).unlink(missing_ok=True)
        raise OSError(f"Failed to write {path}: {e}") from e


def touch(path: Path) -> None:
    """Set the access and modification times of ``path`` to now."""
    now = time.time()
    os.utime(path, (now, now))


def remove_tree(path: Path, max_retries: int = 3, retry_delay: float = 0.1) -> bool:
    """
    Recursively delete ``path``, retrying transient failures.

    Args:
        path: Directory to delete; a missing directory counts as deleted
        max_retries: Number of attempts before giving up
        retry_delay: Seconds to wait between attempts

    Returns:
        True if the directory is gone, False if every attempt failed
    """
    for attempt in range(1, max_retries + 1):
        try:
            shutil.rmtree(path)
            return True
        except FileNotFoundError:
            return True
        except OSError as e:
            logger.warning(
                f"Attempt {attempt}/{max_retries} to delete {path} failed: {e}"
            )
            if attempt < max_retries:
                time.sleep(retry_delay)

    return not path.exists()
