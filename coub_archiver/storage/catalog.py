"""
Loads a user's catalog listing from disk.
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from coub_archiver.exceptions import CatalogError
from coub_archiver.models.coub import ClipRecord

log = logging.getLogger(__name__)

_CATALOG_ADAPTER = TypeAdapter(list[ClipRecord])


def catalog_path(root_dir: Path, user: str) -> Path:
    return Path(root_dir) / f"{user}.json"


def load_catalog(root_dir: Path, user: str) -> list[ClipRecord]:
    """
    Reads and validates '<root_dir>/<user>.json'.

    Raises:
        CatalogError: If the file is missing, unreadable, not valid JSON, not a
        list, or contains a record that fails validation.
    """
    path = catalog_path(root_dir, user)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise CatalogError(f"Catalog file not found at '{path}'.") from e
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Could not read catalog file '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise CatalogError(f"Catalog file '{path}' is not valid JSON: {e}") from e

    if not isinstance(data, list):
        raise CatalogError(
            f"Catalog file '{path}' must contain a list of coubs, "
            f"got {type(data).__name__}."
        )

    try:
        records = _CATALOG_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise CatalogError(f"Catalog file '{path}' failed validation:\n{e}") from e

    log.debug(f"Loaded {len(records)} records from '{path}'")
    return records


def filter_reposts(records: list[ClipRecord]) -> list[ClipRecord]:
    """Drops recoubs, keeping the remaining records in their original order."""
    return [record for record in records if not record.is_repost]
