"""Maps object ids to sharded paths under the store's base directory."""

import os
from pathlib import Path
from typing import Union

from common.constants import MIN_OID_LENGTH, UPLOAD_TEMP_SUFFIX
from common.exceptions import InvalidObjectIdError


def shard_dir(base_dir: Union[str, Path], oid: str) -> Path:
    """
    Get the directory holding an object: base/oid[0:2]/oid[2:4].

    Args:
        base_dir: Root of the object store
        oid: Object id (lowercase hex digest)

    Returns:
        Path of the two-level shard directory

    Raises:
        InvalidObjectIdError: If the id is shorter than 4 characters
    """
    if len(oid) < MIN_OID_LENGTH:
        raise InvalidObjectIdError(f"Object id {oid!r} is too short to address")
    return Path(base_dir) / oid[0:2] / oid[2:4]


def storage_path(base_dir: Union[str, Path], oid: str) -> Path:
    """
    Resolve the path of an object, creating its shard directories if needed.

    Uses the same folder split as git-lfs itself, so one store can be shared
    by any number of repositories.

    Args:
        base_dir: Root of the object store
        oid: Object id (lowercase hex digest)

    Returns:
        Path object for the stored object

    Raises:
        InvalidObjectIdError: If the id is shorter than 4 characters
        OSError: If the shard directories cannot be created
    """
    folder = shard_dir(base_dir, oid)
    os.makedirs(folder, exist_ok=True)
    return folder / oid


def temp_path_for(dest_path: Path) -> Path:
    """Well-known temp path an upload is written to before the final rename."""
    return dest_path.with_name(dest_path.name + UPLOAD_TEMP_SUFFIX)
