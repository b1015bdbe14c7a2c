"""Download (retrieve) and upload (store) operations against the folder store.

Each operation reports zero or more progress messages followed by exactly
one completion, which carries an error if any step failed. Steps raise
TransferFailure; the public functions below are the only place it is
caught and turned into a response.
"""

import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import BinaryIO

from common.constants import (
    DOWNLOAD_TEMP_PREFIX,
    ERR_DOWNLOAD_COPY,
    ERR_DOWNLOAD_NOT_REGULAR,
    ERR_DOWNLOAD_OPEN,
    ERR_DOWNLOAD_STAT,
    ERR_DOWNLOAD_TEMP_FILE,
    ERR_UPLOAD_COPY,
    ERR_UPLOAD_OPEN,
    ERR_UPLOAD_PREPARE_DIR,
    ERR_UPLOAD_RENAME,
    ERR_UPLOAD_STAT,
    ERR_UPLOAD_TEMP_FILE,
)
from common.exceptions import TransferFailure
from common.protocol import ResponseWriter
from folderstore.config import AdapterConfig
from folderstore.copier import ProgressCallback, copy_file_contents
from folderstore.storage import storage_path, temp_path_for

logger = logging.getLogger(__name__)


def _progress_reporter(oid: str, responder: ResponseWriter) -> ProgressCallback:
    def report(total_size: int, so_far: int, since_last: int) -> None:
        responder.send_progress(oid, so_far, since_last)
    return report


def _close_quietly(f: BinaryIO) -> None:
    try:
        f.close()
    except OSError as e:
        logger.warning(f"Error closing {getattr(f, 'name', f)!r}: {e}")


def _discard(path) -> None:
    """Remove a partial temp file; a missing file is fine."""
    try:
        os.remove(path)
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Unable to remove temp file {str(path)!r}: {e}")


def retrieve(config: AdapterConfig, oid: str, size: int, responder: ResponseWriter) -> None:
    """
    Copy a stored object into a new temp file and report its path.

    git-lfs moves the temp file into the working copy itself, so the final
    destination is never known here.

    Args:
        config: Session configuration (base directory, temp directory, block size)
        oid: Object id
        size: Size declared by the caller (informational; the stored size is copied)
        responder: Writer for progress and completion messages
    """
    try:
        temp_name = _retrieve_to_temp(config, oid, responder)
    except TransferFailure as e:
        logger.warning(f"Download of {oid} failed with code {e.code}: {e.message}")
        responder.send_transfer_error(oid, e.code, e.message)
        return

    responder.send_complete(oid, path=temp_name)


def _retrieve_to_temp(config: AdapterConfig, oid: str, responder: ResponseWriter) -> str:
    try:
        file_path = storage_path(config.base_dir, oid)
    except (OSError, ValueError) as e:
        raise TransferFailure(ERR_DOWNLOAD_STAT, f"Cannot resolve storage path for {oid!r}: {e}")

    try:
        stat_src = os.stat(file_path)
    except OSError as e:
        raise TransferFailure(ERR_DOWNLOAD_STAT, f"Cannot stat {str(file_path)!r}: {e}")

    if not stat.S_ISREG(stat_src.st_mode):
        raise TransferFailure(
            ERR_DOWNLOAD_NOT_REGULAR,
            f"Store corruption, {str(file_path)!r} is not a regular file"
        )

    try:
        fd, temp_name = tempfile.mkstemp(prefix=DOWNLOAD_TEMP_PREFIX, dir=config.temp_dir)
    except OSError as e:
        raise TransferFailure(
            ERR_DOWNLOAD_TEMP_FILE,
            f"Error creating temp file for {str(file_path)!r}: {e}"
        )

    dl_file = os.fdopen(fd, 'wb')
    try:
        try:
            src = open(file_path, 'rb')
        except OSError as e:
            raise TransferFailure(ERR_DOWNLOAD_OPEN, f"Cannot read data from {str(file_path)!r}: {e}")

        with src:
            try:
                copy_file_contents(
                    stat_src.st_size,
                    src,
                    dl_file,
                    _progress_reporter(oid, responder),
                    config.block_size
                )
            except OSError as e:
                raise TransferFailure(ERR_DOWNLOAD_COPY, f"Error copying file from {str(file_path)!r}: {e}")

        try:
            dl_file.close()
        except OSError as e:
            raise TransferFailure(ERR_DOWNLOAD_TEMP_FILE, f"Can't close temp file {temp_name!r}: {e}")
    except TransferFailure:
        _close_quietly(dl_file)
        _discard(temp_name)
        raise

    return temp_name


def store(
    config: AdapterConfig,
    oid: str,
    size: int,
    from_path: str,
    responder: ResponseWriter
) -> None:
    """
    Copy a local file into the store under its object id.

    The data is written to `<dest>.tmp` and renamed over the final path, so
    readers only ever see a complete object. An object that is already
    stored with the same size is not copied again.

    Args:
        config: Session configuration (base directory, hard-link toggle, block size)
        oid: Object id
        size: Size declared by the caller (informational; the source's size is copied)
        from_path: Absolute path of the file to upload
        responder: Writer for progress and completion messages
    """
    try:
        _store_object(config, oid, from_path, responder)
    except TransferFailure as e:
        logger.warning(f"Upload of {oid} failed with code {e.code}: {e.message}")
        responder.send_transfer_error(oid, e.code, e.message)
        return

    responder.send_complete(oid)


def _store_object(config: AdapterConfig, oid: str, from_path: str, responder: ResponseWriter) -> None:
    try:
        stat_from = os.stat(from_path)
    except (OSError, ValueError) as e:
        raise TransferFailure(ERR_UPLOAD_STAT, f"Cannot stat {from_path!r}: {e}")

    try:
        dest_path = storage_path(config.base_dir, oid)
    except (OSError, ValueError) as e:
        raise TransferFailure(ERR_UPLOAD_PREPARE_DIR, f"Cannot prepare storage path for {oid!r}: {e}")

    if _already_stored(dest_path, stat_from.st_size):
        logger.info(f"Skipping {oid}, already stored")
        responder.send_progress(oid, stat_from.st_size, stat_from.st_size)
        return

    try:
        os.makedirs(dest_path.parent, exist_ok=True)
    except OSError as e:
        raise TransferFailure(ERR_UPLOAD_PREPARE_DIR, f"Cannot create dir {str(dest_path.parent)!r}: {e}")

    temp_path = temp_path_for(dest_path)
    try:
        os.remove(temp_path)
        logger.info(f"Removed stale temp file {str(temp_path)!r}")
    except FileNotFoundError:
        pass
    except OSError as e:
        raise TransferFailure(
            ERR_UPLOAD_PREPARE_DIR,
            f"Cannot remove existing temp file {str(temp_path)!r}: {e}"
        )

    if config.use_hardlinks and _link_to_temp(from_path, temp_path):
        responder.send_progress(oid, stat_from.st_size, stat_from.st_size)
    else:
        _copy_to_temp(config, oid, from_path, stat_from, temp_path, responder)

    try:
        os.replace(temp_path, dest_path)
    except OSError as e:
        _discard(temp_path)
        raise TransferFailure(ERR_UPLOAD_RENAME, f"Error moving temp file to final location: {e}")


def _already_stored(dest_path: Path, size: int) -> bool:
    # Same id and same size is taken as same content; nothing is re-hashed.
    try:
        return os.stat(dest_path).st_size == size
    except OSError:
        return False


def _link_to_temp(from_path: str, temp_path: Path) -> bool:
    try:
        os.link(from_path, temp_path)
    except OSError as e:
        logger.info(f"Hard link of {from_path!r} failed, copying instead: {e}")
        return False
    return True


def _copy_to_temp(
    config: AdapterConfig,
    oid: str,
    from_path: str,
    stat_from: os.stat_result,
    temp_path: Path,
    responder: ResponseWriter
) -> None:
    try:
        src = open(from_path, 'rb')
    except OSError as e:
        raise TransferFailure(ERR_UPLOAD_OPEN, f"Cannot read data from {from_path!r}: {e}")

    with src:
        mode = stat.S_IMODE(stat_from.st_mode)
        flags = os.O_WRONLY | os.O_CREAT | os.O_EXCL | getattr(os, 'O_BINARY', 0)
        try:
            fd = os.open(temp_path, flags, mode)
        except OSError as e:
            raise TransferFailure(
                ERR_UPLOAD_TEMP_FILE,
                f"Cannot open temp file for writing {str(temp_path)!r}: {e}"
            )

        dst = os.fdopen(fd, 'wb')
        try:
            try:
                # os.open applies the umask; the stored copy keeps the source's bits
                os.chmod(temp_path, mode)
            except OSError as e:
                raise TransferFailure(
                    ERR_UPLOAD_TEMP_FILE,
                    f"Cannot set mode on temp file {str(temp_path)!r}: {e}"
                )

            try:
                copy_file_contents(
                    stat_from.st_size,
                    src,
                    dst,
                    _progress_reporter(oid, responder),
                    config.block_size
                )
                dst.close()
            except OSError as e:
                raise TransferFailure(ERR_UPLOAD_COPY, f"Error writing temp file {str(temp_path)!r}: {e}")
        except TransferFailure:
            _close_quietly(dst)
            _discard(temp_path)
            raise
