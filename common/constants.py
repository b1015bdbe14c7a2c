"""Project-wide constants (block size, temp naming, protocol error codes)."""

PROGRAM_NAME: str = "lfs-folderstore"
VERSION: str = "1.0.0"

BLOCK_SIZE_BYTES: int = 64 * 1024  # 64 KiB per copy step / progress message

DOWNLOAD_TEMP_PREFIX: str = "lfsfolderstore"
UPLOAD_TEMP_SUFFIX: str = ".tmp"

MIN_OID_LENGTH: int = 4

ENV_LOG_LEVEL: str = "LOG_LEVEL"
ENV_HARDLINKS: str = "LFS_FOLDERSTORE_HARDLINKS"
ENV_TEMP_DIR: str = "LFS_FOLDERSTORE_TEMP_DIR"

# Error codes reported inside completion messages. Stable within a release.
ERR_BASEDIR_NOT_SPECIFIED: int = 9

ERR_DOWNLOAD_STAT: int = 3
ERR_DOWNLOAD_NOT_REGULAR: int = 4
ERR_DOWNLOAD_TEMP_FILE: int = 5
ERR_DOWNLOAD_OPEN: int = 6
ERR_DOWNLOAD_COPY: int = 7

ERR_UPLOAD_STAT: int = 13
ERR_UPLOAD_PREPARE_DIR: int = 14
ERR_UPLOAD_OPEN: int = 15
ERR_UPLOAD_TEMP_FILE: int = 16
ERR_UPLOAD_COPY: int = 17
ERR_UPLOAD_RENAME: int = 18
