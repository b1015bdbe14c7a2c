"""Configuration settings for one adapter session."""

import os
from dataclasses import dataclass
from typing import Optional

from common.constants import BLOCK_SIZE_BYTES, ENV_HARDLINKS, ENV_TEMP_DIR

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class AdapterConfig:
    """
    Settings passed explicitly into the transfer operations.

    Attributes:
        base_dir: Root of the object store; empty means not configured
        use_hardlinks: Try to hard-link uploads into the store before copying
        temp_dir: Where download temp files are created (None = system default)
        block_size: Bytes per copy step
    """
    base_dir: str
    use_hardlinks: bool = False
    temp_dir: Optional[str] = None
    block_size: int = BLOCK_SIZE_BYTES


def load_config(
    base_dir: str,
    use_hardlinks: Optional[bool] = None,
    temp_dir: Optional[str] = None
) -> AdapterConfig:
    """
    Build an AdapterConfig, filling unspecified values from the environment.

    Args:
        base_dir: Validated base directory from the command line
        use_hardlinks: Overrides LFS_FOLDERSTORE_HARDLINKS when not None
        temp_dir: Overrides LFS_FOLDERSTORE_TEMP_DIR when not None

    Returns:
        AdapterConfig instance
    """
    if use_hardlinks is None:
        use_hardlinks = os.environ.get(ENV_HARDLINKS, "").strip().lower() in _TRUTHY
    if temp_dir is None:
        temp_dir = os.environ.get(ENV_TEMP_DIR) or None
    return AdapterConfig(base_dir=base_dir, use_hardlinks=use_hardlinks, temp_dir=temp_dir)
