"""Block-wise copy of a known number of bytes with per-block progress callbacks."""

from typing import BinaryIO, Callable, Optional

from common.constants import BLOCK_SIZE_BYTES
from common.exceptions import ShortReadError

# (total_size, copied_so_far, copied_this_block)
ProgressCallback = Callable[[int, int, int], None]


def _read_block(src: BinaryIO, want: int) -> bytes:
    """Read up to `want` bytes, looping over short reads until end of stream."""
    parts = []
    got = 0
    while got < want:
        piece = src.read(want - got)
        if not piece:
            break
        parts.append(piece)
        got += len(piece)
    return b"".join(parts)


def copy_file_contents(
    size: int,
    src: BinaryIO,
    dst: BinaryIO,
    callback: Optional[ProgressCallback] = None,
    block_size: int = BLOCK_SIZE_BYTES
) -> int:
    """
    Copy exactly `size` bytes from src to dst in fixed-size blocks.

    Never asks for more than the remaining byte count, so the final block is
    short when `size` is not a multiple of `block_size`. If the source ends
    during the final block the copy stops there and counts as finished; if
    it ends during any earlier block, ShortReadError is raised. Any other
    I/O error propagates as-is and partial output is left for the caller to
    clean up.

    Args:
        size: Number of bytes to copy
        src: Readable binary stream, positioned at the first byte to copy
        dst: Writable binary stream
        callback: Called after each block with (size, copied_so_far, copied_this_block)
        block_size: Bytes per block

    Returns:
        Number of bytes actually copied

    Raises:
        ShortReadError: If the source ends before a non-final block is filled
        OSError: On any read or write failure
    """
    bytes_left = size
    while bytes_left > 0:
        final_block = bytes_left <= block_size
        want = min(block_size, bytes_left)
        data = _read_block(src, want)
        if data:
            dst.write(data)
            bytes_left -= len(data)
            if callback is not None:
                callback(size, size - bytes_left, len(data))

        if len(data) < want:
            if final_block:
                break
            raise ShortReadError(
                f"Source ended after {size - bytes_left} of {size} bytes"
            )
    return size - bytes_left
