from __future__ import annotations

import hashlib

from .constants import BLOCK_SIZE, BUFFER_SIZE, INTEGRITY_ALGORITHM
from .node import Integrity


def get_file_integrity(path: str, block_size: int = BLOCK_SIZE) -> Integrity:
    """Hash ``path`` as a whole and in ``block_size`` blocks.

    Blocks are cut on content boundaries, independent of how the file is
    read. The current block's digest is always recorded at end of file, so
    an empty file has one block hash and a file whose size is an exact
    multiple of ``block_size`` ends with the hash of an empty block.
    """
    file_hash = hashlib.sha256()
    block_hash = hashlib.sha256()
    block_fill = 0
    blocks = []
    with open(path, "rb") as fh:
        while True:
            chunk = fh.read(BUFFER_SIZE)
            if not chunk:
                blocks.append(block_hash.hexdigest())
                break
            file_hash.update(chunk)
            view = memoryview(chunk)
            while view:
                take = min(block_size - block_fill, len(view))
                block_hash.update(view[:take])
                block_fill += take
                if block_fill == block_size:
                    blocks.append(block_hash.hexdigest())
                    block_hash = hashlib.sha256()
                    block_fill = 0
                view = view[take:]
    return Integrity(
        algorithm=INTEGRITY_ALGORITHM,
        hash=file_hash.hexdigest(),
        block_size=block_size,
        blocks=blocks,
    )
