from __future__ import annotations

import os
from dataclasses import dataclass
from typing import BinaryIO, Tuple

from .constants import HEADER_SIZE_LENGTH
from .errors import InvalidHeader, InvalidHeaderSize, PickleBoundsError
from .node import Node, node_from_json, node_to_json
from .pickle import Pickle


@dataclass
class ArchiveHeader:
    json: str
    root: Node
    # Byte length of the header pickle that follows the 8-byte size pickle
    size: int


def build_header(root: Node) -> Tuple[bytes, bytes]:
    """Return ``(size_pickle, header_pickle)`` bytes for ``root``."""
    header_pickle = Pickle()
    header_pickle.write_string(node_to_json(root))
    header_buf = header_pickle.to_bytes()

    size_pickle = Pickle()
    size_pickle.write_uint32(len(header_buf))
    return size_pickle.to_bytes(), header_buf


def read_archive_header(f: BinaryIO) -> ArchiveHeader:
    f.seek(0)
    size_buf = f.read(HEADER_SIZE_LENGTH)
    if len(size_buf) != HEADER_SIZE_LENGTH:
        raise InvalidHeaderSize("Unable to read header size")
    try:
        size = Pickle.from_bytes(size_buf).create_iterator().read_uint32()
    except PickleBoundsError as exc:
        raise InvalidHeaderSize(f"Unable to read header size: {exc}") from exc

    available = f.seek(0, os.SEEK_END) - HEADER_SIZE_LENGTH
    if size > available:
        raise InvalidHeader(f"Unable to read header: declared {size} bytes, archive holds {available}")
    f.seek(HEADER_SIZE_LENGTH)
    header_buf = f.read(size)
    if len(header_buf) != size:
        raise InvalidHeader(f"Unable to read header: expected {size} bytes, got {len(header_buf)}")
    try:
        text = Pickle.from_bytes(header_buf).create_iterator().read_string()
    except PickleBoundsError as exc:
        raise InvalidHeader(f"Unable to read header: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise InvalidHeader(f"Header is not valid UTF-8: {exc}") from exc
    return ArchiveHeader(json=text, root=node_from_json(text), size=size)
