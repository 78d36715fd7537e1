"""
asarpack: single-file application archives with random-access reads.

Features:

- Archive = 8-byte size pickle + pickled JSON header + concatenated payload.
- Per-file SHA-256 integrity with 4 MiB block hashes.
- Files or whole directories can be kept out of the payload ("unpacked")
  and are then copied to a sibling ``<archive>.unpacked`` directory.
- Symlinks are stored relative to the archive root and never point outside it.
- Optional per-file content transforms applied while packing.

Archives are write-once: there is no append, compression or encryption.
"""

__version__ = "0.1"

from .errors import (
    AsarError,
    ExpectDirNode,
    ExpectFileNode,
    ExtractionError,
    FileTooLarge,
    InvalidHeader,
    InvalidHeaderSize,
    MalformedContainer,
    NoSuchEntry,
    PickleBoundsError,
    RelativePathError,
    StructuralMismatch,
    UnresolvedOffset,
    UnsafeLink,
)
from .filesystem import Filesystem, ListOptions
from .node import DirectoryNode, FileNode, Integrity, LinkNode
from .reader import (
    AsarFile,
    extract_all,
    extract_file,
    get_raw_header,
    list_package,
    list_package_with_options,
    stat_file,
)
from .writer import (
    CreateOptions,
    Transform,
    create_package,
    create_package_from_files,
    create_package_with_options,
)

__all__ = [
    "AsarFile",
    "CreateOptions",
    "ListOptions",
    "Transform",
    "Filesystem",
    "FileNode",
    "DirectoryNode",
    "LinkNode",
    "Integrity",
    "create_package",
    "create_package_with_options",
    "create_package_from_files",
    "list_package",
    "list_package_with_options",
    "extract_file",
    "extract_all",
    "stat_file",
    "get_raw_header",
    "AsarError",
    "StructuralMismatch",
    "ExpectFileNode",
    "ExpectDirNode",
    "NoSuchEntry",
    "UnresolvedOffset",
    "FileTooLarge",
    "UnsafeLink",
    "RelativePathError",
    "MalformedContainer",
    "InvalidHeaderSize",
    "InvalidHeader",
    "PickleBoundsError",
    "ExtractionError",
]
