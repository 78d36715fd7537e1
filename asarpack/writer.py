from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
import tempfile
from dataclasses import dataclass, field
from typing import BinaryIO, Callable, Dict, List, Optional

from .constants import BUFFER_SIZE, DEFAULT_PATTERN, MAX_FILE_SIZE, UNPACKED_SUFFIX
from .crawlfs import crawl_filesystem, determine_file_type
from .errors import FileTooLarge
from .filesystem import Filesystem
from .header import build_header
from .integrity import get_file_integrity
from .node import DirectoryNode, FileNode
from .pathutil import get_dir, relative
from .pattern import is_unpacked_dir, minimatch


logger = logging.getLogger(__name__)


class Transform:
    """Streaming content rewrite applied to a packed file.

    ``transform`` receives each chunk of the source file and ``flush`` is
    called once at end of file; whatever they return is what gets packed.
    Integrity is always computed over the untransformed source.
    """

    def transform(self, data: bytes) -> bytes:
        raise NotImplementedError

    def flush(self) -> bytes:
        return b""


TransformSelector = Callable[[str], Optional[Transform]]


@dataclass
class CreateOptions:
    pattern: str = DEFAULT_PATTERN
    # Include hidden entries; None behaves like True
    dot: Optional[bool] = None
    # Text file listing paths in the order they should be packed
    ordering: Optional[str] = None
    # Files whose basename matches this glob are kept out of the payload
    unpack: Optional[str] = None
    # Directories matching this glob, or starting with it literally, are kept out of the payload
    unpack_dir: Optional[str] = None
    transform: Optional[TransformSelector] = None


@dataclass
class FileItem:
    filename: str
    unpack: bool
    transformed_file: Optional[BinaryIO] = field(default=None, repr=False)

    def close(self) -> None:
        if self.transformed_file is not None:
            self.transformed_file.close()
            self.transformed_file = None


def create_package(src: str, dest: str) -> None:
    create_package_with_options(src, dest, CreateOptions())


def create_package_with_options(src: str, dest: str, options: CreateOptions) -> None:
    dot = True if options.dot is None else options.dot
    filenames, metadata = crawl_filesystem(src, options.pattern, dot=dot)
    create_package_from_files(src, dest, filenames, metadata, options)


def _read_ordering(ordering: str, src: str) -> List[str]:
    paths: List[str] = []
    with open(ordering, "r", encoding="utf-8") as fh:
        for line in fh.read().splitlines():
            entry = line.rsplit(":", 1)[-1].strip()
            if entry.startswith("/"):
                entry = entry[1:]
            # Every ancestor is listed too so directories keep their place
            current = src
            for component in entry.replace("\\", "/").split("/"):
                current = os.path.join(current, component)
                paths.append(current)
    return paths


def _apply_ordering(ordering: str, src: str, filenames: List[str]) -> List[str]:
    candidates = set(filenames)
    seen = set()
    ordered: List[str] = []
    for path in _read_ordering(ordering, src):
        if path in candidates and path not in seen:
            seen.add(path)
            ordered.append(path)
    missing = 0
    for path in filenames:
        if path not in seen:
            seen.add(path)
            ordered.append(path)
            missing += 1
    total = len(filenames)
    if total:
        logger.info("Ordering file has %d%% coverage.", (total - missing) * 100 // total)
    return ordered


def _transform_file(filename: str, transformer: Transform) -> BinaryIO:
    tmp = tempfile.TemporaryFile()
    try:
        with open(filename, "rb") as original:
            while True:
                chunk = original.read(BUFFER_SIZE)
                if not chunk:
                    break
                tmp.write(transformer.transform(chunk))
        tmp.write(transformer.flush())
        tmp.flush()
    except BaseException:
        tmp.close()
        raise
    return tmp


def create_package_from_files(
    src: str,
    dest: str,
    filenames: List[str],
    metadata: Dict[str, os.stat_result],
    options: Optional[CreateOptions] = None,
) -> None:
    """Build the header tree for ``filenames`` and write the archive.

    ``metadata`` holds the lstat results captured while listing; entries
    missing from it are looked up once. Nothing is written to ``dest``
    until every file has been classified, sized and hashed.
    """
    options = options or CreateOptions()
    src = os.path.abspath(src)
    dest = os.path.abspath(dest)
    filesystem = Filesystem(src)

    if options.ordering:
        filenames_sorted = _apply_ordering(options.ordering, src, filenames)
    else:
        filenames_sorted = list(filenames)

    unpack_dirs: List[str] = []
    files: List[FileItem] = []
    try:
        for filename in filenames_sorted:
            st = metadata.get(filename)
            if st is None:
                st = determine_file_type(filename)
                metadata[filename] = st

            if stat.S_ISDIR(st.st_mode):
                should_unpack = False
                if options.unpack_dir:
                    should_unpack = is_unpacked_dir(relative(src, filename), options.unpack_dir, unpack_dirs)
                filesystem.insert(filename, DirectoryNode(unpacked=True if should_unpack else None))

            elif stat.S_ISREG(st.st_mode):
                should_unpack = False
                if options.unpack:
                    should_unpack = minimatch(filename, options.unpack, match_base=True)
                if not should_unpack and options.unpack_dir:
                    dirname = relative(src, get_dir(filename))
                    should_unpack = is_unpacked_dir(dirname, options.unpack_dir, unpack_dirs)

                item = FileItem(filename=filename, unpack=should_unpack)
                dir_node = filesystem.search_dir_node_from_path(get_dir(filename))
                basename = os.path.basename(filename)

                if should_unpack or dir_node.is_unpacked():
                    item.unpack = True
                    dir_node.files[basename] = FileNode(
                        size=st.st_size,
                        unpacked=True,
                        integrity=get_file_integrity(filename),
                    )
                    files.append(item)
                    logger.debug("unpack %s", filename)
                    continue

                size = st.st_size
                transformer = options.transform(filename) if options.transform else None
                if transformer is not None:
                    item.transformed_file = _transform_file(filename, transformer)
                    files.append(item)
                    size = os.fstat(item.transformed_file.fileno()).st_size
                else:
                    files.append(item)

                if size > MAX_FILE_SIZE:
                    raise FileTooLarge(filename)

                node = FileNode(
                    size=size,
                    offset=str(filesystem.offset),
                    integrity=get_file_integrity(filename),
                )
                if sys.platform != "win32" and st.st_mode & stat.S_IXUSR:
                    node.executable = True
                filesystem.offset += size
                filesystem.insert(filename, node)
                logger.debug("pack %s (%d bytes at %s)", filename, size, node.offset)

            elif stat.S_ISLNK(st.st_mode):
                filesystem.insert_link(filename)

        os.makedirs(get_dir(dest), exist_ok=True)
        write_filesystem(dest, filesystem, files)
    finally:
        for item in files:
            item.close()


def write_filesystem(dest: str, filesystem: Filesystem, files: List[FileItem]) -> None:
    """Write header and payload to ``dest``; copy unpacked files beside it."""
    size_buf, header_buf = build_header(filesystem.header)
    unpacked_root = dest + UNPACKED_SUFFIX

    with open(dest, "wb") as out:
        out.write(size_buf)
        out.write(header_buf)
        for item in files:
            if item.unpack:
                target = os.path.join(unpacked_root, relative(filesystem.src, item.filename))
                os.makedirs(get_dir(target), exist_ok=True)
                shutil.copy(item.filename, target)
            elif item.transformed_file is not None:
                item.transformed_file.seek(0)
                shutil.copyfileobj(item.transformed_file, out, BUFFER_SIZE)
                item.close()
            else:
                with open(item.filename, "rb") as fh:
                    shutil.copyfileobj(fh, out, BUFFER_SIZE)
    logger.debug("wrote %s (header %d bytes, payload %d bytes)", dest, len(header_buf), filesystem.offset)
