from __future__ import annotations

import logging
import os
import shutil
import sys
from typing import BinaryIO, List, Optional, Tuple

from .constants import BUFFER_SIZE, HEADER_SIZE_LENGTH, UNPACKED_SUFFIX
from .errors import (
    AsarError,
    ExpectFileNode,
    ExtractionError,
    MalformedContainer,
    UnresolvedOffset,
)
from .filesystem import Filesystem, ListOptions
from .header import read_archive_header
from .node import DirectoryNode, FileNode, LinkNode, Node
from .pathutil import get_dir, relative


logger = logging.getLogger(__name__)

# Windows cannot always re-create links, so extraction copies their targets there
FOLLOW_LINKS = sys.platform == "win32"


def symlink(target: str, link_path: str) -> None:
    """Create ``link_path`` pointing at ``target``."""
    if sys.platform == "win32":
        full_target = os.path.join(get_dir(link_path), target)
        os.symlink(target, link_path, target_is_directory=os.path.isdir(full_target))
    else:
        os.symlink(target, link_path)


class AsarFile:
    """Read-only handle on a packed archive.

    The header is parsed once on :meth:`open` and the file stays open for
    random-access reads. A handle is not safe to share between threads;
    open one per thread instead.
    """

    def __init__(self, path: str):
        self.path = path
        self.f: Optional[BinaryIO] = None
        self.filesystem = Filesystem(os.path.abspath(path))

    def __enter__(self):
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def open(self) -> "AsarFile":
        if self.f is not None:
            return self
        self.f = open(self.path, "rb")
        try:
            header = read_archive_header(self.f)
        except (AsarError, OSError):
            self.close()
            raise
        self.filesystem.header = header.root
        self.filesystem.header_size = header.size
        return self

    def close(self) -> None:
        if self.f is not None:
            self.f.close()
            self.f = None

    @property
    def header(self) -> Node:
        return self.filesystem.header

    @property
    def header_size(self) -> int:
        return self.filesystem.header_size

    def stat_file(self, p: str, follow_links: bool = True) -> Node:
        return self.filesystem.get_file(p, follow_links)

    def list(self, options: Optional[ListOptions] = None) -> List[str]:
        return self.filesystem.list_files(options)

    # reads
    def _unpacked_path(self, filename: str) -> str:
        return os.path.join(self.filesystem.src + UNPACKED_SUFFIX, filename)

    def _payload_offset(self, filename: str, node: FileNode) -> int:
        if node.offset is None:
            raise UnresolvedOffset(filename)
        try:
            offset = int(node.offset, 10)
        except ValueError:
            raise UnresolvedOffset(filename) from None
        return HEADER_SIZE_LENGTH + self.filesystem.header_size + offset

    def _require_open(self) -> BinaryIO:
        if self.f is None:
            raise RuntimeError("Archive not open")
        return self.f

    def _resolve(self, filename: str, follow_links: bool) -> Tuple[str, Node]:
        """Return the archive path that holds the data for ``filename`` and its node.

        Links are followed by their target path, so an unpacked target is
        looked up under its own name in the ``.unpacked`` directory.
        """
        info = self.filesystem.get_file(filename, follow_links=False)
        if follow_links and isinstance(info, LinkNode):
            return self._resolve(info.link, follow_links)
        return filename, info

    def read_file(self, filename: str) -> bytes:
        f = self._require_open()
        source, info = self._resolve(filename, follow_links=True)
        if not isinstance(info, FileNode):
            raise ExpectFileNode(filename)
        if info.size <= 0:
            return b""
        if info.is_unpacked():
            with open(self._unpacked_path(source), "rb") as fh:
                return fh.read()
        f.seek(self._payload_offset(source, info))
        data = f.read(info.size)
        if len(data) != info.size:
            raise MalformedContainer(
                f"{self.path}: short read for {source}: expected {info.size} bytes, got {len(data)}"
            )
        return data

    def _extract_file_node(self, filename: str, node: FileNode, dest: str) -> None:
        if node.is_unpacked():
            os.makedirs(get_dir(dest), exist_ok=True)
            shutil.copy(self._unpacked_path(filename), dest)
            return

        f = self._require_open()
        f.seek(self._payload_offset(filename, node))
        mode = 0o755 if node.executable else 0o666
        fd = os.open(dest, os.O_WRONLY | os.O_CREAT | os.O_TRUNC | getattr(os, "O_BINARY", 0), mode)
        with os.fdopen(fd, "wb") as out:
            left = node.size
            while left > 0:
                chunk = f.read(min(BUFFER_SIZE, left))
                if not chunk:
                    raise MalformedContainer(f"{self.path}: failed to read file: {filename}")
                out.write(chunk)
                left -= len(chunk)

    def extract_file(self, filename: str, dest: str) -> None:
        source, info = self._resolve(filename, FOLLOW_LINKS)
        if isinstance(info, DirectoryNode):
            raise ExpectFileNode(filename)
        if isinstance(info, LinkNode):
            # Relative to the archive root, so it can be looked up as is
            self.extract_file(info.link, dest)
            return
        self._extract_file_node(source, info, dest)

    def _extract_link(self, link: str, dest_filename: str, dest: str) -> None:
        link_src_path = get_dir(os.path.join(dest, link))
        link_dest_path = get_dir(dest_filename)
        relative_path = relative(link_dest_path, link_src_path)
        try:
            os.remove(dest_filename)
        except OSError:
            pass
        link_to = os.path.join(relative_path, os.path.basename(link) or "..")
        symlink(link_to, dest_filename)

    def extract_all(self, dest: str) -> None:
        """Extract every entry below ``dest``.

        Directories and links are created as they are met. Files that fail
        to extract are collected and reported together in an
        :class:`ExtractionError` once the walk is over; nothing already
        written is rolled back.
        """
        filenames = self.list()
        os.makedirs(dest, exist_ok=True)

        errors: List[Exception] = []
        for full_path in filenames:
            filename = full_path[1:]
            dest_filename = os.path.join(dest, filename)
            source, info = self._resolve(filename, FOLLOW_LINKS)
            if isinstance(info, DirectoryNode):
                os.makedirs(dest_filename, exist_ok=True)
            elif isinstance(info, LinkNode):
                self._extract_link(info.link, dest_filename, dest)
            else:
                try:
                    self._extract_file_node(source, info, dest_filename)
                except (AsarError, OSError) as exc:
                    logger.warning("failed to extract %s: %s", filename, exc)
                    errors.append(exc)
        if errors:
            raise ExtractionError(errors)


def get_raw_header(archive: str) -> Tuple[str, Node, int]:
    with open(archive, "rb") as f:
        header = read_archive_header(f)
    return header.json, header.root, header.size


def stat_file(archive: str, filename: str, follow_links: bool = True) -> Node:
    with AsarFile(archive) as asar:
        return asar.stat_file(filename, follow_links)


def list_package(archive: str) -> List[str]:
    return list_package_with_options(archive, ListOptions())


def list_package_with_options(archive: str, options: ListOptions) -> List[str]:
    with AsarFile(archive) as asar:
        return asar.list(options)


def extract_file(archive: str, filename: str) -> bytes:
    with AsarFile(archive) as asar:
        return asar.read_file(filename)


def extract_all(archive: str, dest: str) -> None:
    with AsarFile(archive) as asar:
        asar.extract_all(dest)
