from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List

from .constants import PACK_STATE_PACKED, PACK_STATE_UNPACKED
from .errors import ExpectDirNode, NoSuchEntry, UnsafeLink
from .node import DirectoryNode, LinkNode, Node
from .pathutil import relative, split_components, split_path


logger = logging.getLogger(__name__)


@dataclass
class ListOptions:
    # Prefix each entry with its pack state
    is_pack: bool = False


class Filesystem:
    """In-memory header tree rooted at ``src``.

    While packing, ``src`` is the source directory and paths handed to
    :meth:`insert` are filesystem paths under it. While reading, ``src`` is
    the archive path and lookups take archive-relative paths.
    """

    def __init__(self, src: str):
        self.src = src
        self.header: Node = DirectoryNode()
        self.header_size = 0
        self.offset = 0

    # tree walks
    def _search_node_from_directory(self, p: str, create: bool) -> Node:
        node = self.header
        for name in split_components(p):
            if name == ".":
                continue
            if not isinstance(node, DirectoryNode):
                raise ExpectDirNode(p)
            if name not in node.files:
                if not create:
                    raise NoSuchEntry(p)
                node.files[name] = DirectoryNode()
            node = node.files[name]
        return node

    def search_dir_node_from_path(self, p: str) -> DirectoryNode:
        """Directory node for the source directory ``p``, created if missing."""
        rel = relative(self.src, p)
        if rel == "":
            return self.header
        dirname, name = split_path(rel)
        parent = self._search_node_from_directory(dirname, create=True)
        if not isinstance(parent, DirectoryNode):
            raise ExpectDirNode(dirname)
        if name not in parent.files:
            parent.files[name] = DirectoryNode()
        node = parent.files[name]
        if not isinstance(node, DirectoryNode):
            raise ExpectDirNode(rel)
        return node

    # mutation
    def insert(self, p: str, node: Node) -> None:
        """Insert ``node`` at the source path ``p``.

        An existing entry is replaced unless both are directories.
        """
        rel = relative(self.src, p)
        dirname, name = split_path(rel)
        parent = self._search_node_from_directory(dirname, create=True)
        if not isinstance(parent, DirectoryNode):
            raise ExpectDirNode(dirname)
        if not isinstance(node, DirectoryNode) or name not in parent.files:
            parent.files[name] = node

    def insert_link(self, p: str) -> None:
        dest = os.path.realpath(p)
        link = relative(self.src, dest)
        if link.startswith(".."):
            raise UnsafeLink(p, link)
        logger.debug("link %s -> %s", p, link)
        self.insert(p, LinkNode(link=link))

    # lookup
    def get_node(self, p: str) -> Node:
        if len(p) > 1 and p[-1] in "/\\":
            p = p[:-1]
        dirname, name = split_path(p)
        parent = self._search_node_from_directory(dirname, create=False)
        if not isinstance(parent, DirectoryNode):
            raise ExpectDirNode(p)
        try:
            return parent.files[name or ".."]
        except KeyError:
            raise NoSuchEntry(p) from None

    def get_file(self, p: str, follow_links: bool = True) -> Node:
        # No cycle detection: a self-referencing link recurses until Python gives up.
        info = self.get_node(p)
        if follow_links and isinstance(info, LinkNode):
            return self.get_file(info.link)
        return info

    def list_files(self, options: ListOptions = None) -> List[str]:
        options = options or ListOptions()
        files: List[str] = []

        def fill(base: str, node: Node) -> None:
            if not isinstance(node, DirectoryNode):
                return
            for name, child in node.children():
                full_path = base.rstrip("/") + "/" + name
                if options.is_pack:
                    state = PACK_STATE_UNPACKED if child.is_unpacked() else PACK_STATE_PACKED
                    files.append(f"{state} : {full_path}")
                else:
                    files.append(full_path)
                fill(full_path, child)

        fill("/", self.header)
        return files


