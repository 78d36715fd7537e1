"""Header tree nodes and their JSON form.

The JSON form is untagged: a file has ``size``, a directory has ``files``
and a link has ``link``. Optional fields are left out when unset.
"""
from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from .constants import INTEGRITY_ALGORITHM
from .errors import InvalidHeader


@dataclass
class Integrity:
    algorithm: str
    hash: str
    block_size: int
    blocks: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "hash": self.hash,
            "blockSize": self.block_size,
            "blocks": list(self.blocks),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Integrity":
        return cls(
            algorithm=d["algorithm"],
            hash=d["hash"],
            block_size=d["blockSize"],
            blocks=list(d["blocks"]),
        )


@dataclass
class FileNode:
    size: int = 0
    offset: Optional[str] = None
    unpacked: Optional[bool] = None
    executable: Optional[bool] = None
    integrity: Optional[Integrity] = None

    def is_unpacked(self) -> bool:
        return bool(self.unpacked)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"size": self.size}
        if self.offset is not None:
            d["offset"] = self.offset
        if self.unpacked is not None:
            d["unpacked"] = self.unpacked
        if self.executable is not None:
            d["executable"] = self.executable
        if self.integrity is not None:
            d["integrity"] = self.integrity.to_dict()
        return d


@dataclass
class DirectoryNode:
    unpacked: Optional[bool] = None
    files: Dict[str, "Node"] = field(default_factory=dict)

    def is_unpacked(self) -> bool:
        return bool(self.unpacked)

    def children(self):
        """Child entries in key order."""
        for name in sorted(self.files):
            yield name, self.files[name]

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {}
        if self.unpacked is not None:
            d["unpacked"] = self.unpacked
        d["files"] = {name: child.to_dict() for name, child in self.children()}
        return d


@dataclass
class LinkNode:
    link: str = ""

    def is_unpacked(self) -> bool:
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {"link": self.link}


Node = Union[FileNode, DirectoryNode, LinkNode]


def _optional(d: Dict[str, Any], key: str, kind: type) -> Any:
    value = d.get(key)
    if value is not None and not isinstance(value, kind):
        raise InvalidHeader(f"Header field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


def _integrity_from_dict(d: Any) -> Integrity:
    if not isinstance(d, dict):
        raise InvalidHeader("Header field 'integrity' must be an object")
    integrity = Integrity.from_dict(d)
    if integrity.algorithm != INTEGRITY_ALGORITHM:
        raise InvalidHeader(f"Unsupported integrity algorithm {integrity.algorithm!r}")
    if not isinstance(integrity.hash, str) or not all(isinstance(b, str) for b in integrity.blocks):
        raise InvalidHeader("Integrity hashes must be strings")
    if isinstance(integrity.block_size, bool) or not isinstance(integrity.block_size, int):
        raise InvalidHeader("Integrity blockSize must be an integer")
    return integrity


def node_from_dict(d: Any) -> Node:
    if not isinstance(d, dict):
        raise InvalidHeader(f"Expected an object for a header node, got {type(d).__name__}")
    try:
        if "size" in d:
            size = d["size"]
            if isinstance(size, bool) or not isinstance(size, int) or size < 0:
                raise InvalidHeader(f"Header field 'size' must be a non-negative integer, got {size!r}")
            integrity = d.get("integrity")
            return FileNode(
                size=size,
                offset=_optional(d, "offset", str),
                unpacked=_optional(d, "unpacked", bool),
                executable=_optional(d, "executable", bool),
                integrity=_integrity_from_dict(integrity) if integrity is not None else None,
            )
        if "files" in d:
            files = d["files"]
            if not isinstance(files, dict):
                raise InvalidHeader("Directory 'files' must be an object")
            return DirectoryNode(
                unpacked=_optional(d, "unpacked", bool),
                files={name: node_from_dict(child) for name, child in files.items()},
            )
        if "link" in d:
            link = d["link"]
            if not isinstance(link, str):
                raise InvalidHeader(f"Header field 'link' must be str, got {type(link).__name__}")
            return LinkNode(link=link)
    except (KeyError, TypeError, ValueError) as exc:
        raise InvalidHeader(f"Malformed header node: {exc}") from exc
    raise InvalidHeader(f"Unrecognized header node with keys {sorted(d)}")


def node_to_json(node: Node) -> str:
    return json.dumps(node.to_dict(), ensure_ascii=False, separators=(",", ":"))


def node_from_json(text: str) -> Node:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise InvalidHeader(f"Header is not valid JSON: {exc}") from exc
    return node_from_dict(data)
