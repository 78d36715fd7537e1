from __future__ import annotations

import os
from typing import List, Tuple

from .errors import RelativePathError


def split_components(p: str) -> List[str]:
    """Split an archive path on either separator."""
    return p.replace("\\", "/").split("/")


def split_path(p: str) -> Tuple[str, str]:
    """Return ``(dirname, basename)`` of an archive path.

    The dirname of a bare name is ``"."``; separators of both flavours are
    accepted. A path that ends in a separator has an empty basename.
    """
    norm = p.replace("\\", "/")
    if "/" not in norm:
        return ".", norm
    head, _, tail = norm.rpartition("/")
    return (head or "/"), tail


def get_dir(p: str) -> str:
    """Parent directory of a filesystem path, ``"."`` for bare names."""
    if p in ("", "/", "\\"):
        return "." if p == "" else p
    parent = os.path.dirname(p.rstrip("/\\") or p)
    return parent or "."


def relative(src: str, dest: str) -> str:
    """Path of ``dest`` relative to ``src`` after absolutizing both.

    Returns ``""`` when both name the same location. Raises
    :class:`RelativePathError` when no relative form exists (different
    drives on Windows).
    """
    try:
        rel = os.path.relpath(os.path.abspath(dest), os.path.abspath(src))
    except ValueError:
        raise RelativePathError(str(src), str(dest))
    return "" if rel == os.curdir else rel
