from __future__ import annotations

import os
import stat
from fnmatch import fnmatchcase
from typing import Dict, List, Tuple

from .constants import DEFAULT_PATTERN


def determine_file_type(path: str) -> os.stat_result:
    """Symlink-aware metadata; a link is reported as a link."""
    return os.lstat(path)


def _walk(root: str, dot: bool):
    with os.scandir(root) as it:
        entries = sorted(it, key=lambda e: e.name)
    for entry in entries:
        if not dot and entry.name.startswith("."):
            continue
        yield entry.path
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(entry.path, dot)


def crawl_filesystem(
    root: str,
    pattern: str = DEFAULT_PATTERN,
    dot: bool = True,
) -> Tuple[List[str], Dict[str, os.stat_result]]:
    """List everything under ``root`` whose relative path matches ``pattern``.

    Entries come in pre-order with siblings sorted by name. Hidden entries
    (and everything below them) are skipped unless ``dot`` is true. Matching
    is case sensitive. Metadata is captured once here so the packer never
    has to stat again.

    Returns ``(filenames, metadata)`` with absolute paths as keys.
    """
    root = os.path.abspath(root)
    metadata: Dict[str, os.stat_result] = {}
    results: List[str] = []
    links: List[str] = []
    for path in _walk(root, dot):
        rel = os.path.relpath(path, root).replace(os.sep, "/")
        if not fnmatchcase(rel, pattern):
            continue
        st = determine_file_type(path)
        metadata[path] = st
        results.append(path)
        if stat.S_ISLNK(st.st_mode):
            links.append(path)

    # Nothing below a listed link may be packed through it
    prefixes = tuple(link + os.sep for link in links)
    filenames = [f for f in results if not f.startswith(prefixes)]
    return filenames, metadata
