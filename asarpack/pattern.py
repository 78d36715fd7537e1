"""Glob matching for the ``unpack`` and ``unpack_dir`` options.

Patterns use :func:`fnmatch.fnmatchcase` semantics (``*``, ``?``, ``[...]``,
``[!...]``), always case sensitive, plus one level of ``{a,b}``
alternation: the first ``{`` up to the first ``}`` after it.
"""
from __future__ import annotations

import os
from fnmatch import fnmatchcase
from typing import List, Optional, Tuple


def multiple_pattern(pattern: str) -> Optional[Tuple[int, int, List[str]]]:
    """Locate the first brace group as ``(begin, end, alternatives)``."""
    begin = pattern.find("{")
    if begin < 0:
        return None
    end = pattern.find("}", begin)
    if end < 0:
        return None
    return begin, end + 1, pattern[begin + 1 : end].split(",")


def expand_pattern(pattern: str) -> List[str]:
    patterns = [pattern]
    while True:
        expanded: List[str] = []
        changed = False
        for p in patterns:
            group = multiple_pattern(p)
            if group is None:
                expanded.append(p)
                continue
            changed = True
            begin, end, items = group
            expanded.extend(p[:begin] + item + p[end:] for item in items)
        patterns = expanded
        if not changed:
            return patterns


def minimatch(path: str, pattern: str, match_base: bool = False) -> bool:
    value = os.path.basename(path) if match_base else path
    return any(fnmatchcase(value, p) for p in expand_pattern(pattern))


def is_unpacked_dir(dir_path: str, pattern: str, unpack_dirs: List[str]) -> bool:
    """Decide whether ``dir_path`` (relative to the source root) stays unpacked.

    A directory matches when it starts with ``pattern`` literally or matches
    it as a glob; matches are recorded in ``unpack_dirs``. Any later path
    that starts with a recorded match is unpacked too, whether or not it
    matches by itself, so results depend on the order paths are seen in.
    """
    if dir_path.startswith(pattern) or minimatch(dir_path, pattern):
        if dir_path not in unpack_dirs:
            unpack_dirs.append(dir_path)
        return True
    return any(dir_path.startswith(d) for d in unpack_dirs)
