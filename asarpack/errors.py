from __future__ import annotations

from typing import List


class AsarError(Exception):
    """Base class for asarpack errors."""


# Tree shape
class StructuralMismatch(AsarError):
    pass


class ExpectFileNode(StructuralMismatch):
    def __init__(self, path: str):
        super().__init__(f'"{path}" is not a file')
        self.path = path


class ExpectDirNode(StructuralMismatch):
    def __init__(self, path: str):
        super().__init__(f'"{path}" is not a directory')
        self.path = path


class NoSuchEntry(AsarError):
    def __init__(self, path: str):
        super().__init__(f'"{path}" was not found in this archive')
        self.path = path


class UnresolvedOffset(AsarError):
    def __init__(self, path: str):
        super().__init__(f'"{path}" has no offset in the archive header')
        self.path = path


# Packing
class FileTooLarge(AsarError):
    def __init__(self, path: str):
        super().__init__(f"{path}: file size can not be larger than 4.2GB")
        self.path = path


class UnsafeLink(AsarError):
    def __init__(self, path: str, link: str):
        super().__init__(f'{path}: file "{link}" links out of the package')
        self.path = path
        self.link = link


class RelativePathError(AsarError):
    def __init__(self, src: str, dest: str):
        super().__init__(f"Cannot get relative path from {src} to {dest}")
        self.src = src
        self.dest = dest


# Container framing
class MalformedContainer(AsarError):
    pass


class InvalidHeaderSize(MalformedContainer):
    pass


class InvalidHeader(MalformedContainer):
    pass


class PickleBoundsError(MalformedContainer):
    pass


class ExtractionError(AsarError):
    """Raised by ``extract_all`` once the walk finishes with failed files."""

    def __init__(self, errors: List[Exception]):
        lines = "\n".join(f"  {e}" for e in errors)
        super().__init__(f"{len(errors)} file(s) failed to extract:\n{lines}")
        self.errors = errors
