from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import List, Optional

from asarpack.errors import AsarError, ExtractionError
from asarpack.filesystem import ListOptions
from asarpack.reader import AsarFile, extract_all, list_package_with_options
from asarpack.writer import CreateOptions, create_package_with_options


def cmd_pack(
    src: str,
    output: str,
    *,
    ordering: Optional[str] = None,
    unpack: Optional[str] = None,
    unpack_dir: Optional[str] = None,
    exclude_hidden: bool = False,
) -> bool:
    """Pack the directory ``src`` into the archive ``output``.

    Args:
        src: Source directory.
        output: Archive path to write; unpacked files go to ``output + ".unpacked"``.
        ordering: Optional text file listing paths in packing order.
        unpack: Glob; files whose basename matches stay out of the payload.
        unpack_dir: Glob or literal prefix; matching directories stay out of the payload.
        exclude_hidden: Skip entries whose name starts with a dot.
    """
    options = CreateOptions(
        dot=not exclude_hidden,
        ordering=ordering,
        unpack=unpack,
        unpack_dir=unpack_dir,
    )
    create_package_with_options(src, output, options)
    return True


def cmd_list(archive: str, *, is_pack: bool = False) -> bool:
    for item in list_package_with_options(archive, ListOptions(is_pack=is_pack)):
        print(item)
    return True


def cmd_extract_file(archive: str, filename: str) -> bool:
    """Extract one entry into the working directory under its basename."""
    with AsarFile(archive) as asar:
        asar.extract_file(filename, os.path.basename(filename.replace("\\", "/")))
    return True


def cmd_extract(archive: str, dest: str) -> bool:
    try:
        extract_all(archive, dest)
    except ExtractionError as exc:
        for err in exc.errors:
            print(f"Warning: {err}", file=sys.stderr)
        raise
    return True


def main(argv: List[str] | None = None):
    ap = argparse.ArgumentParser(
        prog="asarpack",
        description="Pack directories into single-file archives and read them back",
    )
    ap.add_argument("-v", "--verbose", action="count", default=0, help="-v for progress, -vv for per-file detail")
    sub = ap.add_subparsers(dest="cmd", required=True)

    ap_pack = sub.add_parser("pack", aliases=["p"], help="create asar archive")
    ap_pack.add_argument("--ordering", help="path to a text file for ordering contents")
    ap_pack.add_argument("--unpack", help="do not pack files matching glob <expression>")
    ap_pack.add_argument(
        "--unpack-dir",
        help="do not pack dirs matching glob <expression> or starting with literal <expression>",
    )
    ap_pack.add_argument("--exclude-hidden", action="store_true", help="exclude hidden files")
    ap_pack.add_argument("dir", help="Source directory")
    ap_pack.add_argument("output", help="Output archive path")

    ap_list = sub.add_parser("list", aliases=["l"], help="list files of asar archive")
    ap_list.add_argument("-i", "--is-pack", action="store_true", help="each file in the asar is pack or unpack")
    ap_list.add_argument("archive", help="Archive path")

    ap_ef = sub.add_parser("extract-file", aliases=["ef"], help="extract one file from archive")
    ap_ef.add_argument("archive", help="Archive path")
    ap_ef.add_argument("filename", help="Path inside the archive")

    ap_extract = sub.add_parser("extract", aliases=["e"], help="extract archive")
    ap_extract.add_argument("archive", help="Archive path")
    ap_extract.add_argument("dest", help="Destination directory")

    args = ap.parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(message)s")

    try:
        if args.cmd in ("pack", "p"):
            cmd_pack(
                args.dir,
                args.output,
                ordering=args.ordering,
                unpack=args.unpack,
                unpack_dir=args.unpack_dir,
                exclude_hidden=args.exclude_hidden,
            )
        elif args.cmd in ("list", "l"):
            cmd_list(args.archive, is_pack=args.is_pack)
        elif args.cmd in ("extract-file", "ef"):
            cmd_extract_file(args.archive, args.filename)
        elif args.cmd in ("extract", "e"):
            cmd_extract(args.archive, args.dest)
        else:
            raise RuntimeError("Unknown command")
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)
    except (AsarError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
