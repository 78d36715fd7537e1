from __future__ import annotations

import os
import subprocess
import sys
import tempfile
import unittest
from pathlib import Path
from typing import Dict

from asarpack.reader import list_package


def _build_fixture_tree(root: Path) -> Dict[str, bytes]:
    files: Dict[str, bytes] = {
        "docs/readme.txt": b"hello world\n" * 20,
        "docs/notes/binary.bin": os.urandom(2048),
        "docs/notes/empty.txt": b"",
        "native/addon.node": b"\x7fELF-ish",
        ".hidden": b"secret",
    }
    for rel, data in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
    return files


def _compare_trees(src: Path, dst: Path, skip=()):
    for root_src, dirs_src, files_src in os.walk(src):
        rel = os.path.relpath(root_src, src)
        root_dst = os.path.join(dst, rel) if rel != "." else str(dst)
        assert os.path.isdir(root_dst), f"Missing directory: {root_dst}"
        for fname in files_src:
            if fname in skip:
                continue
            with open(os.path.join(root_src, fname), "rb") as sf, open(os.path.join(root_dst, fname), "rb") as df:
                assert sf.read() == df.read(), f"File contents differ: {root_dst}/{fname}"


class CLIIntegrationTests(unittest.TestCase):
    def run_cli(self, args, *, expect: int | None = 0, cwd: Path | None = None):
        cmd = [sys.executable, "-m", "asarpack.cli"] + list(args)
        env = os.environ.copy()
        repo_root = Path(__file__).resolve().parent
        existing = env.get("PYTHONPATH", "")
        env["PYTHONPATH"] = str(repo_root) if not existing else f"{repo_root}{os.pathsep}{existing}"
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            env=env,
        )
        if expect is not None and proc.returncode != expect:
            raise AssertionError(
                f"CLI exited {proc.returncode}, expected {expect}\nCommand: {' '.join(cmd)}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}"
            )
        return proc

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.workspace = Path(os.path.realpath(tmp.name))
        self.src = self.workspace / "src"
        self.src.mkdir()
        self.files = _build_fixture_tree(self.src)
        self.archive = self.workspace / "app.asar"

    def test_pack_list_extract_roundtrip(self):
        self.run_cli(["pack", str(self.src), str(self.archive)])
        listing = self.run_cli(["list", str(self.archive)]).stdout.splitlines()
        self.assertIn("/docs/readme.txt", listing)
        self.assertIn("/.hidden", listing)

        out = self.workspace / "extract"
        self.run_cli(["extract", str(self.archive), str(out)])
        _compare_trees(self.src, out)

    def test_unpack_options_and_is_pack_listing(self):
        self.run_cli([
            "p",
            "--unpack", "*.node",
            "--unpack-dir", "docs/notes",
            "--exclude-hidden",
            str(self.src),
            str(self.archive),
        ])
        listing = self.run_cli(["l", "-i", str(self.archive)]).stdout.splitlines()
        self.assertIn("unpack : /native/addon.node", listing)
        self.assertIn("unpack : /docs/notes/binary.bin", listing)
        self.assertIn("pack   : /docs/readme.txt", listing)
        self.assertNotIn("pack   : /.hidden", listing)
        self.assertTrue((Path(str(self.archive) + ".unpacked") / "native" / "addon.node").exists())

        out = self.workspace / "extract"
        self.run_cli(["e", str(self.archive), str(out)])
        _compare_trees(self.src, out, skip=(".hidden",))

    def test_extract_file_writes_basename_in_cwd(self):
        self.run_cli(["pack", str(self.src), str(self.archive)])
        cwd = self.workspace / "cwd"
        cwd.mkdir()
        self.run_cli(["ef", str(self.archive), "docs/readme.txt"], cwd=cwd)
        self.assertEqual((cwd / "readme.txt").read_bytes(), self.files["docs/readme.txt"])

    def test_ordering_coverage_is_reported(self):
        ordering = self.workspace / "order.txt"
        ordering.write_text("docs/readme.txt\n", encoding="utf-8")
        proc = self.run_cli(["-v", "pack", "--ordering", str(ordering), str(self.src), str(self.archive)])
        self.assertIn("coverage", proc.stderr)
        self.assertIn("/docs/readme.txt", list_package(str(self.archive)))

    def test_errors_exit_with_code_2(self):
        proc = self.run_cli(["list", str(self.workspace / "missing.asar")], expect=2)
        self.assertIn("Error:", proc.stderr)
        self.archive.write_bytes(b"\x01")
        proc = self.run_cli(["list", str(self.archive)], expect=2)
        self.assertIn("Error:", proc.stderr)


if __name__ == "__main__":
    unittest.main()
