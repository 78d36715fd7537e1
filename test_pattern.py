from __future__ import annotations

import unittest

from asarpack.pattern import expand_pattern, is_unpacked_dir, minimatch, multiple_pattern


class PatternTests(unittest.TestCase):
    def test_multiple_pattern_finds_first_group(self):
        self.assertEqual(multiple_pattern("*.{png,jpg}"), (2, 11, ["png", "jpg"]))
        self.assertIsNone(multiple_pattern("*.png"))
        self.assertIsNone(multiple_pattern("*.{png"))

    def test_expand_each_group(self):
        self.assertEqual(expand_pattern("{a,b}.{x,y}"), ["a.x", "a.y", "b.x", "b.y"])

    def test_nested_braces_are_not_supported(self):
        # The first "}" closes the group, leaving a literal "}" behind
        self.assertEqual(expand_pattern("{a,{b,c}}"), ["a}", "b", "c}"])

    def test_brace_alternation(self):
        self.assertTrue(minimatch("/src/app/icon.png", "*.{png,jpg}", match_base=True))
        self.assertTrue(minimatch("/src/app/photo.jpg", "*.{png,jpg}", match_base=True))
        self.assertFalse(minimatch("/src/app/readme.md", "*.{png,jpg}", match_base=True))

    def test_match_base_uses_final_component(self):
        self.assertTrue(minimatch("/a/b/lib.node", "*.node", match_base=True))
        self.assertFalse(minimatch("/a/b/lib.node", "b/*.node", match_base=True))
        self.assertTrue(minimatch("/a/b/lib.node", "*/b/*.node", match_base=False))

    def test_case_sensitive_and_classes(self):
        self.assertFalse(minimatch("FILE.TXT", "*.txt"))
        self.assertTrue(minimatch("file1.txt", "file[0-9].txt"))
        self.assertFalse(minimatch("filea.txt", "file[!a-z].txt"))
        self.assertTrue(minimatch("file?.txt", "file?.txt"))

    def test_unpack_dir_literal_prefix(self):
        dirs = []
        self.assertTrue(is_unpacked_dir("node_modules/foo", "node_modules", dirs))
        self.assertEqual(dirs, ["node_modules/foo"])

    def test_unpack_dir_is_sticky(self):
        dirs = []
        self.assertTrue(is_unpacked_dir("dir1", "dir1", dirs))
        # Does not match the pattern itself, but lies under a recorded match
        self.assertTrue(is_unpacked_dir("dir1/sub", "d?r1", dirs))
        self.assertFalse(is_unpacked_dir("dir2", "d?r1", dirs))
        self.assertEqual(dirs, ["dir1"])

    def test_unpack_dir_order_sensitive(self):
        # A descendant seen before its ancestor inherits nothing
        self.assertFalse(is_unpacked_dir("a/dir1/x", "*dir1", []))
        dirs = []
        self.assertTrue(is_unpacked_dir("a/dir1", "*dir1", dirs))
        self.assertTrue(is_unpacked_dir("a/dir1/x", "*dir1", dirs))

    def test_star_star_matches_root(self):
        self.assertTrue(is_unpacked_dir("", "**", []))


if __name__ == "__main__":
    unittest.main()
