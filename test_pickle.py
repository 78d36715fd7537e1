from __future__ import annotations

import struct
import unittest

from asarpack.errors import MalformedContainer, PickleBoundsError
from asarpack.pickle import Pickle


class PickleTests(unittest.TestCase):
    def test_mixed_values_read_back_in_order(self):
        p = Pickle()
        p.write_bool(True)
        p.write_int32(-7)
        p.write_uint32(0xFFFFFFFF)
        p.write_int64(-(2**40))
        p.write_uint64(2**63 + 5)
        p.write_float(1.5)
        p.write_double(-2.25)
        p.write_string("abc")
        p.write_bool(False)

        it = Pickle.from_bytes(p.to_bytes()).create_iterator()
        self.assertIs(it.read_bool(), True)
        self.assertEqual(it.read_int32(), -7)
        self.assertEqual(it.read_uint32(), 0xFFFFFFFF)
        self.assertEqual(it.read_int64(), -(2**40))
        self.assertEqual(it.read_uint64(), 2**63 + 5)
        self.assertEqual(it.read_float(), 1.5)
        self.assertEqual(it.read_double(), -2.25)
        self.assertEqual(it.read_string(), "abc")
        self.assertIs(it.read_bool(), False)

    def test_supports_multi_byte_characters(self):
        p = Pickle()
        p.write_string("女の子.txt")
        it = Pickle.from_bytes(p.to_bytes()).create_iterator()
        self.assertEqual(it.read_string(), "女の子.txt")

    def test_uint32_layout(self):
        p = Pickle()
        p.write_uint32(5)
        self.assertEqual(p.to_bytes(), b"\x04\x00\x00\x00\x05\x00\x00\x00")

    def test_string_is_padded_to_four_bytes(self):
        p = Pickle()
        p.write_string("hello")
        raw = p.to_bytes()
        # size field, length field, 5 bytes + 3 zero pad
        self.assertEqual(len(raw), 4 + 4 + 8)
        self.assertEqual(struct.unpack_from("<I", raw, 0)[0], 12)
        self.assertEqual(struct.unpack_from("<i", raw, 4)[0], 5)
        self.assertEqual(raw[8:], b"hello\x00\x00\x00")

    def test_grows_past_initial_capacity(self):
        p = Pickle()
        text = "x" * 1000
        p.write_string(text)
        p.write_uint32(42)
        it = Pickle.from_bytes(p.to_bytes()).create_iterator()
        self.assertEqual(it.read_string(), text)
        self.assertEqual(it.read_uint32(), 42)
        self.assertEqual(p.capacity_after_header % 64, 0)

    def test_over_read_raises(self):
        p = Pickle()
        p.write_uint32(1)
        it = Pickle.from_bytes(p.to_bytes()).create_iterator()
        it.read_uint32()
        with self.assertRaises(PickleBoundsError):
            it.read_uint32()

    def test_string_longer_than_payload_raises(self):
        p = Pickle()
        p.write_int32(100)
        it = Pickle.from_bytes(p.to_bytes()).create_iterator()
        with self.assertRaises(PickleBoundsError):
            it.read_string()

    def test_inconsistent_size_field_yields_empty_pickle(self):
        # Declares 64 payload bytes but only carries 4
        raw = struct.pack("<I", 64) + b"\x01\x00\x00\x00"
        it = Pickle.from_bytes(raw).create_iterator()
        with self.assertRaises(MalformedContainer):
            it.read_uint32()


if __name__ == "__main__":
    unittest.main()
