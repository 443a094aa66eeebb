import base64
from binascii import unhexlify
import io
import unittest
import sys
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))
sys.path.insert(0, str(Path(__file__).resolve().parent))

from imagemeta.chunks import walk_chunks
from imagemeta.formats import TruncatedChunk
from samples import build_png, chunk, ihdr

CRC_MISSING_PNG = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAIAAACQd1PeAAAAD0lEQVR4nGNgYAAAAAMAAWgmWQ0AAAAASUVORK5CYII="
)


def after_signature(data: bytes) -> io.BytesIO:
    stream = io.BytesIO(data)
    stream.seek(8)
    return stream


class RecordingStream(io.BytesIO):
    def __init__(self, data):
        super().__init__(data)
        self.requests = []

    def readinto(self, b):
        self.requests.append(len(b))
        return super().readinto(b)


class TestWalkChunks(unittest.TestCase):
    def test_ihdr_iend(self):
        data = build_png(ihdr(100, 50), chunk(b"IEND", b""))
        records = list(walk_chunks(after_signature(data)))

        self.assertEqual([r.chunk_type for r in records], ["IHDR", "IEND"])
        self.assertEqual([r.index for r in records], [1, 2])
        self.assertEqual((records[0].width, records[0].height), (100, 50))
        self.assertIsNone(records[1].width)

    def test_sizes_are_reported_uniformly(self):
        data = build_png(ihdr(100, 50), chunk(b"tEXt", b"a=b"), chunk(b"IEND", b""))
        records = list(walk_chunks(after_signature(data)))

        self.assertEqual([r.length for r in records], [13, 3, 0])
        self.assertEqual([r.size for r in records], [25, 15, 12])
        self.assertEqual([r.offset for r in records], [8, 33, 48])

    def test_one_pixel_png(self):
        data = build_png(
            ihdr(1, 1),
            chunk(b"IDAT", unhexlify(b"789c6300010000050001")),
            chunk(b"IEND", b""),
        )
        records = list(walk_chunks(after_signature(data)))

        self.assertEqual([(r.chunk_type, r.length) for r in records],
                         [("IHDR", 13), ("IDAT", 10), ("IEND", 0)])
        self.assertEqual((records[0].width, records[0].height), (1, 1))

    def test_idat_without_crc(self):
        """IDAT 뒤에 CRC가 빠진 파일은 IEND 태그를 길이로 읽게 되어 잘림으로 보고됩니다."""
        data = base64.b64decode(CRC_MISSING_PNG)
        records = []
        with self.assertRaises(TruncatedChunk) as ctx:
            for record in walk_chunks(after_signature(data)):
                records.append(record)

        self.assertEqual([(r.chunk_type, r.length) for r in records], [("IHDR", 13), ("IDAT", 15)])
        self.assertEqual((records[0].width, records[0].height), (1, 1))
        self.assertEqual((ctx.exception.index, ctx.exception.part), (3, "data"))
        self.assertEqual(ctx.exception.expected, 0x49454E44)
        self.assertEqual(ctx.exception.actual, 0)

    def test_many_chunks_in_order(self):
        types = [b"IDAT", b"tEXt", b"zTXt", b"IDAT", b"IEND"]
        sizes = [10, 0, 2048, 1, 0]
        data = build_png(ihdr(7, 9), *[chunk(t, b"\x01" * n) for t, n in zip(types, sizes)])
        records = list(walk_chunks(after_signature(data)))

        self.assertEqual(len(records), 6)
        self.assertEqual([r.chunk_type.encode() for r in records[1:]], types)
        self.assertEqual([r.length for r in records[1:]], sizes)

    def test_large_chunk_uses_bounded_reads(self):
        data = build_png(ihdr(1, 1), chunk(b"IDAT", b"\x00" * 5000), chunk(b"IEND", b""))
        stream = RecordingStream(data)
        stream.seek(8)
        records = list(walk_chunks(stream))

        self.assertEqual(records[1].length, 5000)
        self.assertEqual(records[2].chunk_type, "IEND")
        self.assertLessEqual(max(stream.requests), 1024)

    def test_scratch_buffer_is_reused(self):
        scratch = bytearray(16)
        data = build_png(ihdr(1, 1), chunk(b"IDAT", b"\x05" * 100))
        records = list(walk_chunks(after_signature(data), scratch))
        self.assertEqual(records[1].length, 100)
        self.assertEqual(len(scratch), 16)

    def test_empty_after_signature(self):
        self.assertEqual(list(walk_chunks(after_signature(build_png()))), [])

    def test_first_chunk_not_ihdr(self):
        data = build_png(chunk(b"tEXt", b"Comment=x"), chunk(b"IEND", b""))
        with patch("imagemeta.chunks.error") as mock_error:
            records = list(walk_chunks(after_signature(data)))

        mock_error.assert_called_once()
        self.assertEqual([r.chunk_type for r in records], ["tEXt", "IEND"])
        self.assertIsNone(records[0].width)
        self.assertIsNone(records[0].height)

    def test_short_ihdr(self):
        data = build_png(chunk(b"IHDR", b"\x00\x00\x00\x01"), chunk(b"IEND", b""))
        with patch("imagemeta.chunks.error"):
            records = list(walk_chunks(after_signature(data)))

        self.assertEqual(records[0].length, 4)
        self.assertIsNone(records[0].width)
        self.assertEqual(records[1].chunk_type, "IEND")

    def test_non_ascii_type_does_not_crash(self):
        data = build_png(ihdr(1, 1), chunk(b"\xffAB\x00", b""))
        records = list(walk_chunks(after_signature(data)))
        self.assertEqual(len(records[1].chunk_type), 4)


class TestTruncatedChunks(unittest.TestCase):
    def setUp(self):
        self.data = build_png(ihdr(100, 50), chunk(b"IDAT", b"\x00" * 3000), chunk(b"IEND", b""))

    def walk(self, data):
        records = []
        with self.assertRaises(TruncatedChunk) as ctx:
            for record in walk_chunks(after_signature(data)):
                records.append(record)
        return records, ctx.exception

    def test_truncated_payload(self):
        records, exc = self.walk(self.data[:33 + 8 + 2000])
        self.assertEqual([r.chunk_type for r in records], ["IHDR"])
        self.assertEqual(exc.index, 2)
        self.assertEqual(exc.part, "data")
        self.assertEqual(exc.expected, 3000)
        self.assertEqual(exc.actual, 2000)

    def test_truncated_length_field(self):
        records, exc = self.walk(self.data[:-10])
        self.assertEqual(len(records), 2)
        self.assertEqual((exc.index, exc.part, exc.actual), (3, "length", 2))

    def test_missing_crc(self):
        records, exc = self.walk(self.data[:-2])
        self.assertEqual((exc.index, exc.part, exc.expected, exc.actual), (3, "crc", 4, 2))

    def test_truncated_ihdr_dimensions(self):
        records, exc = self.walk(self.data[:8 + 8 + 5])
        self.assertEqual(records, [])
        self.assertEqual((exc.index, exc.part), (1, "data"))


if __name__ == "__main__":
    unittest.main()
