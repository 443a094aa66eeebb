from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Optional, Union


# PNG 시그니처: 89 50 4E 47 0D 0A 1A 0A
PNG_SIGNATURE = bytes([137, 80, 78, 71, 13, 10, 26, 10])

# BMP 파일 헤더: "BM" + 파일 크기(4) + 예약 필드(4, 항상 0) + 데이터 오프셋(4)
BMP_MAGIC = b"BM"
BMP_RESERVED = bytes(4)
BMP_FILE_HEADER_SIZE = 14

# BITMAPINFOHEADER 기준 DIB 헤더 내 너비/높이 위치
BMP_WIDTH_OFFSET = BMP_FILE_HEADER_SIZE + 4
BMP_HEIGHT_OFFSET = BMP_FILE_HEADER_SIZE + 8

# 14바이트 파일 헤더 + 40바이트 DIB 헤더
MIN_HEADER_SIZE = 54
LOOKAHEAD_SIZE = 1024
SCRATCH_SIZE = 1024

IHDR = "IHDR"
# 길이(4) + 타입(4) + CRC(4)
CHUNK_OVERHEAD = 12


@dataclass(frozen=True)
class Png:
    format_name: ClassVar[str] = "png"


@dataclass(frozen=True)
class Bmp:
    width: int
    height: int

    format_name: ClassVar[str] = "bmp"


@dataclass(frozen=True)
class Invalid:
    format_name: ClassVar[str] = "invalid"


FormatVerdict = Union[Png, Bmp, Invalid]


@dataclass(frozen=True)
class ChunkRecord:
    """스트림에서 읽은 PNG 청크 하나"""
    index: int
    chunk_type: str
    length: int
    offset: int
    width: Optional[int] = None
    height: Optional[int] = None

    @property
    def size(self) -> int:
        """길이/타입/CRC 필드를 포함한 디스크상의 전체 크기"""
        return self.length + CHUNK_OVERHEAD

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "type": self.chunk_type,
            "offset": self.offset,
            "length": self.length,
            "size": self.size,
        }


class ImageMetaError(Exception):
    """이미지 식별 중 발생한 오류. 현재 파일의 처리를 종료합니다."""
    pass


class ImageFileNotFound(ImageMetaError):
    def __init__(self, path: str):
        super().__init__(f"File not found: {path}")
        self.path = path


class TruncatedInput(ImageMetaError):
    def __init__(self, available: int):
        super().__init__(
            f"Error reading file! Only {available} bytes were read, "
            f"at least {MIN_HEADER_SIZE + 1} are required."
        )
        self.available = available


class InvalidFormat(ImageMetaError):
    def __init__(self, path: str):
        super().__init__(f"{path} is not a valid .bmp or .png file!")
        self.path = path


class TruncatedChunk(ImageMetaError):
    def __init__(self, index: int, part: str, expected: int, actual: int):
        super().__init__(
            f"Chunk {index} is truncated: expected {expected} bytes of {part}, got {actual}"
        )
        self.index = index
        self.part = part
        self.expected = expected
        self.actual = actual
