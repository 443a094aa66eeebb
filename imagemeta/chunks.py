from typing import BinaryIO, Iterator, Optional

from .binio import read_exact, skip, u32_be
from .formats import (
    CHUNK_OVERHEAD,
    IHDR,
    PNG_SIGNATURE,
    SCRATCH_SIZE,
    ChunkRecord,
    TruncatedChunk,
)
from .logger import error, trace


def _read_part(stream: BinaryIO, count: int, index: int, part: str) -> bytes:
    data = read_exact(stream, count)
    if len(data) < count:
        raise TruncatedChunk(index, part, count, len(data))
    return data


def walk_chunks(stream: BinaryIO, scratch: Optional[bytearray] = None) -> Iterator[ChunkRecord]:
    """
    PNG 시그니처 바로 뒤에 위치한 스트림에서 청크를 순서대로 읽습니다.

    청크 데이터는 scratch 버퍼(기본 1024바이트) 단위로 읽고 버리므로
    선언된 길이와 관계없이 메모리 사용량이 일정합니다.
    첫 번째 청크가 IHDR이면 너비와 높이를 함께 반환합니다.

    Args:
        stream: 시그니처(8바이트) 다음으로 커서가 옮겨진 바이너리 스트림
        scratch: 재사용할 버퍼

    Yields:
        ChunkRecord: 스트림 순서대로 각 청크의 정보

    Raises:
        TruncatedChunk: 청크 도중에 스트림이 끝난 경우
    """
    if scratch is None:
        scratch = bytearray(SCRATCH_SIZE)

    index = 1
    offset = len(PNG_SIGNATURE)

    while True:
        # 길이 필드를 하나도 못 읽으면 정상 종료
        header = read_exact(stream, 4)
        if not header:
            trace(f"End of stream after {index - 1} chunks")
            return
        if len(header) < 4:
            raise TruncatedChunk(index, "length", 4, len(header))

        length = u32_be(header)
        chunk_type = _read_part(stream, 4, index, "type").decode("ascii", errors="replace")

        width = height = None
        remaining = length

        if index == 1:
            if chunk_type == IHDR and length >= 8:
                dims = _read_part(stream, 8, index, "data")
                width = u32_be(dims, 0)
                height = u32_be(dims, 4)
                remaining -= 8
            else:
                error(f"First chunk is {chunk_type!r} with {length} bytes of data, expected {IHDR}")

        skipped = skip(stream, remaining, scratch)
        if skipped < remaining:
            raise TruncatedChunk(index, "data", length, length - remaining + skipped)

        _read_part(stream, 4, index, "crc")

        yield ChunkRecord(
            index=index,
            chunk_type=chunk_type,
            length=length,
            offset=offset,
            width=width,
            height=height,
        )

        offset += length + CHUNK_OVERHEAD
        index += 1
