from typing import BinaryIO
import struct


def u32_be(data: bytes, offset: int = 0) -> int:
    """big-endian 부호 없는 32비트 정수를 읽습니다 (PNG)."""
    return struct.unpack_from('>I', data, offset)[0]


def i32_le(data: bytes, offset: int = 0) -> int:
    """little-endian 부호 있는 32비트 정수를 읽습니다 (BMP)."""
    return struct.unpack_from('<i', data, offset)[0]


def read_exact(stream: BinaryIO, count: int) -> bytes:
    """
    count 바이트를 읽습니다. 스트림이 끝나면 더 짧은 결과를 반환합니다.

    Args:
        stream: 바이너리 스트림
        count: 읽을 바이트 수
    """
    data = b""
    while len(data) < count:
        block = stream.read(count - len(data))
        if not block:
            break
        data += block
    return data


def skip(stream: BinaryIO, count: int, scratch: bytearray) -> int:
    """
    count 바이트를 scratch 버퍼 크기 단위로 읽고 버립니다.

    count가 아무리 커도 scratch 이상의 메모리는 사용하지 않습니다.
    실제로 건너뛴 바이트 수를 반환합니다.
    """
    view = memoryview(scratch)
    remaining = count
    while remaining > 0:
        n = stream.readinto(view[:min(remaining, len(scratch))])
        if not n:
            break
        remaining -= n
    return count - remaining
