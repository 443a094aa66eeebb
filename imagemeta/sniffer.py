import os
from typing import BinaryIO

from .binio import i32_le, read_exact
from .formats import (
    BMP_HEIGHT_OFFSET,
    BMP_MAGIC,
    BMP_RESERVED,
    BMP_WIDTH_OFFSET,
    LOOKAHEAD_SIZE,
    MIN_HEADER_SIZE,
    PNG_SIGNATURE,
    Bmp,
    FormatVerdict,
    Invalid,
    Png,
    TruncatedInput,
)
from .logger import trace


def is_png(head: bytes) -> bool:
    return head[:len(PNG_SIGNATURE)] == PNG_SIGNATURE


def is_bmp(head: bytes) -> bool:
    # 0-1: "BM", 6-9: 예약 필드 (항상 0)
    return head[:2] == BMP_MAGIC and head[6:10] == BMP_RESERVED


def identify(stream: BinaryIO) -> FormatVerdict:
    """
    스트림의 헤더를 읽어 PNG/BMP 여부를 판별합니다.

    PNG이고 스트림이 seek를 지원하면 커서를 시그니처 바로 뒤(8바이트)로
    되돌려 청크 탐색을 이어갈 수 있게 합니다.

    Raises:
        TruncatedInput: 54바이트 이하만 읽힌 경우
    """
    head = read_exact(stream, LOOKAHEAD_SIZE)

    if len(head) <= MIN_HEADER_SIZE:
        raise TruncatedInput(len(head))

    if is_png(head):
        if stream.seekable():
            stream.seek(len(PNG_SIGNATURE) - len(head), os.SEEK_CUR)
        trace(f"PNG signature found in {len(head)} byte header")
        return Png()

    if is_bmp(head):
        width = i32_le(head, BMP_WIDTH_OFFSET)
        height = i32_le(head, BMP_HEIGHT_OFFSET)
        trace(f"BMP header found: {width}x{height}")
        return Bmp(width=width, height=height)

    trace(f"No known signature in header: {head[:8].hex()}")
    return Invalid()
