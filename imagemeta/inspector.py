import os
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, Iterator, List, Optional, Tuple

from .chunks import walk_chunks
from .formats import (
    SCRATCH_SIZE,
    Bmp,
    ChunkRecord,
    FormatVerdict,
    ImageFileNotFound,
    Invalid,
    InvalidFormat,
    Png,
)
from .logger import trace
from .sniffer import identify


@dataclass
class ImageFile:
    """식별이 끝난 이미지 파일. open_image 블록 안에서만 유효합니다."""

    path: str
    verdict: FormatVerdict
    stream: BinaryIO
    scratch: bytearray = field(default_factory=lambda: bytearray(SCRATCH_SIZE))
    _walker: Optional[Iterator[ChunkRecord]] = field(default=None, init=False, repr=False)

    @property
    def format_name(self) -> str:
        return self.verdict.format_name

    @property
    def resolution(self) -> Optional[Tuple[int, int]]:
        """BMP는 헤더에서 바로 알 수 있습니다. PNG는 첫 청크를 읽어야 합니다."""
        if isinstance(self.verdict, Bmp):
            return self.verdict.width, self.verdict.height
        return None

    def read_resolution(self) -> Optional[Tuple[int, int]]:
        """
        BMP는 헤더 값을, PNG는 첫 번째 청크(IHDR)만 읽어 해상도를 반환합니다.

        PNG의 경우 첫 청크를 소비하므로 이후 chunks()는 두 번째 청크부터 이어집니다.
        """
        if isinstance(self.verdict, Png):
            first = next(self.chunks(), None)
            if first is None or first.width is None:
                return None
            return first.width, first.height
        return self.resolution

    def chunks(self) -> Iterator[ChunkRecord]:
        """PNG 청크를 지연 순회합니다. BMP는 빈 시퀀스입니다. 여러 번 호출해도 같은 순회를 이어갑니다."""
        if not isinstance(self.verdict, Png):
            return iter(())
        if self._walker is None:
            self._walker = walk_chunks(self.stream, self.scratch)
        return self._walker


@contextmanager
def open_image(path: str) -> Iterator[ImageFile]:
    """
    파일을 열고 형식을 판별합니다. 블록을 벗어나면 항상 파일이 닫힙니다.

    Raises:
        ImageFileNotFound: 파일이 없는 경우
        TruncatedInput: 헤더가 너무 짧은 경우
        InvalidFormat: PNG도 BMP도 아닌 경우
    """
    if not os.path.isfile(path):
        raise ImageFileNotFound(path)

    trace(f"Opening {path}")
    with open(path, 'rb') as stream:
        verdict = identify(stream)
        if isinstance(verdict, Invalid):
            raise InvalidFormat(path)
        yield ImageFile(path=path, verdict=verdict, stream=stream)


def describe(path: str) -> Dict[str, Any]:
    """한 파일을 끝까지 읽고 JSON으로 직렬화 가능한 요약을 반환합니다."""
    with open_image(path) as image:
        result: Dict[str, Any] = {
            "path": path,
            "format": image.format_name,
            "width": None,
            "height": None,
        }

        if image.resolution:
            result["width"], result["height"] = image.resolution

        if isinstance(image.verdict, Png):
            chunks: List[Dict[str, Any]] = []
            for record in image.chunks():
                if record.index == 1 and record.width is not None:
                    result["width"] = record.width
                    result["height"] = record.height
                chunks.append(record.to_dict())
            result["chunks"] = chunks

    return result
