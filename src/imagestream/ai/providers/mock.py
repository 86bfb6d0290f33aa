import base64
from typing import Iterable, Iterator, List, Optional, Sequence

from ..client import GenerateConfig, StreamingClient
from ...core.parts import Content, Part, ResponseChunk
from ...logging_lib import setup_logger

logger = setup_logger(__name__)

# valid 1x1 PNG (white)
PNG_1X1 = base64.b64decode(
    'iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mP8Xw8AAmEBg6ou2hkAAAAASUVORK5CYII='
)


def default_script() -> List[ResponseChunk]:
    return [
        ResponseChunk.of_parts(Part.from_text('MOCK_TEXT: here is your page')),
        ResponseChunk(),
        ResponseChunk.of_parts(Part.from_bytes(PNG_1X1, 'image/png')),
    ]


class ScriptedStream:
    """Single-pass iterator over scripted chunks.

    ``fail_after`` raises ``error`` once that many chunks have been yielded.
    """

    def __init__(self, chunks: Sequence[ResponseChunk], fail_after: Optional[int] = None,
                 error: Optional[Exception] = None):
        self._chunks = iter(list(chunks))
        self._yielded = 0
        self.fail_after = fail_after
        self.error = error or RuntimeError('mock stream failure')
        self.closed = False

    def __iter__(self) -> Iterator[ResponseChunk]:
        return self

    def __next__(self) -> ResponseChunk:
        if self.closed:
            raise StopIteration
        if self.fail_after is not None and self._yielded >= self.fail_after:
            raise self.error
        chunk = next(self._chunks)
        self._yielded += 1
        return chunk

    def close(self):
        self.closed = True


class MockProvider(StreamingClient):
    def __init__(self, model: str = 'mock-1', chunks: Optional[Iterable[ResponseChunk]] = None,
                 fail_after: Optional[int] = None, error: Optional[Exception] = None):
        self.model = model
        self.chunks = list(chunks) if chunks is not None else default_script()
        self.fail_after = fail_after
        self.error = error
        self.calls: list = []
        self.streams: List[ScriptedStream] = []

    def generate_content_stream(self, model: str, contents: List[Content],
                                config: Optional[GenerateConfig] = None) -> ScriptedStream:
        self.calls.append({'model': model, 'contents': contents, 'config': config})
        logger.debug({'event': 'mock_stream_start', 'model': model, 'chunks': len(self.chunks)})
        stream = ScriptedStream(self.chunks, fail_after=self.fail_after, error=self.error)
        self.streams.append(stream)
        return stream
