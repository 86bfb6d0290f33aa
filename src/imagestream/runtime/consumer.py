from pathlib import Path
from typing import Iterable, List, Optional, Union

from ..core.parts import Part, ResponseChunk
from ..core.results import StreamSummary
from ..core.router import route_part
from ..logging_lib import setup_logger

logger = setup_logger(__name__)


def first_parts(chunk: ResponseChunk) -> Optional[List[Part]]:
    """Parts of the first candidate, or None when the chunk carries nothing usable.

    Candidates after index 0 are ignored.
    """
    if not chunk.candidates:
        return None
    content = chunk.candidates[0].content
    if content is None or content.parts is None:
        return None
    return content.parts


def consume_stream(stream: Iterable[ResponseChunk], summary: StreamSummary,
                   output_dir: Union[str, Path] = '.', prefix: str = 'image_') -> StreamSummary:
    """Pull chunks one at a time and route their parts in arrival order.

    Errors raised by the stream propagate to the caller. The stream is closed
    on every exit path.
    """
    try:
        for chunk in stream:
            summary.chunks += 1
            parts = first_parts(chunk)
            if parts is None:
                summary.skipped_chunks += 1
                logger.debug({'event': 'chunk_skipped', 'index': summary.chunks - 1})
                continue
            for part in parts:
                route_part(part, summary, output_dir=output_dir, prefix=prefix)
    finally:
        close = getattr(stream, 'close', None)
        if callable(close):
            close()
    return summary
