from typing import Any, Iterator, List, Optional

from ..client import GenerateConfig, StreamingClient
from ...core.parts import DEFAULT_MIME_TYPE, Blob, Candidate, Content, Part, ResponseChunk
from ...errors import ProviderUnavailableError
from ...logging_lib import setup_logger

logger = setup_logger(__name__)

try:  # optional dependency
    from google import genai  # type: ignore
    from google.genai import types  # type: ignore
except ImportError:  # pragma: no cover
    genai = None  # type: ignore
    types = None  # type: ignore


def _to_sdk_content(content: Content):
    parts = []
    for p in content.parts or []:
        if p.inline_data is not None:
            parts.append(types.Part.from_bytes(data=p.inline_data.data or b'',
                                               mime_type=p.inline_data.mime_type or DEFAULT_MIME_TYPE))
        elif p.text is not None:
            parts.append(types.Part.from_text(text=p.text))
    return types.Content(role=content.role, parts=parts)


def _to_sdk_config(config: Optional[GenerateConfig]):
    if config is None:
        return None
    kwargs = {}
    if config.response_modalities:
        kwargs['response_modalities'] = list(config.response_modalities)
    if config.system_instruction is not None:
        kwargs['system_instruction'] = _to_sdk_content(config.system_instruction)
    return types.GenerateContentConfig(**kwargs)


def to_chunk(resp: Any) -> ResponseChunk:
    """Convert an SDK ``GenerateContentResponse`` into a ResponseChunk."""
    candidates = []
    for cand in getattr(resp, 'candidates', None) or []:
        content = getattr(cand, 'content', None)
        if content is None:
            candidates.append(Candidate())
            continue
        sdk_parts = getattr(content, 'parts', None)
        parts = None
        if sdk_parts is not None:
            parts = []
            for sp in sdk_parts:
                inline = getattr(sp, 'inline_data', None)
                blob = None
                if inline is not None:
                    blob = Blob(data=getattr(inline, 'data', None), mime_type=getattr(inline, 'mime_type', None))
                parts.append(Part(text=getattr(sp, 'text', None), inline_data=blob))
        candidates.append(Candidate(content=Content(role=getattr(content, 'role', None), parts=parts)))
    return ResponseChunk(candidates=candidates)


class GeminiProvider(StreamingClient):
    def __init__(self, api_key: str, model: Optional[str] = None):
        if genai is None:
            raise ProviderUnavailableError('google-genai package not installed')
        self.client = genai.Client(api_key=api_key)
        self.model = model
        logger.info({'event': 'gemini_init', 'model': self.model})

    def generate_content_stream(self, model: str, contents: List[Content],
                                config: Optional[GenerateConfig] = None) -> Iterator[ResponseChunk]:
        model = model or self.model
        logger.info({'event': 'gemini_stream_start', 'model': model, 'contents': len(contents)})
        return self._stream(model, [_to_sdk_content(c) for c in contents], _to_sdk_config(config))

    def _stream(self, model, sdk_contents, sdk_config) -> Iterator[ResponseChunk]:
        # the SDK stream is opened on first next(), so closing an unstarted stream leaks nothing
        sdk_stream = self.client.models.generate_content_stream(model=model, contents=sdk_contents, config=sdk_config)
        try:
            for resp in sdk_stream:
                yield to_chunk(resp)
        finally:
            close = getattr(sdk_stream, 'close', None)
            if callable(close):
                close()
