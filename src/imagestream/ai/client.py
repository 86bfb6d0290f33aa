from abc import ABC, abstractmethod
from typing import Iterable, List, Optional

from pydantic import BaseModel

from ..core.parts import Content, ResponseChunk


class GenerateConfig(BaseModel):
    """Per-request options for a streamed generation; unset fields use provider defaults."""
    response_modalities: Optional[List[str]] = None
    system_instruction: Optional[Content] = None


class StreamingClient(ABC):
    @abstractmethod
    def generate_content_stream(self, model: str, contents: List[Content],
                                config: Optional[GenerateConfig] = None) -> Iterable[ResponseChunk]:
        """Start a streamed generation and return a lazy, single-pass chunk iterable.

        The iterable may expose ``close()``; consumers call it when done.
        """
        raise NotImplementedError()
