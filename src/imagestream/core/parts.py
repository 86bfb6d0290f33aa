from pydantic import BaseModel, Field
from typing import List, Literal, Optional


DEFAULT_MIME_TYPE = 'application/octet-stream'


class Blob(BaseModel):
    """Inline binary payload plus its declared media type."""
    data: Optional[bytes] = None
    mime_type: Optional[str] = None


class Part(BaseModel):
    text: Optional[str] = None
    inline_data: Optional[Blob] = None

    @classmethod
    def from_text(cls, text: str) -> 'Part':
        return cls(text=text)

    @classmethod
    def from_bytes(cls, data: bytes, mime_type: Optional[str] = None) -> 'Part':
        return cls(inline_data=Blob(data=data, mime_type=mime_type))

    @property
    def kind(self) -> Literal['binary', 'text', 'empty']:
        # binary wins when a part somehow carries both
        if self.inline_data is not None:
            return 'binary'
        if self.text:
            return 'text'
        return 'empty'


class Content(BaseModel):
    role: Optional[str] = None
    parts: Optional[List[Part]] = None

    @classmethod
    def from_parts(cls, *parts: Part, role: Optional[str] = None) -> 'Content':
        return cls(role=role, parts=list(parts))


class Candidate(BaseModel):
    content: Optional[Content] = None


class ResponseChunk(BaseModel):
    candidates: List[Candidate] = Field(default_factory=list)

    @classmethod
    def of_parts(cls, *parts: Part) -> 'ResponseChunk':
        return cls(candidates=[Candidate(content=Content.from_parts(*parts, role='model'))])
