from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass
class StreamSummary:
    files: List[Path] = field(default_factory=list)
    texts: int = 0
    chunks: int = 0
    skipped_chunks: int = 0
    write_errors: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def as_dict(self) -> dict:
        return {
            'files': [str(f) for f in self.files],
            'texts': self.texts,
            'chunks': self.chunks,
            'skipped_chunks': self.skipped_chunks,
            'write_errors': self.write_errors,
            'error': self.error,
        }
