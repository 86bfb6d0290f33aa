import sys
from pathlib import Path
import pytest

# ensure src in path
ROOT = Path(__file__).parent.parent
SRC = ROOT / 'src'
sys.path.insert(0, str(SRC))

from imagestream.core.parts import Part, ResponseChunk  # noqa: E402


@pytest.fixture(autouse=True)
def cwd_tmp_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv('GEMINI_API_KEY', 'test-key')
    return 'test-key'


def text_chunk(*texts):
    return ResponseChunk.of_parts(*[Part.from_text(t) for t in texts])


def image_chunk(data=b'\x89PNG-data', mime_type='image/png'):
    return ResponseChunk.of_parts(Part.from_bytes(data, mime_type))
