from pathlib import Path
from typing import Union

import typer

from .naming import make_file_name
from .parts import DEFAULT_MIME_TYPE, Part
from .results import StreamSummary
from .writer import save_binary_file


def route_part(part: Part, summary: StreamSummary, output_dir: Union[str, Path] = '.',
               prefix: str = 'image_') -> str:
    """Send one part to disk (binary) or stdout (non-empty text).

    Returns the kind that was handled: 'binary', 'text' or 'empty'.
    """
    kind = part.kind
    if kind == 'binary':
        blob = part.inline_data
        data = blob.data or b''
        mime_type = blob.mime_type or DEFAULT_MIME_TYPE
        path = Path(output_dir) / make_file_name(mime_type, prefix=prefix)
        if save_binary_file(path, data):
            summary.files.append(path)
        else:
            summary.write_errors += 1
    elif kind == 'text':
        # color=True keeps escape sequences in the model text when stdout is not a tty
        typer.echo(part.text, color=True)
        summary.texts += 1
    return kind
