from pathlib import Path
from typing import Union

import typer

from ..logging_lib import setup_logger

logger = setup_logger(__name__)


def save_binary_file(path: Union[str, Path], data: bytes) -> bool:
    """Write ``data`` to ``path``; report on stdout/stderr and never raise OSError."""
    path = Path(path)
    try:
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        typer.echo(f'Error saving file: {e}', err=True)
        logger.warning({'event': 'file_save_error', 'path': str(path), 'error': str(e)})
        return False
    typer.echo(f'Saved file: {path}')
    logger.debug({'event': 'file_saved', 'path': str(path), 'bytes': len(data)})
    return True
