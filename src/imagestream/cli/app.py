import typer
from pathlib import Path
from typing import Optional
from rich.table import Table
from rich.console import Console
from dotenv import find_dotenv, load_dotenv

from ..config import load_config
from ..errors import ImageStreamError
from ..runtime.orchestrator import run_config

app = typer.Typer(help='Stream a generative model reply: print its text, save its images.')

EXAMPLE_CONFIG = (
    "project:\n"
    "  output_dir: .\n"
    "  log_level: INFO\n\n"
    "ai:\n"
    "  provider: gemini\n"
    "  model: gemini-2.5-flash-image\n"
    "  api_key_envvar: GEMINI_API_KEY\n\n"
    "generation:\n"
    "  prompt: add the title please\n"
    "  response_modalities: [IMAGE, TEXT]\n"
    "  file_prefix: image_\n"
)


@app.command()
def run(
    config: Optional[str] = typer.Option(None, help='YAML config file'),
    prompt: Optional[str] = typer.Option(None, help='User prompt'),
    model: Optional[str] = typer.Option(None, help='Model identifier'),
    provider: Optional[str] = typer.Option(None, help='gemini or mock'),
    output_dir: Optional[Path] = typer.Option(None, help='Directory for saved files'),
    system_instruction_file: Optional[Path] = typer.Option(None, help='Read the system instruction from a file'),
    log_json: Optional[Path] = typer.Option(None, help='Also write JSON-line logs here'),
    verbose: bool = False,
):
    load_dotenv(find_dotenv(usecwd=True))
    overrides = {
        'project': {'output_dir': output_dir, 'log_json': log_json},
        'ai': {'model': model, 'provider': provider},
        'generation': {'prompt': prompt, 'system_instruction_file': system_instruction_file},
    }
    try:
        res = run_config(config, verbose=verbose, overrides=overrides)
    except ImageStreamError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    if verbose:
        console = Console(stderr=True)
        table = Table('file')
        for f in res.files:
            table.add_row(str(f))
        console.print(table)
    if not res.ok:
        raise typer.Exit(code=1)


@app.command()
def config_validate(config: str):
    try:
        load_config(config)
    except ImageStreamError as e:
        typer.echo(str(e), err=True)
        raise typer.Exit(code=1)
    typer.echo('valid')


@app.command()
def init(path: str = 'imagestream.yaml'):
    p = Path(path)
    if p.exists():
        typer.echo(f'{p} already exists')
        return
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(EXAMPLE_CONFIG, encoding='utf-8')
    typer.echo(f'Created {p}')


if __name__ == '__main__':
    app()
