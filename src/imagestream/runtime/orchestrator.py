from pathlib import Path
from typing import List, Optional, Tuple
import logging
import time

import typer
from pydantic import ValidationError

from ..ai.client import GenerateConfig, StreamingClient
from ..ai.factory import make_ai_client, require_api_key
from ..config import AppConfig, load_config
from ..core.parts import Content, Part
from ..core.results import StreamSummary
from ..errors import ConfigError
from ..logging_lib import ROOT_LOGGER, json_log_entry, reconfigure_log_level, setup_logger
from .consumer import consume_stream

logger = setup_logger(__name__)


def build_request(cfg: AppConfig) -> Tuple[List[Content], GenerateConfig]:
    """Conversation contents and request options for one generation."""
    contents = [Content.from_parts(Part.from_text(cfg.generation.prompt), role='user')]
    config = GenerateConfig(
        response_modalities=list(cfg.generation.response_modalities),
        system_instruction=Content.from_parts(Part.from_text(cfg.generation.resolved_system_instruction())),
    )
    return contents, config


def run_generation(cfg: AppConfig, client: Optional[StreamingClient] = None) -> StreamSummary:
    """Stream one generation, printing text parts and saving binary parts.

    Raises MissingCredentialError before any client is built or called. A
    failure while streaming is reported on stderr and recorded in the
    returned summary; files already written stay on disk.
    """
    api_key = require_api_key(cfg.ai.api_key_envvar)
    if client is None:
        client = make_ai_client(cfg.ai, api_key=api_key)
    contents, config = build_request(cfg)

    outdir = Path(cfg.project.output_dir)
    try:
        outdir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigError(f'Cannot create output directory {outdir}: {e}') from e
    summary = StreamSummary()
    t0 = time.time()
    logger.info({'event': 'stream_start', 'model': cfg.ai.model, 'provider': cfg.ai.provider, 'output_dir': str(outdir)})
    try:
        stream = client.generate_content_stream(cfg.ai.model, contents, config)
        consume_stream(stream, summary, output_dir=outdir, prefix=cfg.generation.file_prefix)
    except Exception as e:  # stream-level failure: keep partial results
        summary.error = str(e)
        typer.echo(f'Error during content generation: {e}', err=True)
        logger.error({'event': 'stream_error', 'error': str(e), 'chunks': summary.chunks})
    logger.info({'event': 'stream_end', 'latency': time.time() - t0, **summary.as_dict()})
    return summary


def run_config(path: Optional[str] = None, verbose: bool = False, overrides: Optional[dict] = None,
               client: Optional[StreamingClient] = None) -> StreamSummary:
    cfg = load_config(path)
    if overrides:
        cfg = apply_overrides(cfg, overrides)

    log_level = 'DEBUG' if verbose else (cfg.project.log_level or 'INFO')
    reconfigure_log_level(log_level)
    if cfg.project.log_json:
        setup_logger(ROOT_LOGGER, json_file=str(cfg.project.log_json), level=log_level)
    logger.debug({'event': 'log_level_configured', 'level': log_level, 'verbose': verbose})

    summary = run_generation(cfg, client=client)
    if verbose:
        json_log_entry(logging.getLogger(ROOT_LOGGER), summary.as_dict())
    return summary


def apply_overrides(cfg: AppConfig, overrides: dict) -> AppConfig:
    """Return a copy of cfg with per-section overrides applied, e.g. {'ai': {'model': 'x'}}.

    None values leave the configured value in place.
    """
    data = cfg.model_dump()
    for section, values in overrides.items():
        data[section].update({k: v for k, v in (values or {}).items() if v is not None})
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f'Invalid option: {e}') from e
