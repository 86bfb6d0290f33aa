import logging
from pathlib import Path

import pytest

from imagestream.ai.providers.mock import MockProvider
from imagestream.config import AppConfig, load_config
from imagestream.errors import ConfigError, MissingCredentialError
from imagestream.logging_lib import ROOT_LOGGER
from imagestream.runtime.orchestrator import apply_overrides, build_request, run_config, run_generation

from conftest import image_chunk, text_chunk


def mock_cfg(**project):
    return AppConfig.model_validate({'ai': {'provider': 'mock'}, 'project': project})


@pytest.mark.parametrize('value', [None, ''])
def test_missing_credential_aborts_before_any_call(monkeypatch, value):
    if value is None:
        monkeypatch.delenv('GEMINI_API_KEY', raising=False)
    else:
        monkeypatch.setenv('GEMINI_API_KEY', value)
    client = MockProvider()
    with pytest.raises(MissingCredentialError) as exc:
        run_generation(mock_cfg(), client=client)
    assert 'GEMINI_API_KEY' in str(exc.value)
    assert client.calls == []
    assert client.streams == []


def test_custom_credential_variable(monkeypatch):
    monkeypatch.setenv('GEMINI_API_KEY', 'present-but-not-used')
    monkeypatch.delenv('OTHER_KEY', raising=False)
    cfg = AppConfig.model_validate({'ai': {'provider': 'mock', 'api_key_envvar': 'OTHER_KEY'}})
    with pytest.raises(MissingCredentialError):
        run_generation(cfg, client=MockProvider())


def test_build_request_defaults():
    contents, config = build_request(AppConfig())
    assert len(contents) == 1
    assert contents[0].role == 'user'
    assert contents[0].parts[0].text == 'add the title please'
    assert config.response_modalities == ['IMAGE', 'TEXT']
    assert 'Wise owl' in config.system_instruction.parts[0].text


def test_run_generation_with_mock_provider(api_key, capsys):
    summary = run_generation(mock_cfg())
    out = capsys.readouterr().out.splitlines()
    assert out[0] == 'MOCK_TEXT: here is your page'
    assert out[1].startswith('Saved file: image_')
    assert summary.ok
    assert summary.chunks == 3
    assert summary.skipped_chunks == 1
    assert len(summary.files) == 1
    assert summary.files[0].suffix == '.png'
    assert summary.files[0].read_bytes().startswith(b'\x89PNG')


def test_request_reaches_client(api_key):
    client = MockProvider()
    cfg = apply_overrides(mock_cfg(), {'ai': {'model': 'custom-model'}, 'generation': {'prompt': 'draw a fox'}})
    run_generation(cfg, client=client)
    assert len(client.calls) == 1
    call = client.calls[0]
    assert call['model'] == 'custom-model'
    assert call['contents'][0].parts[0].text == 'draw a fox'
    assert call['config'].response_modalities == ['IMAGE', 'TEXT']
    assert client.streams[0].closed


def test_stream_failure_keeps_partial_results(api_key, capsys):
    client = MockProvider(chunks=[image_chunk(b'first'), text_chunk('lost')], fail_after=1,
                          error=RuntimeError('quota exceeded'))
    summary = run_generation(mock_cfg(), client=client)
    captured = capsys.readouterr()
    assert 'Error during content generation: quota exceeded' in captured.err
    assert 'lost' not in captured.out
    assert not summary.ok
    assert summary.error == 'quota exceeded'
    assert [f.read_bytes() for f in summary.files] == [b'first']
    assert client.streams[0].closed


def test_output_dir_is_created(api_key, tmp_path):
    summary = run_generation(mock_cfg(output_dir=str(tmp_path / 'out' / 'pages')))
    assert summary.files[0].parent == tmp_path / 'out' / 'pages'
    assert summary.files[0].exists()


def test_run_config_from_yaml(api_key, tmp_path):
    cfg_file = tmp_path / 'conf' / 'run.yaml'
    cfg_file.parent.mkdir()
    cfg_file.write_text(
        'project:\n  output_dir: images\n'
        'ai:\n  provider: mock\n'
        'generation:\n  file_prefix: page_\n',
        encoding='utf-8',
    )
    summary = run_config(str(cfg_file))
    assert summary.ok
    assert summary.files[0].parent == (tmp_path / 'conf' / 'images').resolve()
    assert summary.files[0].name.startswith('page_')


def test_run_config_verbose_writes_json_log(api_key, tmp_path):
    log_file = tmp_path / 'logs' / 'run.jsonl'
    root = logging.getLogger(ROOT_LOGGER)
    try:
        summary = run_config(verbose=True, overrides={'ai': {'provider': 'mock'}, 'project': {'log_json': log_file}})
    finally:
        for h in [h for h in root.handlers if isinstance(h, logging.FileHandler)]:
            h.close()
            root.removeHandler(h)
    assert summary.ok
    text = log_file.read_text(encoding='utf-8')
    assert 'stream_start' in text
    assert 'stream_end' in text


def test_invalid_override_is_config_error():
    with pytest.raises(ConfigError):
        apply_overrides(AppConfig(), {'ai': {'provider': 'nope'}})


def test_override_none_keeps_configured_value():
    cfg = apply_overrides(load_config(), {'ai': {'model': None}, 'generation': {'prompt': None}})
    assert cfg.ai.model == 'gemini-2.5-flash-image'
    assert cfg.generation.prompt == 'add the title please'


def test_unreadable_system_instruction_file(api_key):
    cfg = apply_overrides(mock_cfg(), {'generation': {'system_instruction_file': Path('nope.txt')}})
    client = MockProvider()
    with pytest.raises(ConfigError):
        run_generation(cfg, client=client)
    assert client.calls == []


class RaisingClient(MockProvider):
    def generate_content_stream(self, model, contents, config=None):
        self.calls.append({'model': model})
        raise ConnectionError('could not connect')


def test_stream_call_failing_before_first_chunk(api_key, capsys, tmp_path):
    client = RaisingClient()
    summary = run_generation(mock_cfg(), client=client)
    assert len(client.calls) == 1
    assert summary.error == 'could not connect'
    assert summary.chunks == 0
    assert summary.files == []
    assert 'Error during content generation: could not connect' in capsys.readouterr().err
    assert list(tmp_path.iterdir()) == []


def test_output_dir_that_is_a_file_is_config_error(api_key, tmp_path):
    (tmp_path / 'blocker').write_text('x', encoding='utf-8')
    client = MockProvider()
    with pytest.raises(ConfigError, match='Cannot create output directory'):
        run_generation(mock_cfg(output_dir=str(tmp_path / 'blocker')), client=client)
    assert client.calls == []


def test_failures_logged_above_info(monkeypatch, api_key):
    records = []

    class Collect(logging.Handler):
        def emit(self, record):
            records.append(record)

    handler = Collect(level=logging.WARNING)
    root = logging.getLogger(ROOT_LOGGER)
    root.addHandler(handler)
    try:
        run_generation(mock_cfg(), client=MockProvider(chunks=[text_chunk('a')], fail_after=0))
        monkeypatch.delenv('GEMINI_API_KEY')
        with pytest.raises(MissingCredentialError):
            run_generation(mock_cfg(), client=MockProvider())
    finally:
        root.removeHandler(handler)
    events = {r.msg['event']: r.levelno for r in records}
    assert events == {'stream_error': logging.ERROR, 'missing_credential': logging.ERROR}
