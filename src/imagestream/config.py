from __future__ import annotations

from pydantic import BaseModel, Field, ValidationError, field_validator
from typing import List, Literal, Optional
from pathlib import Path
import yaml

from .errors import ConfigError

DEFAULT_MODEL = 'gemini-2.5-flash-image'
DEFAULT_PROMPT = 'add the title please'
DEFAULT_SYSTEM_INSTRUCTION = (
    '40-page list of “Bold & Easy” animal designs is finalized.\n\n'
    'All pages should be created on 8.5 x 8.5" canvas, bold/thick outlines, single animal per page, '
    'simple or minimal background.\n\n'
    'Finalized Animal List for Interior:\n\n'
    + '\n'.join([
        'Playful puppy', 'Curious kitten', 'Smiling cow', 'Sleepy pig', 'Happy horse',
        'Friendly sheep', 'Fluffy bunny', 'Proud rooster', 'Gentle duck', 'Wise owl',
        'Adorable chick', 'Cheery lion', 'Jungle elephant', 'Funny monkey', 'Chill sloth',
        'Snuggly panda', 'Clever fox', 'Brave tiger', 'Patient turtle', 'Colorful parrot',
        'Proud peacock', 'Shy deer', 'Majestic giraffe', 'Happy bear', 'Lively squirrel',
        'Playful dolphin', 'Spiky hedgehog', 'Joyful penguin', 'Smiling shark', 'Friendly raccoon',
        'Cheeky goat', 'Happy llama', 'Elegant flamingo', 'Cuddly koala',
        'Magical unicorn-cat (hybrid)', 'Dinosaur-dog (hybrid)', 'Cow-corn (cow-unicorn hybrid)',
        'Pig-a-saurus (pig-dinosaur hybrid)', 'Cat-mander (cat salamander hybrid)',
        'Bonus: Animal dance party (group, simple)',
    ])
)


class ProjectConfig(BaseModel):
    output_dir: Path = Path('.')
    log_level: str = 'INFO'
    log_json: Optional[Path] = None


class AIConfig(BaseModel):
    provider: Literal['gemini', 'mock'] = 'gemini'
    model: str = DEFAULT_MODEL
    api_key_envvar: str = 'GEMINI_API_KEY'


class GenerationConfig(BaseModel):
    prompt: str = DEFAULT_PROMPT
    system_instruction: str = DEFAULT_SYSTEM_INSTRUCTION
    system_instruction_file: Optional[Path] = None
    response_modalities: List[Literal['IMAGE', 'TEXT']] = Field(default_factory=lambda: ['IMAGE', 'TEXT'])
    file_prefix: str = 'image_'

    @field_validator('response_modalities', mode='before')
    @classmethod
    def _upper(cls, v):
        if isinstance(v, str):
            v = [v]
        return [str(m).upper() for m in v]

    def resolved_system_instruction(self) -> str:
        if self.system_instruction_file:
            try:
                return self.system_instruction_file.read_text(encoding='utf-8')
            except OSError as e:
                raise ConfigError(f'Cannot read system instruction file: {e}') from e
        return self.system_instruction


class AppConfig(BaseModel):
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)


def _load_yaml(path: Path) -> dict:
    with path.open('r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f'Invalid YAML in {path}: {e}') from e
    if not isinstance(data, dict):
        raise ConfigError(f'Config {path} must be a mapping, got {type(data).__name__}')
    return data


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config YAML, apply env and normalize relative paths.

    - No path: every default applies
    - Loads .env if present in same dir as config
    - Relative output_dir/log_json/system_instruction_file resolve against the config dir
    """
    if path is None:
        return AppConfig()
    cfg_path = Path(path)
    if not cfg_path.exists():
        raise ConfigError(f'Config file not found: {cfg_path}')
    data = _load_yaml(cfg_path)

    env_path = cfg_path.parent / '.env'
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(env_path)

    base_dir = cfg_path.parent.resolve()
    project = dict(data.get('project') or {})
    for key in ('output_dir', 'log_json'):
        if project.get(key):
            p = Path(project[key])
            if not p.is_absolute():
                project[key] = str((base_dir / p).resolve())
    generation = dict(data.get('generation') or {})
    if generation.get('system_instruction_file'):
        sf = Path(generation['system_instruction_file'])
        if not sf.is_absolute():
            generation['system_instruction_file'] = str((base_dir / sf).resolve())

    try:
        return AppConfig(project=project, ai=data.get('ai') or {}, generation=generation)
    except ValidationError as e:
        raise ConfigError(f'Invalid config {cfg_path}: {e}') from e
