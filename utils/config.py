"""
Run configuration.

Defaults mirror config/default.yaml. load_config() merges a YAML file over
them section by section; argparse flags in run_life.py override the result.
"""
import os
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional

import yaml

from utils.date_grid import GRID_WIDTH

REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_PATH = os.path.join(REPO_ROOT, 'config', 'default.yaml')


@dataclass
class GithubConfig:
    username: str = 'maker-of-life'
    repo_name: str = 'game-of-life'
    url: Optional[str] = None
    clone: bool = True
    local_path: str = 'tmp'
    branch: str = 'main'

    def remote_url(self) -> str:
        """`url` if set, otherwise the GitHub repository of `username`."""
        if self.url:
            return self.url
        return f"https://github.com/{self.username}/{self.repo_name}.git"


@dataclass
class CommitConfig:
    name: str = 'Maker of Life'
    email: str = 'makeroflife@erbridge.co.uk'
    message: str = 'Create life'


@dataclass
class GridConfig:
    width: int = GRID_WIDTH
    generations: int = 1
    seed_file: Optional[str] = None
    strict_dates: bool = False

    def validate(self) -> None:
        if self.width < 3:
            raise ValueError(f"grid width must be >= 3, got {self.width}")
        if self.generations < 0:
            raise ValueError(f"generations must be >= 0, got {self.generations}")


@dataclass
class Config:
    github: GithubConfig = field(default_factory=GithubConfig)
    commit: CommitConfig = field(default_factory=CommitConfig)
    grid: GridConfig = field(default_factory=GridConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _merge_section(section, values, name):
    if values is None:
        return section
    if not isinstance(values, dict):
        raise ValueError(f"config section '{name}' must be a mapping")
    known = {f.name for f in fields(section)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f"unknown keys in config section '{name}': {', '.join(unknown)}")
    return type(section)(**{**asdict(section), **values})


def merge_config(config: Config, data: Optional[Dict[str, Any]]) -> Config:
    """Return a new Config with the sections of `data` laid over `config`."""
    if not data:
        return config
    if not isinstance(data, dict):
        raise ValueError("config file must contain a mapping")
    unknown = sorted(set(data) - {'github', 'commit', 'grid'})
    if unknown:
        raise ValueError(f"unknown config sections: {', '.join(unknown)}")
    return Config(
        github=_merge_section(config.github, data.get('github'), 'github'),
        commit=_merge_section(config.commit, data.get('commit'), 'commit'),
        grid=_merge_section(config.grid, data.get('grid'), 'grid'),
    )


def load_yaml(path):
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_config(path=None) -> Config:
    """Defaults, then config/default.yaml if present, then `path`."""
    config = Config()
    if os.path.isfile(DEFAULT_CONFIG_PATH):
        config = merge_config(config, load_yaml(DEFAULT_CONFIG_PATH))
    if path is not None:
        config = merge_config(config, load_yaml(path))
    config.grid.validate()
    return config
