"""Configuration Management Package

Looks for config in multiple places (in order):

1. .gitdraftrc in current directory (project-specific)
2. .gitdraftrc in home directory (global default)
3. Built-in defaults

Config format (JSON):
{
    "provider": "vertex",
    "project_id": "my-gcp-project",
    "pr_language": "japanese",
    "confirm_mode": "tui"
}
"""

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gitdraft.output import Style, print_warning

# Valid configuration values
VALID_PROVIDERS = {"auto", "claude", "ollama", "vertex"}
VALID_STYLES = {"simple", "conventional", "detailed"}
VALID_COLOR_MODES = {"auto", "always", "never"}
VALID_CONFIRM_MODES = {"prompt", "tui"}

# Environment overrides: env var -> config field
ENV_OVERRIDES = {
    "GITDRAFT_PROVIDER": "provider",
    "GITDRAFT_MODEL": "model",
    "GITDRAFT_CONFIRM_MODE": "confirm_mode",
    "GOOGLE_CLOUD_PROJECT": "project_id",
    "GOOGLE_CLOUD_LOCATION": "location",
}


def _warn(message: str) -> None:
    # Loaded before the run's Style exists, so detect one for stderr
    print_warning(message, Style.detect(stream=sys.stderr))


@dataclass
class Config:
    """User configuration with sensible defaults."""
    provider: str = "auto"
    model: Optional[str] = None
    commit_model: Optional[str] = None
    pr_model: Optional[str] = None
    commit_language: str = "english"
    pr_language: str = "english"
    style: str = "conventional"
    include_body: bool = True
    max_subject_length: int = 72
    max_file_display: int = 8  # Max files shown before collapsing list
    color: str = "auto"
    confirm_mode: str = "prompt"
    render_markdown: bool = True
    project_id: Optional[str] = None
    location: str = "us-central1"

    def validate(self) -> list[str]:
        """Validate config values and return list of warnings.

        Invalid values are replaced with defaults after warning.
        """
        warnings = []
        defaults = Config()

        for name, valid in (
            ("provider", VALID_PROVIDERS),
            ("style", VALID_STYLES),
            ("color", VALID_COLOR_MODES),
            ("confirm_mode", VALID_CONFIRM_MODES),
        ):
            value = getattr(self, name)
            if value not in valid:
                default = getattr(defaults, name)
                warnings.append(f"Invalid {name} '{value}', using '{default}'")
                setattr(self, name, default)

        for name in ("max_subject_length", "max_file_display"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                default = getattr(defaults, name)
                warnings.append(f"Invalid {name} '{value}', using {default}")
                setattr(self, name, default)

        for name in ("commit_language", "pr_language"):
            value = getattr(self, name)
            if not isinstance(value, str) or not value.strip():
                warnings.append(f"Invalid {name} '{value}', using '{defaults.commit_language}'")
                setattr(self, name, defaults.commit_language)

        return warnings

    def resolve_model(self, override: str | None, flow: str) -> str | None:
        """Pick the model for a flow: explicit override > per-flow > global."""
        if override:
            return override
        per_flow = self.commit_model if flow == "commit" else self.pr_model
        return per_flow or self.model

    def use_color(self) -> bool:
        if self.color == "always":
            return True
        if self.color == "never":
            return False
        return not os.environ.get("NO_COLOR")

    def apply_env(self, environ: dict | None = None) -> list[str]:
        """Apply environment overrides. Returns the names of variables used."""
        environ = os.environ if environ is None else environ
        used = []
        for var, name in ENV_OVERRIDES.items():
            value = environ.get(var)
            if value:
                setattr(self, name, value)
                used.append(var)
        language = environ.get("GITDRAFT_LANGUAGE")
        if language:
            self.commit_language = language
            self.pr_language = language
            used.append("GITDRAFT_LANGUAGE")
        if used:
            for warning in self.validate():
                _warn(f"Config warning: {warning}")
        return used

    @classmethod
    def from_dict(cls, data: dict) -> 'Config':
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        config = cls(**filtered)
        for warning in config.validate():
            _warn(f"Config warning: {warning}")
        return config


class ConfigManager:
    """Loads the configuration once and remembers where it came from."""

    CONFIG_FILENAME = ".gitdraftrc"

    def __init__(self):
        self._config: Optional[Config] = None
        self._config_path: Optional[Path] = None
        self._env_overrides: list[str] = []

    def load(self) -> Config:
        if self._config is not None:
            return self._config

        for path in (Path.cwd() / self.CONFIG_FILENAME, Path.home() / self.CONFIG_FILENAME):
            if path.exists():
                self._config = self._load_from_file(path)
                self._config_path = path
                break
        else:
            self._config = Config()

        self._env_overrides = self._config.apply_env()
        return self._config

    def _load_from_file(self, path: Path) -> Config:
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top-level value must be an object")
            return Config.from_dict(data)
        except (json.JSONDecodeError, ValueError, OSError) as e:
            _warn(f"Could not load {path}: {e}")
            return Config()

    def get_config_path(self) -> Optional[Path]:
        return self._config_path

    def get_env_overrides(self) -> list[str]:
        return list(self._env_overrides)


_manager = ConfigManager()


def load_config() -> Config:
    return _manager.load()


def get_config_path() -> Optional[Path]:
    return _manager.get_config_path()


def get_env_overrides() -> list[str]:
    return _manager.get_env_overrides()


__all__ = [
    "Config",
    "ConfigManager",
    "load_config",
    "get_config_path",
    "get_env_overrides",
    "VALID_PROVIDERS",
    "VALID_STYLES",
    "VALID_COLOR_MODES",
    "VALID_CONFIRM_MODES",
]
