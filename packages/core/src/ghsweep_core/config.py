import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "data_dir": "data",
    "include_archived": False,
    "close_issue_workers": 8,
    "env_file": ".env",
}

DECISIONS_FILENAME = "decisions.json"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> Optional[bool]:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return None
    return value.strip().lower() in _TRUTHY


def load_config(config_path: str = ".ghsweep.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .ghsweep.yml in the current directory
      3. Environment variables (INCLUDE_ARCHIVED)
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    include_archived = _env_flag("INCLUDE_ARCHIVED")
    if include_archived is not None:
        config["include_archived"] = include_archived

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    config["github_token"] = os.environ.get("GITHUB_TOKEN")

    return config


def data_path(config: dict, filename: str) -> Path:
    """Resolve a file inside the configured data directory."""
    return Path(config["data_dir"]) / filename
