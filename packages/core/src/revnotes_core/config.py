import os
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG: dict = {
    "request_ref": "refs/notes/devtools/reviews",
    "comment_ref": "refs/notes/devtools/discuss",
    "target_ref": "refs/heads/master",  # default destination for new review requests
    "remote": "origin",
    "notes_ref_pattern": "refs/notes/devtools/*",  # refs shared by push / pull
}


def load_config(config_path: str = ".revnotes.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .revnotes.yml in the current directory
      3. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    # An explicit author wins over `git config user.email`.
    config["author"] = os.environ.get("REVNOTES_AUTHOR")

    return config
