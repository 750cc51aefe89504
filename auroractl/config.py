"""
Settings for auroractl.

Defaults are overridden by an optional key-value config file, then by
``AURORACTL_*`` environment variables, then by command-line flags.
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Dict, Mapping, Optional, Tuple

from dotenv import dotenv_values

ENV_PREFIX = "AURORACTL_"
TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class Settings:
    aurora: str = "aurora"
    concurrency: int = 1
    verbose: bool = False
    debug: bool = False
    clusters: Tuple[str, ...] = ()
    roles: Tuple[str, ...] = ()
    envs: Tuple[str, ...] = ()
    jobs: Tuple[str, ...] = ()
    log_dir: Optional[str] = None

    def merged(self, **overrides) -> "Settings":
        """Return a copy with every override that is not None applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


# config key -> Settings field; list keys accept the singular flag name too
KEY_ALIASES = {
    "cluster": "clusters",
    "role": "roles",
    "env": "envs",
    "job": "jobs",
}


def split_list(value: str) -> Tuple[str, ...]:
    return tuple(v.strip() for v in value.split(",") if v.strip())


def _coerce(name: str, value: str):
    if name == "concurrency":
        try:
            concurrency = int(value)
        except ValueError:
            raise SystemExit(f"Invalid concurrency value: {value!r}")
        if concurrency < 1:
            raise SystemExit(f"Concurrency must be at least 1, got {concurrency}")
        return concurrency
    if name in ("verbose", "debug"):
        return value.strip().lower() in TRUE_VALUES
    if name in ("clusters", "roles", "envs", "jobs"):
        return split_list(value)
    return value.strip()


def _settings_from_mapping(values: Mapping[str, Optional[str]], prefix: str = "") -> Dict[str, object]:
    known = {f.name for f in fields(Settings)}
    parsed: Dict[str, object] = {}
    for key, value in values.items():
        if value is None or not key.upper().startswith(prefix):
            continue
        name = key[len(prefix):].lower()
        name = KEY_ALIASES.get(name, name)
        if name in known:
            parsed[name] = _coerce(name, value)
    return parsed


def load_settings(
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """
    Build Settings from defaults, an optional config file and the environment.

    Args:
        config_file: Explicit key-value config file, not searched for
        environ: Environment mapping (default: os.environ)
    """
    settings = Settings()

    if config_file is not None:
        if not config_file.exists():
            raise SystemExit(f"Config file not found: {config_file}")
        settings = settings.merged(**_settings_from_mapping(dotenv_values(config_file)))

    if environ is None:
        environ = os.environ
    return settings.merged(**_settings_from_mapping(environ, prefix=ENV_PREFIX))
