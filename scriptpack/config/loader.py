"""Configuration loading utilities."""

import json
import re
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import ValidationError

from scriptpack.config.schema import Config
from scriptpack.errors import ConfigError

CONFIG_FILENAME = "scriptpack.json"


def get_config_path(base_dir: Path | None = None) -> Path:
    """Get the default configuration file path (in the working directory)."""
    return (base_dir or Path.cwd()) / CONFIG_FILENAME


def load_config(config_path: Path | None = None) -> Config:
    """
    Load configuration from file or fall back to defaults.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Loaded configuration object.

    Raises:
        ConfigError: The file exists but is not valid JSON or fails validation.
    """
    path = config_path or get_config_path()

    if not path.exists():
        if config_path is not None:
            raise ConfigError(f"Config file not found: {path}")
        logger.debug(f"No config at {path}, using defaults")
        return Config()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Failed to read config from {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config in {path} must be a JSON object")

    try:
        config = Config(**convert_keys(data))
    except ValidationError as e:
        raise ConfigError(f"Invalid config in {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    return config


def save_config(config: Config, config_path: Path | None = None) -> Path:
    """
    Save configuration to file.

    Args:
        config: Configuration to save.
        config_path: Optional path to save to. Uses default if not provided.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    # Convert to camelCase format
    data = config.model_dump(mode="json")
    data = convert_to_camel(data)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    return path


# Free-form mappings whose keys are data, not field names.
_VERBATIM_KEYS = {"icons", "additional_properties"}


def convert_keys(data: Any) -> Any:
    """Convert camelCase keys to snake_case for Pydantic."""
    if isinstance(data, dict):
        out = {}
        for k, v in data.items():
            key = camel_to_snake(k)
            out[key] = v if key in _VERBATIM_KEYS else convert_keys(v)
        return out
    if isinstance(data, list):
        return [convert_keys(item) for item in data]
    return data


def convert_to_camel(data: Any) -> Any:
    """Convert snake_case keys to camelCase."""
    if isinstance(data, dict):
        return {
            snake_to_camel(k): v if k in _VERBATIM_KEYS else convert_to_camel(v)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [convert_to_camel(item) for item in data]
    return data


def camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    # Examples:
    # - repoUrl -> repo_url
    # - minimumChromeVersionV2 -> minimum_chrome_version_v2
    if not name:
        return ""

    # Fast path for already-snake-ish values.
    if name.lower() == name:
        return re.sub(r"[-\s]+", "_", name)

    out: list[str] = []
    n = len(name)

    def _lower_run_len(start: int) -> int:
        j = start
        while j < n and name[j].islower():
            j += 1
        return j - start

    for i, ch in enumerate(name):
        if not ch.isupper():
            out.append(ch)
            continue

        if i > 0:
            prev = name[i - 1]
            nxt = name[i + 1] if i + 1 < n else ""

            if prev.islower() or prev.isdigit():
                out.append("_")
            elif prev.isupper() and nxt and nxt.islower():
                # Split acronym -> word transitions only before word-like runs ("URLParser").
                if _lower_run_len(i + 1) > 1:
                    out.append("_")

        out.append(ch.lower())

    return re.sub(r"[-\s]+", "_", "".join(out))


def snake_to_camel(name: str) -> str:
    """Convert snake_case to camelCase."""
    components = name.split("_")
    return components[0] + "".join(x.title() for x in components[1:])
