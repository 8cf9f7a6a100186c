from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import Any

from tripledes.infra.paths import (
    DEFAULT_CONFIG_FILE,
    DEFAULT_CONFIG_FILENAME,
    SETTING_PATH,
)

logger = logging.getLogger(__name__)

LOCAL_FILENAMES = (DEFAULT_CONFIG_FILENAME, "settings.json")


def _resolve_file_path(
    user_path: str | Path | None,
    local_filenames: tuple[str, ...],
    fallback_path: Path,
) -> Path | None:
    """
    Pick the configuration file to read.

    Lookup order:
        1. ``user_path``, if given and it exists
        2. the first of ``local_filenames`` present in the working directory
        3. ``fallback_path``

    Returns:
        The resolved path, or None if nothing matched.
    """
    if user_path:
        path = Path(user_path).expanduser().resolve()
        if path.is_file():
            return path
        logger.warning("Specified config file not found: %s", path)

    for name in local_filenames:
        local_path = (Path.cwd() / name).resolve()
        if local_path.is_file():
            logger.debug("Using local config file: %s", local_path)
            return local_path

    if fallback_path.is_file():
        return fallback_path.resolve()

    return None


def _load_by_extension(path: Path) -> dict[str, Any]:
    """
    Parse a ``.toml`` or ``.json`` configuration file.

    Raises:
        ValueError: If the extension is unsupported, the file does not parse,
            or its root is not a table/object.
    """
    ext = path.suffix.lower()

    if ext == ".json":
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Invalid JSON in {path}: {e}") from e

    elif ext == ".toml":
        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ValueError(f"Invalid TOML in {path}: {e}") from e

    else:
        raise ValueError(f"Unsupported config file extension: {ext}")

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a dict, got {type(data)} in {path}")

    return data


def load_config(config_path: str | Path | None = None) -> dict[str, Any]:
    """
    Load configuration data from a TOML or JSON file.

    Resolution order:
        - Explicit ``config_path`` (if provided and present)
        - ``settings.toml`` or ``settings.json`` in the working directory
        - ``SETTING_PATH`` in the user config directory

    Args:
        config_path: Optional explicit configuration file path.

    Returns:
        Parsed configuration as a dictionary.

    Raises:
        FileNotFoundError: If no configuration file is found.
        ValueError: If the file cannot be parsed or has an invalid structure.
    """
    path = _resolve_file_path(
        user_path=config_path,
        local_filenames=LOCAL_FILENAMES,
        fallback_path=SETTING_PATH,
    )

    if not path:
        raise FileNotFoundError("No valid config file found.")

    logger.debug("Loading configuration from: %s", path)
    return _load_by_extension(path)


def copy_default_config(target: Path) -> None:
    """
    Write the bundled sample settings to ``target``.

    Parent directories are created as needed; an existing file is replaced.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(DEFAULT_CONFIG_FILE.read_bytes())
    logger.info("Default configuration written to: %s", target)


def save_config(
    config: dict[str, Any],
    output_path: str | Path | None = None,
) -> None:
    """
    Save configuration data to disk in JSON format.

    Args:
        config: Configuration mapping.
        output_path: Destination path for the JSON file. Defaults to the
            user settings file.

    Raises:
        OSError: If writing to disk fails.
    """
    output = Path(output_path or SETTING_PATH).expanduser().resolve()
    output.parent.mkdir(parents=True, exist_ok=True)

    try:
        with output.open("w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
    except OSError as e:
        logger.error("Failed to write config JSON '%s': %s", output, e)
        raise

    logger.info("Configuration saved to JSON: %s", output)


def save_config_file(
    source_path: str | Path, output_path: str | Path | None = None
) -> None:
    """
    Convert a TOML/JSON configuration file into the user JSON settings file.

    Raises:
        FileNotFoundError: If the source file does not exist.
        ValueError: If the source file cannot be parsed.
        OSError: If saving the JSON output fails.
    """
    source = Path(source_path).expanduser().resolve()
    if not source.is_file():
        raise FileNotFoundError(f"Source file not found: {source}")

    save_config(_load_by_extension(source), output_path)
