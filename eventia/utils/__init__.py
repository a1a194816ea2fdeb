from pathlib import Path
import os
import tomllib
import logging.config

from . import config

__all__ = ["config"]

ENV_LOGGING_CONFIG = "EVENTIA_LOGGING_CONFIG"


def _setup_logging(config_path: str | Path | None = None) -> bool:
    """
    Apply a `logging.config.dictConfig` TOML file.

    Looked up from `config_path`, then `EVENTIA_LOGGING_CONFIG`, then
    `./logging.toml`. Returns False when none is found.
    """
    if config_path is None and (env := os.environ.get(ENV_LOGGING_CONFIG)):
        config_path = env
    if config_path is not None:
        file = Path(config_path)
        if not file.is_file():
            raise FileNotFoundError(f"Logging config not found: {file}")
    elif (Path.cwd() / "logging.toml").is_file():
        file = Path.cwd() / "logging.toml"
    else:
        return False
    try:
        logging.config.dictConfig(tomllib.loads(file.read_text()))
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid logging config: {file}\n{e}") from e
    return True
