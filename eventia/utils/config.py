from typing import Any, Literal
import tomllib
from pathlib import Path
import os

import dotenv
from pydantic import BaseModel, Field, ValidationError

ENV_PREFIX = "EVENTIA_"
ENV_CONFIG_FILE = "EVENTIA_CONFIG"


class EmitterConfig(BaseModel):
    default_timeout_ms: float | None = Field(default=None, ge=0)
    """Timeout used by `wait()` when the caller passes none. `None` or 0 waits forever."""
    after_destroy: Literal["ignore", "raise"] = "ignore"
    """What `on()`/`once()` do on a destroyed emitter."""
    validate_payloads: bool = True
    """Run payloads through the attached schema on `emit()`."""


def __read_toml(file: Path) -> dict[str, Any]:
    assert file.exists(), f"Config file not found: {file}"
    data = tomllib.loads(file.read_text())
    section = data.get("emitter", {})
    if not isinstance(section, dict):
        raise ValueError(f"Invalid config file: {file}\n[emitter] must be a table")
    return section


def __read_env() -> dict[str, Any]:
    values: dict[str, Any] = {}
    for name in EmitterConfig.model_fields:
        if (v := os.environ.get(ENV_PREFIX + name.upper())) is None:
            continue
        if name == "default_timeout_ms" and v.strip().lower() in ("", "none"):
            values[name] = None
        else:
            values[name] = v
    return values


def load_config(config_path: str | Path | None = None) -> EmitterConfig:
    """Load emitter settings from a TOML file and `EVENTIA_*` environment variables (env wins)."""
    dotenv.load_dotenv()
    values: dict[str, Any] = {}
    if config_path is None and (path := os.environ.get(ENV_CONFIG_FILE)):
        config_path = path
    if config_path is not None:
        config_path = Path(config_path) if isinstance(config_path, str) else config_path
        assert config_path.suffix == ".toml", "Emitter config file must be a .toml file"
        values.update(__read_toml(config_path.resolve()))
    values.update(__read_env())
    try:
        return EmitterConfig(**values)
    except ValidationError as e:
        raise ValueError(f"Invalid emitter config: {config_path or 'env'}\n{repr(e)}") from e


__all__ = ["EmitterConfig", "load_config"]
