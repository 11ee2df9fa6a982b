"""User configuration for the quickcompile CLI.

Settings live in a JSON file, by default ~/.config/quickcompile/config.json.
Set QUICKCOMPILE_CONFIG to use another path.

    {
      "compiler": {"optimization": "release", "check_overflow": true, ...},
      "logging": {"level": "WARNING"}
    }
"""

import json
import logging
import os
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from .core.models import CompilationOptions, OptimizationLevel


logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "QUICKCOMPILE_CONFIG"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class CompilerSettings(BaseModel):
    optimization: OptimizationLevel = OptimizationLevel.RELEASE
    check_overflow: bool = True
    warnings_as_errors: bool = False
    namespaces: list[str] = Field(default_factory=list)
    references: list[str] = Field(default_factory=list)

    def to_options(self) -> CompilationOptions:
        return CompilationOptions(
            check_overflow=self.check_overflow,
            optimization_level=self.optimization,
            warnings_as_errors=self.warnings_as_errors,
        )


class LoggingSettings(BaseModel):
    level: str = "WARNING"


class QuickCompileConfig(BaseModel):
    compiler: CompilerSettings = Field(default_factory=CompilerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def get_config_path() -> Path:
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return Path.home() / ".config" / "quickcompile" / "config.json"


def load_config(path: Path | None = None) -> QuickCompileConfig:
    """Load the config file, falling back to defaults when it does not exist."""
    path = path or get_config_path()
    if not path.exists():
        return QuickCompileConfig()
    with open(path) as f:
        data = json.load(f)
    return QuickCompileConfig.model_validate(data)


def save_config(config: QuickCompileConfig, path: Path | None = None) -> Path:
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config.model_dump(mode="json"), f, indent=2)
    logger.info(f"[Config] saved to {path}")
    return path


def _parse_bool(raw: str) -> bool:
    lowered = raw.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"Invalid boolean: '{raw}'")


def set_config_value(config: QuickCompileConfig, key: str, raw: str) -> QuickCompileConfig:
    """Return a copy of `config` with a dotted key set from a string value.

    List settings take comma-separated values.

    Raises:
        KeyError: Unknown key
        ValueError: Value cannot be converted
    """
    section_name, _, field_name = key.partition(".")
    section = getattr(config, section_name, None)
    if not isinstance(section, BaseModel) or field_name not in type(section).model_fields:
        raise KeyError(f"Unknown key: '{key}'")

    current = getattr(section, field_name)
    if isinstance(current, bool):
        value = _parse_bool(raw)
    elif isinstance(current, list):
        value = [item.strip() for item in raw.split(",") if item.strip()]
    else:
        value = raw

    data = section.model_dump()
    data[field_name] = value
    try:
        updated = type(section).model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid value for '{key}': {raw}") from e
    return config.model_copy(update={section_name: updated})
