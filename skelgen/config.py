"""Configuration loading for skelgen (.skelgen.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml

from .skeleton import DEFAULT_INDENT
from .transform import TransformOptions

CONFIG_FILENAME = ".skelgen.yml"


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class EmitConfig:
    """Output formatting settings."""

    indent: int = DEFAULT_INDENT


@dataclass
class SkelgenConfig:
    """Represents the settings defined in .skelgen.yml."""

    root: Path
    markers: List[str] = field(default_factory=list)
    symbols: List[str] = field(default_factory=list)
    emit: EmitConfig = field(default_factory=EmitConfig)

    def to_options(
        self,
        *,
        extra_markers: Iterable[str] = (),
        extra_symbols: Iterable[str] = (),
        indent: Optional[int] = None,
    ) -> TransformOptions:
        """Merge command-line additions into transform options."""
        return TransformOptions.create(
            markers=[*self.markers, *extra_markers],
            symbols=[*self.symbols, *extra_symbols],
            indent=self.emit.indent if indent is None else indent,
        )


def load_config(config_path: Path) -> SkelgenConfig:
    """Load configuration from disk."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return SkelgenConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    emit = EmitConfig()
    emit_data = _as_dict(data.get("emit"))
    if emit_data:
        indent = _as_int(emit_data.get("indent"))
        if indent is not None:
            if indent < 0:
                raise ConfigError("emit.indent must not be negative")
            emit.indent = indent

    return SkelgenConfig(
        root=root,
        markers=_as_str_list(data.get("markers")),
        symbols=_as_str_list(data.get("symbols")),
        emit=emit,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = ["CONFIG_FILENAME", "ConfigError", "EmitConfig", "SkelgenConfig", "load_config"]
