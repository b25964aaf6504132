from __future__ import annotations

import json
import tomllib
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Mapping, TypeVar, get_type_hints

TConfig = TypeVar("TConfig", bound="ConfigBase")

_SCALAR_TYPES: dict[Any, tuple[type, ...]] = {
    int: (int,),
    float: (int, float),
    bool: (bool,),
    str: (str,),
}


class ConfigBase:
    """Mixin for flat dataclass configs read from .toml or .json files."""

    @classmethod
    def from_file(cls: type[TConfig], config_path: str | Path) -> TConfig:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        if path.suffix == ".toml":
            data = tomllib.loads(path.read_text())
        elif path.suffix == ".json":
            data = json.loads(path.read_text())
        else:
            raise ValueError(
                f"Unsupported config format: {path.suffix}. Use .toml or .json."
            )
        if not isinstance(data, Mapping):
            raise ValueError("Config must parse to a mapping at the top level.")
        return cls.from_dict(dict(data))

    @classmethod
    def from_dict(cls: type[TConfig], data: Mapping[str, Any]) -> TConfig:
        field_names = {f.name for f in fields(cls)}
        type_hints = get_type_hints(cls)
        unknown = [key for key in data if key not in field_names]
        if unknown:
            keys = ", ".join(sorted(unknown))
            raise ValueError(f"Unknown config field(s): {keys}")

        kwargs = {
            name: cls._check_type(type_hints.get(name), value, path=name)
            for name, value in data.items()
        }
        cfg = cls(**kwargs)  # type: ignore[call-arg]
        cfg.validate()
        return cfg

    def with_updates(self: TConfig, updates: Mapping[str, Any]) -> TConfig:
        merged = asdict(self)  # type: ignore[call-overload]
        merged.update(updates)
        return type(self).from_dict(merged)

    def validate(self) -> None:
        """Hook for cross-field checks; raise ``ValueError`` on bad values."""

    @classmethod
    def _check_type(cls, field_type: Any, incoming: Any, *, path: str) -> Any:
        allowed = _SCALAR_TYPES.get(field_type)
        if allowed is None:
            return incoming
        # bool is an int subclass; only accept it where a bool is declared.
        if isinstance(incoming, bool) and field_type is not bool:
            raise ValueError(f"Expected {field_type.__name__} for `{path}`, got bool.")
        if not isinstance(incoming, allowed):
            raise ValueError(
                f"Expected {field_type.__name__} for `{path}`, got {type(incoming).__name__}."
            )
        return incoming
