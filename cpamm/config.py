"""
Runtime settings for the AMM core.

Settings can be built in-process or loaded from a YAML file:

    minimum_liquidity: 100
    log_level: INFO
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

import yaml


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class AmmSettings:
    minimum_liquidity: int = 100
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not isinstance(self.minimum_liquidity, int) or isinstance(self.minimum_liquidity, bool):
            raise TypeError("minimum_liquidity must be an int")
        if self.minimum_liquidity <= 0:
            raise ValueError(f"minimum_liquidity must be positive: {self.minimum_liquidity}")
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {LOG_LEVELS}: {self.log_level!r}")
        object.__setattr__(self, "log_level", self.log_level.upper())


def settings_from_mapping(obj: Mapping[str, Any]) -> AmmSettings:
    if not isinstance(obj, Mapping):
        raise TypeError("settings must be a mapping")
    known = {f.name for f in fields(AmmSettings)}
    unknown = sorted(set(obj) - known)
    if unknown:
        raise ValueError(f"unknown settings: {', '.join(map(str, unknown))}")
    return AmmSettings(**dict(obj))


def load_settings(path: str | Path) -> AmmSettings:
    """Load settings from a YAML mapping; an empty file yields the defaults."""
    obj = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    if obj is None:
        return AmmSettings()
    return settings_from_mapping(obj)
