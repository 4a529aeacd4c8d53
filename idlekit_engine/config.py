"""
Engine configuration.

Defaults are overridable from a JSON file and from ``IDLEKIT_*`` environment
variables (a ``.env`` file is honoured by the CLI through python-dotenv).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, Optional

DEFAULT_MAX_STEPS_PER_DISPATCH = 10_000
DEFAULT_MAX_LOOP_ITERATIONS = 1_000


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


@dataclass
class EngineConfig:
    """Runtime knobs that are not part of a game template."""
    
    tick_rate_ms: Optional[int] = None  # None: use the template's tickRate
    max_steps_per_dispatch: int = DEFAULT_MAX_STEPS_PER_DISPATCH
    max_loop_iterations: int = DEFAULT_MAX_LOOP_ITERATIONS
    seed: Optional[int] = None
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    log_file: Optional[str] = None
    
    def __post_init__(self):
        if self.tick_rate_ms is not None and self.tick_rate_ms < 10:
            raise ValueError("tick_rate_ms must be >= 10")
        if self.max_steps_per_dispatch < 1:
            raise ValueError("max_steps_per_dispatch must be >= 1")
        if self.max_loop_iterations < 0:
            raise ValueError("max_loop_iterations must be >= 0")
    
    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EngineConfig":
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
    
    def to_dict(self) -> dict[str, Any]:
        return {
            "tick_rate_ms": self.tick_rate_ms,
            "max_steps_per_dispatch": self.max_steps_per_dispatch,
            "max_loop_iterations": self.max_loop_iterations,
            "seed": self.seed,
            "log_level": self.log_level,
            "log_file": self.log_file,
        }
    
    @classmethod
    def from_env(cls, base: "EngineConfig | None" = None) -> "EngineConfig":
        """Apply ``IDLEKIT_*`` environment overrides on top of ``base``."""
        data = (base or cls()).to_dict()
        overrides = {
            "tick_rate_ms": _env_int("IDLEKIT_TICK_RATE"),
            "seed": _env_int("IDLEKIT_SEED"),
            "max_steps_per_dispatch": _env_int("IDLEKIT_MAX_STEPS"),
            "max_loop_iterations": _env_int("IDLEKIT_MAX_LOOP_ITERATIONS"),
        }
        data.update({k: v for k, v in overrides.items() if v is not None})
        if level := os.environ.get("IDLEKIT_LOG_LEVEL"):
            data["log_level"] = level.upper()
        if log_file := os.environ.get("IDLEKIT_LOG_FILE"):
            data["log_file"] = log_file
        return cls.from_dict(data)
    
    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "EngineConfig":
        """Load from a JSON file (if given and present), then apply the environment.
        
        Args:
            config_path: Optional path to a JSON config file
            
        Returns:
            EngineConfig instance
        """
        base = cls()
        if config_path is not None:
            path = Path(config_path)
            if path.exists():
                with open(path, "r", encoding="utf-8") as f:
                    base = cls.from_dict(json.load(f))
        return cls.from_env(base)
    
    def save(self, config_path: str | Path) -> Path:
        path = Path(config_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        return path
