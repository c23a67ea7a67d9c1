from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

import yaml

from .errors import ConfigurationError
from .trail import DEFAULT_DECAY_RATE


class ColorAssignment(str, Enum):
    RANDOM = "random"
    ALTERNATING = "alternating"


@dataclass
class SimulationConfig:
    rows: int = 27
    columns: int = 48
    initial_population: int = 5
    color_assignment: ColorAssignment = ColorAssignment.RANDOM
    avoidance_range: float = 3.0
    decay_rate: float = DEFAULT_DECAY_RATE
    excitement_radius: float = 5.0
    highlight_radius: float = 5.0
    # Seconds between ticks; only the host driver reads this.
    tick_interval: float = 0.25
    seed: int = 42
    config_version: str = "v1"

    @staticmethod
    def from_yaml(path: Path) -> "SimulationConfig":
        data = yaml.safe_load(Path(path).read_text()) or {}
        return load_config(data)

    def validate(self) -> None:
        for name in ("rows", "columns", "initial_population"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(f"{name} must be an integer, got {value!r}")
        if self.rows <= 0 or self.columns <= 0:
            raise ConfigurationError(f"Grid dimensions must be positive, got {self.rows}x{self.columns}")
        if self.initial_population < 0:
            raise ConfigurationError(f"initial_population must be >= 0, got {self.initial_population}")
        try:
            ColorAssignment(self.color_assignment)
        except ValueError:
            raise ConfigurationError(f"Unknown color assignment policy: {self.color_assignment!r}") from None
        if self.avoidance_range < 0:
            raise ConfigurationError(f"avoidance_range must be >= 0, got {self.avoidance_range}")
        if not 0.0 < self.decay_rate <= 1.0:
            raise ConfigurationError(f"decay_rate must be in (0, 1], got {self.decay_rate}")
        if self.excitement_radius < 0 or self.highlight_radius < 0:
            raise ConfigurationError("excitement_radius and highlight_radius must be >= 0")
        if self.tick_interval <= 0:
            raise ConfigurationError(f"tick_interval must be positive, got {self.tick_interval}")


@dataclass
class AppConfig:
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    broadcast_interval: int = 1


def load_config(raw: dict) -> SimulationConfig:
    values = dict(raw)
    if "color_assignment" in values:
        try:
            values["color_assignment"] = ColorAssignment(values["color_assignment"])
        except ValueError:
            raise ConfigurationError(
                f"Unknown color assignment policy: {values['color_assignment']!r}"
            ) from None
    config = SimulationConfig(**values)
    config.validate()
    return config


def load_app_config(raw: dict) -> AppConfig:
    simulation = load_config(raw.get("simulation", {}))
    app_values = {k: v for k, v in raw.items() if k != "simulation"}
    return AppConfig(simulation=simulation, **app_values)
