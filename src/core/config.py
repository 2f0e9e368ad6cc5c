"""
Configuration of a blind phase.

The limits used to be module level constants. They live on a (frozen) config object instead,
so different blind phase variants can exist side by side (e.g. in tests).
"""

import os
from dataclasses import dataclass
from typing import Self

from src.core.exceptions import ConfigurationError

INITIAL_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"
PROMOTION_LETTERS = ("q", "r", "b", "n")

ENV_PREFIX = "BLINDCHESS_"
DATABASE_URL = os.environ.get(f"{ENV_PREFIX}DATABASE_URL", "sqlite:///blindchess.db")


@dataclass(frozen=True)
class BlindPhaseConfig:
    max_moves: int = 5
    max_per_piece: int = 2
    # seconds
    processing_release_delay: float = 0.15
    busy_release_delay: float = 1.0
    submit_cooldown: float = 2.0
    default_promotion: str = "q"
    starting_fen: str = INITIAL_FEN

    def __post_init__(self) -> None:
        if self.max_moves < 1 or self.max_per_piece < 1:
            raise ConfigurationError(
                f"Move limits must be positive. Got {self.max_moves=}, {self.max_per_piece=}"
            )
        if self.default_promotion not in PROMOTION_LETTERS:
            raise ConfigurationError(
                f"Cannot promote to {self.default_promotion!r}. Pick one of {','.join(PROMOTION_LETTERS)}"
            )
        delays = (
            self.processing_release_delay,
            self.busy_release_delay,
            self.submit_cooldown,
        )
        if any(delay < 0 for delay in delays):
            raise ConfigurationError("Delays cannot be negative.")

    @classmethod
    def from_env(cls) -> Self:
        """Defaults, overridden by BLINDCHESS_* environment variables where present."""
        overrides: dict[str, int | float | str] = {}
        casts = {
            "max_moves": int,
            "max_per_piece": int,
            "processing_release_delay": float,
            "busy_release_delay": float,
            "submit_cooldown": float,
            "default_promotion": str,
            "starting_fen": str,
        }
        for field_name, cast in casts.items():
            raw = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
            if raw is None:
                continue
            try:
                overrides[field_name] = cast(raw)
            except ValueError as e:
                raise ConfigurationError(
                    f"Cannot read {ENV_PREFIX}{field_name.upper()}={raw!r}"
                ) from e
        return cls(**overrides)
