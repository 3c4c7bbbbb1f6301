"""
Libreconomy Configuration

Loads configuration from environment variables with sensible defaults.

The evidence weight (w) and decay factor (d) have no canonical calibration, so
they are tunable constants here rather than hard-coded invariants.
"""

import os
from typing import Any, Mapping, Optional, Type, TypeVar
from pathlib import Path
from dotenv import load_dotenv
from pydantic import BaseModel, ValidationError

from .errors import ConfigurationError

# Load .env file if it exists
load_dotenv()

ModelT = TypeVar("ModelT", bound=BaseModel)


class Config:
    """Application configuration loaded from environment variables."""

    # Reputation updates
    # Evidence added to alpha (Positive) or beta (Negative) per event
    EVIDENCE_WEIGHT: float = float(os.getenv("LIBRECONOMY_EVIDENCE_WEIGHT", "1.0"))
    # Symmetric nudge applied to both parameters on Neutral outcomes (0 = no-op)
    NEUTRAL_NUDGE: float = float(os.getenv("LIBRECONOMY_NEUTRAL_NUDGE", "0.0"))
    # Multiplier applied to w for second-hand reports
    HEARSAY_WEIGHT: float = float(os.getenv("LIBRECONOMY_HEARSAY_WEIGHT", "1.0"))

    # Reputation decay
    DECAY_FACTOR: float = float(os.getenv("LIBRECONOMY_DECAY_FACTOR", "0.99"))
    DECAY_INTERVAL: int = int(os.getenv("LIBRECONOMY_DECAY_INTERVAL", "1"))

    # Decision engine
    SEARCH_RADIUS: float = float(os.getenv("LIBRECONOMY_SEARCH_RADIUS", "1000"))
    MAX_NEARBY_AGENTS: int = int(os.getenv("LIBRECONOMY_MAX_NEARBY_AGENTS", "10"))

    # Simulation Configuration
    DEFAULT_TICK_COUNT: int = int(os.getenv("DEFAULT_TICK_COUNT", "50"))

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    SCENARIOS_DIR: Path = PROJECT_ROOT / "examples" / "scenarios"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise ConfigurationError on bad values."""
        if cls.EVIDENCE_WEIGHT <= 0:
            raise ConfigurationError(
                "LIBRECONOMY_EVIDENCE_WEIGHT must be positive",
                field="EVIDENCE_WEIGHT",
                value=cls.EVIDENCE_WEIGHT,
            )

        if cls.NEUTRAL_NUDGE < 0:
            raise ConfigurationError(
                "LIBRECONOMY_NEUTRAL_NUDGE must be non-negative",
                field="NEUTRAL_NUDGE",
                value=cls.NEUTRAL_NUDGE,
            )

        if cls.HEARSAY_WEIGHT <= 0:
            raise ConfigurationError(
                "LIBRECONOMY_HEARSAY_WEIGHT must be positive",
                field="HEARSAY_WEIGHT",
                value=cls.HEARSAY_WEIGHT,
            )

        if not 0 < cls.DECAY_FACTOR <= 1:
            raise ConfigurationError(
                "LIBRECONOMY_DECAY_FACTOR must lie in (0, 1]",
                field="DECAY_FACTOR",
                value=cls.DECAY_FACTOR,
            )

        if cls.DECAY_INTERVAL < 1:
            raise ConfigurationError(
                "LIBRECONOMY_DECAY_INTERVAL must be at least 1 tick",
                field="DECAY_INTERVAL",
                value=cls.DECAY_INTERVAL,
            )

        if cls.SEARCH_RADIUS <= 0:
            raise ConfigurationError(
                "LIBRECONOMY_SEARCH_RADIUS must be positive",
                field="SEARCH_RADIUS",
                value=cls.SEARCH_RADIUS,
            )

        if cls.MAX_NEARBY_AGENTS < 1:
            raise ConfigurationError(
                "LIBRECONOMY_MAX_NEARBY_AGENTS must be at least 1",
                field="MAX_NEARBY_AGENTS",
                value=cls.MAX_NEARBY_AGENTS,
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Libreconomy Configuration:",
            f"  Evidence weight (w): {cls.EVIDENCE_WEIGHT}",
            f"  Neutral nudge: {cls.NEUTRAL_NUDGE}",
            f"  Hearsay weight: {cls.HEARSAY_WEIGHT}",
            f"  Decay factor (d): {cls.DECAY_FACTOR} every {cls.DECAY_INTERVAL} tick(s)",
            f"  Search radius: {cls.SEARCH_RADIUS}",
            f"  Max nearby agents: {cls.MAX_NEARBY_AGENTS}",
            f"  Default Ticks: {cls.DEFAULT_TICK_COUNT}",
        ]
        return "\n".join(lines)


def parse_config(model_cls: Type[ModelT], data: Optional[Mapping[str, Any]] = None) -> ModelT:
    """Validate ``data`` into ``model_cls``, reporting failures as ConfigurationError.

    pydantic's ValidationError is converted so callers only ever need to catch
    one exception type when loading configuration.
    """
    try:
        return model_cls.model_validate(dict(data or {}))
    except ValidationError as exc:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(part) for part in first.get("loc", ())) or None
        raise ConfigurationError(
            f"Invalid {model_cls.__name__}: {first.get('msg', exc)}",
            field=field,
            value=first.get("input"),
        ) from exc
