"""Configuration settings for Intersector."""

from pathlib import Path

from pydantic import BaseModel, Field

TOLERANCE = 1e-6
ACCURACY = 6
SQUARED_SNAP_DISTANCE = 1e-15
MAX_DEPTH = 64
EPSILON = 2.0 ** (-MAX_DEPTH - 1)


class ToleranceConfig(BaseModel):
    """Numerical tolerances shared by the polynomial and intersection layers.

    The polynomial engine and every intersection routine must see the same
    values, otherwise near-degenerate cases flip between tangent/coincident
    and clearly separated depending on which layer classifies them.
    """

    tolerance: float = Field(
        default=TOLERANCE,
        gt=0.0,
        le=1e-2,
        description="Zero threshold for coefficients, discriminants and residuals",
    )
    accuracy: int = Field(
        default=ACCURACY,
        ge=1,
        le=15,
        description="Decimal digits of accuracy targeted by bisection",
    )
    squared_snap_distance: float = Field(
        default=SQUARED_SNAP_DISTANCE,
        ge=0.0,
        description="Squared distance under which two intersection points are the same",
    )
    parameter_slack: float = Field(
        default=1e-9,
        ge=0.0,
        le=1e-3,
        description="Slack on the [0, 1] range of line segment parameters",
    )
    curve_parameter_slack: float = Field(
        default=1e-6,
        ge=0.0,
        le=1e-2,
        description="Slack on Bezier parameters and line bounding boxes",
    )
    max_depth: int = Field(
        default=MAX_DEPTH,
        ge=8,
        le=128,
        description="Maximum recursion depth of the nearest-point root finder",
    )
    subdivision_flatness: float = Field(
        default=1e-10,
        gt=0.0,
        description="Control polygon flatness at which curve pieces are treated as chords",
    )
    max_subdivision_depth: int = Field(
        default=48,
        ge=4,
        le=128,
        description="Maximum recursion depth of curve/curve subdivision",
    )

    @property
    def epsilon(self) -> float:
        """Flatness target of the nearest-point root finder."""
        return 2.0 ** (-self.max_depth - 1)


class BatchConfig(BaseModel):
    """Configuration for batch intersection runs."""

    max_workers: int | None = Field(
        default=None,
        description="Max worker processes (None = auto, 1 = run in-process)",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class IntersectorSettings(BaseModel):
    """Main application settings."""

    tolerances: ToleranceConfig = Field(default_factory=ToleranceConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


DEFAULT_TOLERANCES = ToleranceConfig()


def get_default_settings() -> IntersectorSettings:
    """Get default application settings."""
    return IntersectorSettings()
