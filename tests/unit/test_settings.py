"""Tests for configuration models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from intersector.config import (
    DEFAULT_TOLERANCES,
    EPSILON,
    BatchConfig,
    IntersectorSettings,
    LoggingConfig,
    ToleranceConfig,
    get_default_settings,
)


class TestToleranceConfig:
    def test_defaults(self) -> None:
        config = ToleranceConfig()
        assert config.tolerance == 1e-6
        assert config.accuracy == 6
        assert config.squared_snap_distance == 1e-15
        assert config.max_depth == 64

    def test_epsilon_follows_max_depth(self) -> None:
        assert ToleranceConfig().epsilon == 2.0**-65 == EPSILON
        assert ToleranceConfig(max_depth=10).epsilon == 2.0**-11

    @pytest.mark.parametrize(
        "overrides",
        [
            {"tolerance": 0},
            {"tolerance": 0.5},
            {"accuracy": 0},
            {"max_depth": 2},
            {"squared_snap_distance": -1.0},
            {"subdivision_flatness": 0},
        ],
    )
    def test_rejects_invalid_values(self, overrides: dict) -> None:
        with pytest.raises(ValidationError):
            ToleranceConfig(**overrides)

    def test_round_trip_through_dump(self) -> None:
        config = ToleranceConfig(tolerance=1e-8, max_depth=32)
        assert ToleranceConfig(**config.model_dump()) == config

    def test_module_default(self) -> None:
        assert DEFAULT_TOLERANCES == ToleranceConfig()


class TestSettings:
    def test_default_settings(self) -> None:
        settings = get_default_settings()
        assert isinstance(settings, IntersectorSettings)
        assert settings.batch.max_workers is None
        assert settings.logging.log_file is None
        assert settings.logging.log_level == "WARNING"
        assert settings.logging.file_log_level == "DEBUG"

    def test_nested_overrides(self, tmp_path: Path) -> None:
        settings = IntersectorSettings(
            tolerances=ToleranceConfig(tolerance=1e-9),
            batch=BatchConfig(max_workers=4),
            logging=LoggingConfig(log_file=tmp_path / "run.log"),
        )
        assert settings.tolerances.tolerance == 1e-9
        assert settings.batch.max_workers == 4
        assert settings.logging.log_file == tmp_path / "run.log"

    def test_settings_are_independent(self) -> None:
        first = get_default_settings()
        second = get_default_settings()
        assert first is not second
        assert first.tolerances is not second.tolerances
