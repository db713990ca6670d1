"""
Tests for engine configuration.
"""

import pytest
from pydantic import ValidationError

from mathengine import (
    DEFAULT_EXPRESSION_LIMITS,
    EngineConfig,
    ExpressionLimits,
    LimitExceededError,
    TrigonometricMode,
    configure,
    get_default_limits,
    get_trigonometric_mode,
    parse_and_evaluate,
    set_default_limits,
    set_trigonometric_mode,
)
from mathengine.config import (
    ENV_VAR_MAX_AST_DEPTH,
    ENV_VAR_MAX_SUM_ITERATIONS,
    ENV_VAR_TRIG_MODE,
)


@pytest.fixture(autouse=True)
def restore_defaults():
    yield
    set_trigonometric_mode(TrigonometricMode.RADIAN)
    set_default_limits(None)


class TestEngineConfig:
    """Tests for the configuration model."""

    def test_defaults_match_default_limits(self):
        config = EngineConfig()
        assert config.trigonometric_mode == TrigonometricMode.RADIAN
        assert config.to_limits() == DEFAULT_EXPRESSION_LIMITS

    def test_rejects_unknown_fields(self):
        with pytest.raises(ValidationError):
            EngineConfig(max_depth=3)  # type: ignore[call-arg]

    def test_rejects_non_positive_limits(self):
        with pytest.raises(ValidationError):
            EngineConfig(max_ast_depth=0)

    def test_sum_iterations_are_unbounded_by_default(self):
        config = EngineConfig()
        assert config.max_sum_iterations is None
        assert config.max_ast_depth == 512

    def test_rejects_unknown_mode(self):
        with pytest.raises(ValidationError):
            EngineConfig(trigonometric_mode="gradian")  # type: ignore[arg-type]


class TestFromEnv:
    """Tests for environment-based configuration."""

    def test_reads_values(self):
        config = EngineConfig.from_env(
            {ENV_VAR_TRIG_MODE: " Degree ", ENV_VAR_MAX_AST_DEPTH: "64"}
        )
        assert config.trigonometric_mode == TrigonometricMode.DEGREE
        assert config.max_ast_depth == 64

    def test_reads_sum_iteration_bound(self):
        config = EngineConfig.from_env({ENV_VAR_MAX_SUM_ITERATIONS: "1000"})
        assert config.to_limits().max_sum_iterations == 1000

    def test_ignores_blank_values(self):
        config = EngineConfig.from_env({ENV_VAR_TRIG_MODE: "  "})
        assert config.trigonometric_mode == TrigonometricMode.RADIAN

    def test_ignores_unrelated_variables(self):
        config = EngineConfig.from_env({"PATH": "/usr/bin"})
        assert config == EngineConfig()

    def test_rejects_invalid_number(self):
        with pytest.raises(ValidationError):
            EngineConfig.from_env({ENV_VAR_MAX_AST_DEPTH: "deep"})


class TestConfigure:
    """Tests for applying configuration process-wide."""

    def test_applies_mode_and_limits(self):
        applied = configure(
            EngineConfig(trigonometric_mode=TrigonometricMode.DEGREE, max_ast_nodes=3)
        )
        assert applied.max_ast_nodes == 3
        assert get_trigonometric_mode() is TrigonometricMode.DEGREE
        assert get_default_limits().max_ast_nodes == 3
        with pytest.raises(LimitExceededError):
            parse_and_evaluate("1+2+3")

    def test_accepts_mapping(self):
        configure({"trigonometric_mode": "degree"})
        assert parse_and_evaluate("sin(90)") == pytest.approx(1.0)

    def test_rejects_invalid_mapping(self):
        with pytest.raises(ValidationError):
            configure({"unknown": 1})
        assert get_default_limits() == DEFAULT_EXPRESSION_LIMITS

    def test_reads_environment_when_not_given(self, monkeypatch):
        monkeypatch.setenv(ENV_VAR_TRIG_MODE, "degree")
        monkeypatch.setenv(ENV_VAR_MAX_AST_DEPTH, "16")
        configure()
        assert get_trigonometric_mode() is TrigonometricMode.DEGREE
        assert get_default_limits().max_ast_depth == 16

    def test_explicit_limits_override_defaults(self):
        configure({"max_ast_nodes": 3})
        assert parse_and_evaluate("1+2+3", limits=ExpressionLimits()) == 6.0
