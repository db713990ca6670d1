"""
Process-wide engine configuration.

Holds the trigonometric mode switch and the pydantic model used to
configure the engine from code or from environment variables.

The mode switch and default limits are plain module state. Change them
during initialization, before expressions are evaluated concurrently.
"""

from __future__ import annotations

import logging
import os
from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

from .limits import ExpressionLimits, set_default_limits

logger = logging.getLogger("mathengine.config")

ENV_VAR_TRIG_MODE = "MATH_ENGINE_TRIG_MODE"
ENV_VAR_MAX_EXPRESSION_LENGTH = "MATH_ENGINE_MAX_EXPRESSION_LENGTH"
ENV_VAR_MAX_AST_DEPTH = "MATH_ENGINE_MAX_AST_DEPTH"
ENV_VAR_MAX_AST_NODES = "MATH_ENGINE_MAX_AST_NODES"
ENV_VAR_MAX_FUNCTION_ARGS = "MATH_ENGINE_MAX_FUNCTION_ARGS"
ENV_VAR_MAX_SUM_ITERATIONS = "MATH_ENGINE_MAX_SUM_ITERATIONS"

# Environment variable -> EngineConfig field
_ENV_FIELDS: dict[str, str] = {
    ENV_VAR_TRIG_MODE: "trigonometric_mode",
    ENV_VAR_MAX_EXPRESSION_LENGTH: "max_expression_length",
    ENV_VAR_MAX_AST_DEPTH: "max_ast_depth",
    ENV_VAR_MAX_AST_NODES: "max_ast_nodes",
    ENV_VAR_MAX_FUNCTION_ARGS: "max_function_args",
    ENV_VAR_MAX_SUM_ITERATIONS: "max_sum_iterations",
}


class TrigonometricMode(str, Enum):
    """How trigonometric functions interpret their argument."""

    RADIAN = "radian"
    DEGREE = "degree"


_trigonometric_mode = TrigonometricMode.RADIAN


def get_trigonometric_mode() -> TrigonometricMode:
    """Returns the active trigonometric mode."""
    return _trigonometric_mode


def set_trigonometric_mode(mode: TrigonometricMode | str) -> None:
    """
    Selects radian or degree interpretation for all subsequent evaluations.

    Raises:
        ValueError: If mode is not a known trigonometric mode
    """
    global _trigonometric_mode
    _trigonometric_mode = TrigonometricMode(mode)
    logger.debug("trigonometric_mode_set", extra={"mode": _trigonometric_mode.value})


class EngineConfig(BaseModel):
    """
    Configuration for the expression engine.

    Limit fields mirror ExpressionLimits.
    """

    model_config = ConfigDict(extra="forbid")

    trigonometric_mode: TrigonometricMode = TrigonometricMode.RADIAN

    max_expression_length: int = Field(default=4096, gt=0)
    max_ast_depth: int = Field(default=512, gt=0)
    max_ast_nodes: int = Field(default=4096, gt=0)
    max_function_args: int = Field(default=64, ge=0)
    max_sum_iterations: Optional[int] = Field(default=None, ge=0)

    def to_limits(self) -> ExpressionLimits:
        return ExpressionLimits(
            max_expression_length=self.max_expression_length,
            max_ast_depth=self.max_ast_depth,
            max_ast_nodes=self.max_ast_nodes,
            max_function_args=self.max_function_args,
            max_sum_iterations=self.max_sum_iterations,
        )

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> EngineConfig:
        """Builds a config from MATH_ENGINE_* environment variables."""
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for env_var, field_name in _ENV_FIELDS.items():
            raw = environ.get(env_var)
            if raw is not None and raw.strip():
                values[field_name] = raw.strip().lower()
        return cls.model_validate(values)


def configure(
    config: EngineConfig | Mapping[str, Any] | None = None,
) -> EngineConfig:
    """
    Applies an engine configuration process-wide.

    Args:
        config: An EngineConfig, a mapping of its fields, or None to read
            the configuration from the environment

    Returns:
        The applied configuration

    Raises:
        pydantic.ValidationError: If the configuration is invalid
    """
    if config is None:
        resolved = EngineConfig.from_env()
    elif isinstance(config, EngineConfig):
        resolved = config
    else:
        resolved = EngineConfig.model_validate(dict(config))

    set_trigonometric_mode(resolved.trigonometric_mode)
    set_default_limits(resolved.to_limits())
    logger.info("engine_configured", extra={"config": resolved.model_dump(mode="json")})
    return resolved
