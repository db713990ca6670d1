"""
Function and constant registry.

The process-wide DEFAULT_REGISTRY is seeded with the built-ins once, at
import time, and afterwards only grows through explicit registration.
There is no way to unregister a name.

Registration takes a lock, lookups do not. Register custom functions and
constants during initialization, before expressions are parsed or
evaluated concurrently.
"""

import logging
import re
import threading
from typing import Dict, List, Optional

from .builtins import (
    BUILTIN_CONSTANTS,
    BUILTIN_FUNCTIONS,
    VARIADIC,
    ConstantDefinition,
    FunctionDefinition,
    FunctionEvaluator,
    FunctionRenderer,
)
from .errors import DuplicateNameError, InvalidArgumentError

logger = logging.getLogger("mathengine.registry")

# Names must be reachable through the tokenizer's identifier rule
_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9]*$")


def _validate_name(name: str) -> None:
    if not name:
        raise InvalidArgumentError(name, "name must not be empty")
    if not _NAME_PATTERN.match(name):
        raise InvalidArgumentError(
            name, "name must start with a letter and contain only letters and digits"
        )


class Registry:
    """Registry of functions and constants available to expressions."""

    def __init__(self) -> None:
        self._functions: Dict[str, FunctionDefinition] = {}
        self._constants: Dict[str, ConstantDefinition] = {}
        self._lock = threading.RLock()

    def register_function(
        self,
        name: str,
        arity: int,
        evaluate: FunctionEvaluator,
        render: Optional[FunctionRenderer] = None,
    ) -> FunctionDefinition:
        """
        Registers a new function.

        Args:
            name: Function name as written in expressions
            arity: Fixed argument count (>= 0) or VARIADIC (-1)
            evaluate: Called as evaluate(ctx, *args) with unevaluated argument nodes
            render: Optional renderer called as render(ctx, *args)

        Returns:
            The registered definition

        Raises:
            InvalidArgumentError: If the name, arity or callables are invalid
            DuplicateNameError: If a function with this name already exists
        """
        _validate_name(name)
        if isinstance(arity, bool) or not isinstance(arity, int) or arity < VARIADIC:
            raise InvalidArgumentError(
                name, f"arity must be {VARIADIC} (variadic), 0 or a positive integer"
            )
        if not callable(evaluate):
            raise InvalidArgumentError(name, "evaluate must be callable")
        if render is not None and not callable(render):
            raise InvalidArgumentError(name, "render must be callable")

        definition = FunctionDefinition(name, arity, evaluate, render)
        with self._lock:
            if name in self._functions:
                raise DuplicateNameError(name, "function")
            self._functions[name] = definition

        logger.debug("function_registered", extra={"function": name, "arity": arity})
        return definition

    def register_constant(
        self,
        name: str,
        value: float,
        display_form: Optional[str] = None,
    ) -> ConstantDefinition:
        """
        Registers a new constant.

        Args:
            name: Constant name as written in expressions
            value: Numeric value
            display_form: Typeset form, defaults to the name

        Returns:
            The registered definition

        Raises:
            InvalidArgumentError: If the name or value is invalid
            DuplicateNameError: If a constant with this name already exists
        """
        _validate_name(name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidArgumentError(name, "value must be a number")

        definition = ConstantDefinition(
            name, float(value), name if display_form is None else display_form
        )
        with self._lock:
            if name in self._constants:
                raise DuplicateNameError(name, "constant")
            self._constants[name] = definition

        logger.debug("constant_registered", extra={"constant": name, "value": value})
        return definition

    def get_function(self, name: str) -> Optional[FunctionDefinition]:
        return self._functions.get(name)

    def get_constant(self, name: str) -> Optional[ConstantDefinition]:
        return self._constants.get(name)

    def has_function(self, name: str) -> bool:
        return name in self._functions

    def has_constant(self, name: str) -> bool:
        return name in self._constants

    def function_names(self) -> List[str]:
        return sorted(self._functions)

    def constant_names(self) -> List[str]:
        return sorted(self._constants)

    def copy(self) -> "Registry":
        """Returns an independent registry with the same entries."""
        clone = Registry()
        with self._lock:
            clone._functions.update(self._functions)
            clone._constants.update(self._constants)
        return clone


def create_default_registry() -> Registry:
    """Creates a registry seeded with the built-in functions and constants."""
    registry = Registry()
    registry._functions.update(BUILTIN_FUNCTIONS)
    registry._constants.update(BUILTIN_CONSTANTS)
    return registry


# Process-wide registry used when no registry is passed explicitly.
DEFAULT_REGISTRY = create_default_registry()


def register_function(
    name: str,
    arity: int,
    evaluate: FunctionEvaluator,
    render: Optional[FunctionRenderer] = None,
) -> FunctionDefinition:
    """Registers a function in the process-wide registry."""
    return DEFAULT_REGISTRY.register_function(name, arity, evaluate, render)


def register_constant(
    name: str,
    value: float,
    display_form: Optional[str] = None,
) -> ConstantDefinition:
    """Registers a constant in the process-wide registry."""
    return DEFAULT_REGISTRY.register_constant(name, value, display_form)
