"""
Tests for the function and constant registry.
"""

import math
import threading

import pytest

from mathengine import (
    DEFAULT_REGISTRY,
    VARIADIC,
    DuplicateNameError,
    InvalidArgumentError,
    RegistrationError,
    Registry,
    UnknownNameError,
    create_default_registry,
    parse_and_evaluate,
    parse_expression,
    register_constant,
    register_function,
    render,
)


def constant_one(ctx):
    return 1.0


class TestDefaultRegistry:
    """Tests for the seeded registries."""

    def test_default_registry_has_builtins(self):
        assert DEFAULT_REGISTRY.has_function("sin")
        assert DEFAULT_REGISTRY.has_constant("pi")

    def test_created_registries_are_independent(self):
        first = create_default_registry()
        second = create_default_registry()
        first.register_constant("tau", 2 * math.pi)
        assert first.has_constant("tau")
        assert not second.has_constant("tau")

    def test_empty_registry(self):
        registry = Registry()
        assert registry.function_names() == []
        with pytest.raises(UnknownNameError):
            parse_expression("pi", registry)

    def test_names_are_sorted(self):
        names = create_default_registry().constant_names()
        assert names == ["e", "infty", "pi"]

    def test_copy_is_independent(self):
        registry = create_default_registry()
        clone = registry.copy()
        clone.register_function("one", 0, constant_one)
        assert clone.has_function("one")
        assert not registry.has_function("one")
        assert clone.has_function("sin")


class TestRegisterFunction:
    """Tests for function registration."""

    def setup_method(self):
        self.registry = create_default_registry()

    def test_registered_function_is_callable_from_expressions(self):
        def double(ctx, x):
            return 2 * ctx.evaluate(x)

        definition = self.registry.register_function("double", 1, double)
        assert definition.name == "double"
        assert definition.arity == 1
        assert parse_and_evaluate("double(21)", registry=self.registry) == 42.0

    def test_function_receives_unevaluated_arguments(self):
        seen = []

        def inspect(ctx, *args):
            seen.extend(arg.type for arg in args)
            return 0.0

        self.registry.register_function("inspect", VARIADIC, inspect)
        parse_and_evaluate("inspect(1, $x, 1+2, sin(1))", registry=self.registry)
        assert seen == ["Number", "Variable", "Operator", "Call"]

    def test_function_may_skip_arguments(self):
        def first(ctx, a, b):
            return ctx.evaluate(a)

        self.registry.register_function("first", 2, first)
        assert parse_and_evaluate("first(3, 1/0)", registry=self.registry) == 3.0

    def test_duplicate_keeps_existing_definition(self):
        existing = self.registry.get_function("sin")
        with pytest.raises(DuplicateNameError) as exc_info:
            self.registry.register_function("sin", 1, constant_one)
        assert exc_info.value.name == "sin"
        assert self.registry.get_function("sin") is existing

    def test_function_and_constant_namespaces_are_separate(self):
        self.registry.register_function("pi", 0, constant_one)
        assert parse_and_evaluate("pi() + pi", registry=self.registry) == pytest.approx(
            1 + math.pi
        )

    @pytest.mark.parametrize("name", ["", "1abc", "a_b", "a-b", "$x", "#i", "sin x"])
    def test_invalid_names_are_rejected(self, name):
        with pytest.raises(InvalidArgumentError):
            self.registry.register_function(name, 1, constant_one)

    @pytest.mark.parametrize("arity", [-2, 1.5, True, "1"])
    def test_invalid_arity_is_rejected(self, arity):
        with pytest.raises(InvalidArgumentError):
            self.registry.register_function("bad", arity, constant_one)

    def test_non_callable_evaluator_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            self.registry.register_function("bad", 1, 42)  # type: ignore[arg-type]

    def test_non_callable_renderer_is_rejected(self):
        with pytest.raises(InvalidArgumentError):
            self.registry.register_function("bad", 1, constant_one, "text")  # type: ignore[arg-type]

    def test_registration_errors_share_base_class(self):
        with pytest.raises(RegistrationError):
            self.registry.register_function("", 1, constant_one)
        with pytest.raises(RegistrationError):
            self.registry.register_function("sin", 1, constant_one)

    def test_missing_renderer_renders_empty(self):
        self.registry.register_function("plain", 1, lambda ctx, x: 0.0)
        ast = parse_expression("plain(1)", self.registry)
        assert render(ast, self.registry) == ""

    def test_custom_renderer(self):
        self.registry.register_function(
            "twice",
            1,
            lambda ctx, x: 2 * ctx.evaluate(x),
            lambda ctx, x: f"2{ctx.render_grouped(x)}",
        )
        ast = parse_expression("twice(1+$x)", self.registry)
        assert render(ast, self.registry) == "2\\left(1+x\\right)"

    def test_concurrent_duplicate_registration_has_one_winner(self):
        errors = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            try:
                self.registry.register_function("race", 0, constant_one)
            except DuplicateNameError as error:
                errors.append(error)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(errors) == 7
        assert self.registry.has_function("race")


class TestRegisterConstant:
    """Tests for constant registration."""

    def setup_method(self):
        self.registry = create_default_registry()

    def test_registered_constant_is_usable(self):
        self.registry.register_constant("tau", 2 * math.pi, "\\tau")
        assert parse_and_evaluate("tau/2", registry=self.registry) == math.pi
        ast = parse_expression("tau", self.registry)
        assert render(ast, self.registry) == "\\tau"

    def test_display_form_defaults_to_name(self):
        definition = self.registry.register_constant("g", 9.81)
        assert definition.display_form == "g"

    def test_integer_value_is_stored_as_float(self):
        definition = self.registry.register_constant("answer", 42)
        assert definition.value == 42.0
        assert isinstance(definition.value, float)

    def test_duplicate_keeps_existing_value(self):
        with pytest.raises(DuplicateNameError):
            self.registry.register_constant("pi", 3.0)
        assert self.registry.get_constant("pi").value == math.pi

    @pytest.mark.parametrize("value", ["3", None, True])
    def test_non_numeric_value_is_rejected(self, value):
        with pytest.raises(InvalidArgumentError):
            self.registry.register_constant("bad", value)


class TestProcessWideRegistration:
    """Tests for registration into the default registry."""

    def test_register_function_and_constant(self):
        register_function("testOnlyTriple", 1, lambda ctx, x: 3 * ctx.evaluate(x))
        register_constant("testOnlyAnswer", 42.0)
        assert parse_and_evaluate("testOnlyTriple(testOnlyAnswer)") == 126.0
        assert DEFAULT_REGISTRY.has_function("testOnlyTriple")
