"""Effect Registry Tests.

Tests for the whitelisted effect mutators and the registry lookup rules.
"""

import unittest
from types import SimpleNamespace

from idlekit_core.effects import EffectDescriptor, EffectRegistry, EffectType, multiply_factor


def metrics(click_power: float = 1, points_per_second: float = 0) -> SimpleNamespace:
    return SimpleNamespace(click_power=click_power, points_per_second=points_per_second)


class BuiltinEffectsTest(unittest.TestCase):
    """Test the built-in effect families."""

    def setUp(self) -> None:
        self.registry = EffectRegistry.with_builtins()

    def test_every_builtin_is_registered(self) -> None:
        """Test that every EffectType tag resolves."""
        for effect_type in EffectType:
            self.assertTrue(self.registry.has(effect_type.value), effect_type.value)

    def test_additive_scales_with_level(self) -> None:
        state = metrics(click_power=1, points_per_second=0.5)
        self.registry.execute(state, {"type": "add_click_power", "value": 2}, 3)
        self.registry.execute(state, {"type": "add_per_second", "value": 0.5}, 4)

        self.assertEqual(state.click_power, 7)
        self.assertAlmostEqual(state.points_per_second, 2.5)

    def test_flat_variants_ignore_level(self) -> None:
        state = metrics(click_power=1)
        self.registry.execute(state, {"type": "add_click_power_flat", "value": 10}, 0)
        self.assertEqual(state.click_power, 1)

        self.registry.execute(state, {"type": "add_click_power_flat", "value": 10}, 5)
        self.assertEqual(state.click_power, 11)

    def test_multiplicative_uses_power_of_level(self) -> None:
        state = metrics(click_power=3, points_per_second=1)
        self.registry.execute(state, {"type": "multiply_click_power", "multiplier": 2}, 2)
        self.registry.execute(state, {"type": "multiply_per_second", "multiplier": 3}, 2)

        self.assertEqual(state.click_power, 12)
        self.assertAlmostEqual(state.points_per_second, 9)

    def test_percent_is_linear_in_level(self) -> None:
        """Test that percent bonuses add up per level instead of compounding."""
        state = metrics(click_power=10, points_per_second=10)
        self.registry.execute(state, {"type": "increase_click_power_percent", "percent": 50}, 2)
        self.registry.execute(state, {"type": "increase_per_second_percent", "percent": 10}, 3)

        self.assertEqual(state.click_power, 20)
        self.assertAlmostEqual(state.points_per_second, 13)

    def test_exponential_adds_base_times_level_power(self) -> None:
        state = metrics(click_power=1, points_per_second=0)
        self.registry.execute(state, {"type": "exponential_click_power", "base": 2, "exponent": 1}, 3)
        self.registry.execute(state, {"type": "exponential_per_second", "base": 2, "exponent": 2}, 3)

        self.assertEqual(state.click_power, 7)
        self.assertAlmostEqual(state.points_per_second, 18)

    def test_cross_coupling(self) -> None:
        state = metrics(click_power=10, points_per_second=100)
        self.registry.execute(state, {"type": "click_power_from_pps", "ratio": 0.1}, 2)

        self.assertEqual(state.click_power, 30)

        state = metrics(click_power=10, points_per_second=0)
        self.registry.execute(state, {"type": "pps_from_click_power", "ratio": 0.5}, 2)
        self.assertAlmostEqual(state.points_per_second, 10)

    def test_double_everything(self) -> None:
        state = metrics(click_power=3, points_per_second=1.5)
        self.registry.execute(state, {"type": "double_everything"}, 2)

        self.assertEqual(state.click_power, 12)
        self.assertAlmostEqual(state.points_per_second, 6)

    def test_multiply_targets(self) -> None:
        state = metrics(click_power=3, points_per_second=1.5)
        self.registry.execute(state, {"type": "multiply", "target": "click", "value": 2})
        self.registry.execute(state, {"type": "multiply", "target": "production", "value": 2})

        self.assertEqual(state.click_power, 6)
        self.assertAlmostEqual(state.points_per_second, 3)

    def test_multiply_factor_falls_back_to_multiplier(self) -> None:
        self.assertEqual(multiply_factor(EffectDescriptor(type="multiply", multiplier=3)), 3)
        self.assertEqual(multiply_factor(EffectDescriptor(type="multiply", value=2, multiplier=3)), 2)
        self.assertEqual(multiply_factor(EffectDescriptor(type="multiply")), 1)

    def test_descriptor_params(self) -> None:
        descriptor = EffectDescriptor(type="add_click_power", value=4)
        self.assertEqual(descriptor.param("value"), 4)
        self.assertEqual(descriptor.param("missing", 9), 9)
        self.assertEqual(descriptor.params, {"value": 4})


class EffectRegistryTest(unittest.TestCase):
    """Test registry lookup, registration and failure handling."""

    def setUp(self) -> None:
        self.registry = EffectRegistry.with_builtins()

    def test_unknown_type_is_a_logged_no_op(self) -> None:
        state = metrics(click_power=5, points_per_second=2)
        with self.assertLogs("idlekit", level="WARNING") as logs:
            ran = self.registry.execute(state, {"type": "summon_dragon"}, 1)

        self.assertFalse(ran)
        self.assertEqual((state.click_power, state.points_per_second), (5, 2))
        self.assertIn("summon_dragon", logs.output[0])

    def test_malformed_descriptor_is_skipped(self) -> None:
        state = metrics()
        with self.assertLogs("idlekit", level="WARNING"):
            self.assertFalse(self.registry.execute(state, {"value": 3}, 1))
            self.assertFalse(self.registry.execute(state, None, 1))
        self.assertEqual(state.click_power, 1)

    def test_failing_mutator_does_not_raise(self) -> None:
        def explode(state, effect, level):
            raise RuntimeError("boom")

        self.registry.register("explode", explode)
        with self.assertLogs("idlekit", level="ERROR"):
            self.assertFalse(self.registry.execute(metrics(), {"type": "explode"}))

    def test_register_custom_effect(self) -> None:
        def triple_click(state, effect, level):
            state.click_power *= 3 ** level

        self.registry.register("triple_click", triple_click, {"name": "Triple", "category": "custom"})
        state = metrics(click_power=2)

        self.assertTrue(self.registry.execute(state, {"type": "triple_click"}, 2))
        self.assertEqual(state.click_power, 18)
        self.assertIn("triple_click", self.registry.available_types())
        self.assertEqual(self.registry.metadata("triple_click")["category"], "custom")

    def test_registries_are_independent(self) -> None:
        other = EffectRegistry.with_builtins()
        self.registry.register("only_here", lambda state, effect, level: None)

        self.assertTrue(self.registry.has("only_here"))
        self.assertFalse(other.has("only_here"))
        self.assertFalse(EffectRegistry().has("add_click_power"))

    def test_metadata(self) -> None:
        self.assertEqual(self.registry.metadata("multiply_all")["category"], "multiplicative")
        self.assertEqual(self.registry.metadata("nope")["category"], "unknown")


if __name__ == "__main__":
    unittest.main()
