"""Economy Manager Tests.

Tests for resources, buildings, upgrades, achievements, production and
prestige as driven through a GameEngine.
"""

import copy
import unittest
from typing import Optional

from idlekit_engine.engine import GameEngine
from idlekit_engine.managers import calculate_scaled_cost

ECONOMY = {
    "meta": {"name": "Economy", "version": "1.0.0"},
    "primary": {"name": "Gold", "namePlural": "Gold", "clickVerb": "Mine"},
    "settings": {"tickRate": 100},
    "resources": [
        {"id": "gold", "clickable": True, "clickAmount": 1},
        {"id": "wood", "maxAmount": 50},
    ],
    "buildings": [
        {
            "id": "mine",
            "cost": [{"resourceId": "gold", "baseAmount": 10}],
            "costScaling": 1.15,
            "produces": [{"resourceId": "gold", "amount": 1}],
        },
        {
            "id": "lumberyard",
            "cost": [
                {"resourceId": "gold", "baseAmount": 5},
                {"resourceId": "wood", "baseAmount": 5},
            ],
            "produces": [{"resourceId": "wood", "amount": 2}],
            "maxOwned": 2,
        },
    ],
    "upgrades": [
        {"id": "sharpPick", "name": "Sharp Pick", "baseCost": 10,
         "effect": {"type": "multiply", "target": "click", "value": 2}},
        {"id": "goldenPick", "name": "Golden Pick", "baseCost": 10,
         "effect": {"type": "multiply", "target": "click", "value": 2}},
        {"id": "goldRush", "name": "Gold Rush", "baseCost": 50,
         "effect": {"type": "multiply", "target": "production", "value": 3, "resourceId": "gold"},
         "requirements": [{"type": "building", "buildingId": "mine", "amount": 1}]},
    ],
    "achievements": [
        {"id": "fiftyClicks", "name": "Fifty Clicks", "requirements": [{"type": "totalClicks", "amount": 50}]},
    ],
    "prestige": {"enabled": True, "baseResource": "gold", "formula": "linear", "divisor": 100},
}


def make_engine(**overrides) -> GameEngine:
    data = copy.deepcopy(ECONOMY)
    data.update(overrides)
    return GameEngine(data)


class ResourceManagerTest(unittest.TestCase):
    """Test balances, caps and counters."""

    def setUp(self) -> None:
        self.engine = make_engine()
        self.resources = self.engine.resources

    def test_add_clamps_at_cap(self) -> None:
        self.assertTrue(self.resources.add_resource("wood", 80))

        wood = self.resources.get_resource("wood")
        self.assertEqual(wood.amount, 50)
        self.assertEqual(wood.total, 50)

    def test_remove_requires_balance(self) -> None:
        self.resources.add_resource("gold", 10)

        self.assertFalse(self.resources.remove_resource("gold", 11))
        self.assertEqual(self.resources.amount("gold"), 10)
        self.assertTrue(self.resources.remove_resource("gold", 4))
        self.assertEqual(self.resources.get_resource("gold").total_spent, 4)

    def test_set_and_multiply(self) -> None:
        self.resources.set_resource("wood", 20)
        self.resources.multiply_resource("wood", 2)
        self.assertEqual(self.resources.amount("wood"), 40)

        self.resources.multiply_resource("wood", 10)
        self.assertEqual(self.resources.amount("wood"), 50)

        self.resources.set_resource("wood", -5)
        self.assertEqual(self.resources.amount("wood"), 0)

    def test_unknown_resource(self) -> None:
        self.assertIsNone(self.resources.get_resource("mana"))
        with self.assertLogs("idlekit", level="WARNING"):
            self.assertFalse(self.resources.add_resource("mana", 1))

    def test_get_resource_returns_copy(self) -> None:
        copy_ = self.resources.get_resource("gold")
        copy_.amount = 1000
        self.assertEqual(self.resources.amount("gold"), 0)


class BuildingManagerTest(unittest.TestCase):
    """Test scaled costs and all-or-nothing purchases."""

    def setUp(self) -> None:
        self.engine = make_engine()

    def test_scaled_cost(self) -> None:
        self.assertEqual(calculate_scaled_cost(10, 1.15, 0, 3), 34)
        self.assertEqual(calculate_scaled_cost(10, 1.15, 1), 11)

    def test_bulk_purchase(self) -> None:
        self.engine.resources.add_resource("gold", 100)

        self.assertTrue(self.engine.buy_building("mine", 3))
        self.assertEqual(self.engine.resources.amount("gold"), 66)
        self.assertEqual(self.engine.buildings.owned("mine"), 3)
        self.assertEqual(self.engine.buildings.get_cost("mine"), {"gold": 15})

    def test_purchase_is_atomic(self) -> None:
        """Test that a missing cost resource leaves every balance untouched."""
        self.engine.resources.add_resource("gold", 100)

        self.assertFalse(self.engine.buy_building("lumberyard"))
        self.assertEqual(self.engine.resources.amount("gold"), 100)
        self.assertEqual(self.engine.buildings.owned("lumberyard"), 0)

    def test_reactions_run_after_every_cost_is_paid(self) -> None:
        """Test that an empty-balance reaction cannot starve the rest of a purchase."""
        engine = make_engine(logic={
            "nodes": [
                {"id": "empty", "type": "event", "data": {"eventType": "onResourceEmpty", "resourceId": "gold"}},
                {"id": "burn", "type": "action",
                 "data": {"actionType": "removeResource", "resourceId": "wood", "amount": 5}},
            ],
            "edges": [{"source": "empty", "target": "burn"}],
        })
        engine.resources.add_resource("gold", 5)
        engine.resources.add_resource("wood", 5)

        self.assertTrue(engine.buy_building("lumberyard"))
        self.assertEqual(engine.buildings.owned("lumberyard"), 1)
        self.assertEqual(engine.resources.amount("gold"), 0)
        self.assertEqual(engine.resources.amount("wood"), 0)
        self.assertEqual(engine.get_resource("wood").total_spent, 5)

    def test_unaffordable_purchase(self) -> None:
        self.engine.resources.add_resource("gold", 9)
        self.assertFalse(self.engine.buy_building("mine"))
        self.assertEqual(self.engine.resources.amount("gold"), 9)

    def test_max_owned(self) -> None:
        self.engine.resources.add_resource("gold", 1000)
        self.engine.resources.add_resource("wood", 50)

        self.assertTrue(self.engine.buy_building("lumberyard"))
        self.assertTrue(self.engine.buy_building("lumberyard"))
        self.assertFalse(self.engine.buy_building("lumberyard"))
        self.assertEqual(self.engine.buildings.owned("lumberyard"), 2)

    def test_locked_building(self) -> None:
        engine = make_engine(buildings=[{
            "id": "mine",
            "cost": [{"resourceId": "gold", "baseAmount": 1}],
            "requirements": [{"type": "resource", "resourceId": "wood", "amount": 10}],
        }], upgrades=[])
        engine.resources.add_resource("gold", 10)

        self.assertFalse(engine.buy_building("mine"))
        self.assertTrue(engine.buildings.unlock_building("mine"))
        self.assertTrue(engine.buy_building("mine"))

    def test_unknown_building(self) -> None:
        with self.assertLogs("idlekit", level="WARNING"):
            self.assertFalse(self.engine.buy_building("castle"))
        self.assertIsNone(self.engine.buildings.get_building("castle"))


class UpgradeManagerTest(unittest.TestCase):
    """Test one-shot upgrades and multiplier stacking."""

    def setUp(self) -> None:
        self.engine = make_engine()

    def test_multipliers_stack_multiplicatively(self) -> None:
        self.engine.resources.add_resource("gold", 20)

        self.assertTrue(self.engine.buy_upgrade("sharpPick"))
        self.assertTrue(self.engine.buy_upgrade("goldenPick"))
        self.assertEqual(self.engine.upgrades.get_total_multiplier("gold", "click"), 4)
        self.assertEqual(self.engine.click(), 4)

    def test_multiplier_key_counts_toward_total(self) -> None:
        engine = make_engine(upgrades=[
            {"id": "pick", "name": "Pick", "baseCost": 10,
             "effect": {"type": "multiply", "target": "click", "multiplier": 2}},
        ])
        engine.resources.add_resource("gold", 10)

        self.assertTrue(engine.buy_upgrade("pick"))
        self.assertEqual(engine.upgrades.get_total_multiplier("gold", "click"), 2)
        self.assertEqual(engine.click(), 2)

    def test_upgrade_bought_once(self) -> None:
        self.engine.resources.add_resource("gold", 30)

        self.assertTrue(self.engine.buy_upgrade("sharpPick"))
        self.assertFalse(self.engine.buy_upgrade("sharpPick"))
        self.assertEqual(self.engine.resources.amount("gold"), 20)

    def test_requirements_unlock_on_tick(self) -> None:
        self.engine.resources.add_resource("gold", 100)
        self.assertFalse(self.engine.get_upgrade("goldRush").unlocked)
        self.assertFalse(self.engine.buy_upgrade("goldRush"))

        self.engine.buy_building("mine")
        self.engine.tick()

        self.assertTrue(self.engine.get_upgrade("goldRush").unlocked)
        self.assertTrue(self.engine.buy_upgrade("goldRush"))
        self.assertEqual(self.engine.upgrades.get_total_multiplier("gold", "production"), 3)
        self.assertEqual(self.engine.upgrades.get_total_multiplier("wood", "production"), 1)

    def test_forced_unlock(self) -> None:
        self.assertTrue(self.engine.upgrades.unlock_upgrade("goldRush"))
        self.engine.tick()
        self.assertTrue(self.engine.get_upgrade("goldRush").unlocked)


class ProductionTest(unittest.TestCase):
    """Test clicks and per-tick production."""

    def setUp(self) -> None:
        self.engine = make_engine()

    def test_click(self) -> None:
        self.assertEqual(self.engine.click(), 1)

        self.assertEqual(self.engine.resources.amount("gold"), 1)
        self.assertEqual(self.engine.production.total_clicks, 1)

    def test_tick_production(self) -> None:
        self.engine.resources.add_resource("gold", 10)
        self.engine.buy_building("mine")

        for _ in range(10):
            self.engine.tick()

        gold = self.engine.get_resource("gold")
        self.assertAlmostEqual(gold.amount, 1.0)
        self.assertAlmostEqual(gold.per_second, 1.0)
        self.assertAlmostEqual(gold.total_produced, 1.0)

    def test_modifiers(self) -> None:
        production = self.engine.production
        production.add_production("wood", 5)
        production.multiply_production("wood", 2)
        production.set_click_power(3)
        self.engine.tick()

        self.assertAlmostEqual(self.engine.get_resource("wood").per_second, 10)
        self.assertAlmostEqual(self.engine.resources.amount("wood"), 1.0)
        self.assertEqual(self.engine.click(), 3)


class AchievementTest(unittest.TestCase):
    """Test that achievements unlock exactly once."""

    def test_unlocks_at_threshold_once(self) -> None:
        engine = make_engine()
        for _ in range(49):
            engine.click()
        engine.tick()
        self.assertFalse(engine.achievements.is_unlocked("fiftyClicks"))
        self.assertEqual(engine.get_achievement("fiftyClicks").progress, 0)

        engine.click()
        engine.tick()
        engine.tick()

        self.assertTrue(engine.achievements.is_unlocked("fiftyClicks"))
        self.assertEqual(engine.achievements.total_achievements_unlocked, 1)
        self.assertFalse(engine.achievements.unlock_achievement("fiftyClicks"))


def reaction(event_type: str, **data) -> dict:
    """Logic where ``event_type`` adds one stone."""
    return {
        "nodes": [
            {"id": "on", "type": "event", "data": {"eventType": event_type, **data}},
            {"id": "stone", "type": "action",
             "data": {"actionType": "addResource", "resourceId": "stone", "amount": 1}},
        ],
        "edges": [{"source": "on", "target": "stone"}],
    }


def reacting_engine(event_type: str, achievements: Optional[list] = None, **data) -> GameEngine:
    overrides = {"resources": copy.deepcopy(ECONOMY["resources"]) + [{"id": "stone"}]}
    if achievements is not None:
        overrides["achievements"] = achievements
    return make_engine(logic=reaction(event_type, **data), **overrides)


def stone(engine: GameEngine) -> float:
    return engine.resources.amount("stone")


class ManagerEventTest(unittest.TestCase):
    """Test that manager events fire once per crossing and never repeat."""

    def test_resource_empty_fires_per_crossing(self) -> None:
        engine = reacting_engine("onResourceEmpty", resourceId="gold")
        resources = engine.resources

        resources.add_resource("gold", 5)
        resources.remove_resource("gold", 5)
        self.assertEqual(stone(engine), 1)

        self.assertFalse(resources.remove_resource("gold", 1))
        resources.set_resource("gold", 0)
        self.assertEqual(stone(engine), 1)

        resources.add_resource("gold", 3)
        resources.remove_resource("gold", 1)
        self.assertEqual(stone(engine), 1)
        resources.remove_resource("gold", 2)
        self.assertEqual(stone(engine), 2)

    def test_resources_spent_threshold(self) -> None:
        engine = reacting_engine("afterXResourcesSpent", resourceId="gold", amountSpent=10)
        engine.resources.add_resource("gold", 100)

        engine.resources.remove_resource("gold", 6)
        self.assertEqual(stone(engine), 0)
        engine.resources.remove_resource("gold", 4)
        self.assertEqual(stone(engine), 1)
        engine.buy_building("mine")
        engine.resources.remove_resource("gold", 10)
        self.assertEqual(stone(engine), 1)

    def test_production_threshold(self) -> None:
        engine = reacting_engine("afterXProduction", resourceId="gold", totalProduced=2.5)
        engine.production.add_production("gold", 10)

        engine.tick()
        engine.tick()
        self.assertEqual(stone(engine), 0)

        engine.tick()
        self.assertEqual(stone(engine), 1)
        for _ in range(5):
            engine.tick()
        self.assertEqual(stone(engine), 1)

    def test_production_threshold_ignores_other_gains(self) -> None:
        engine = reacting_engine("afterXProduction", resourceId="gold", amount=1)
        engine.resources.add_resource("gold", 50)
        engine.click()
        self.assertEqual(stone(engine), 0)

    def test_building_maxed_fires_once(self) -> None:
        engine = reacting_engine("onBuildingMaxed", buildingId="lumberyard")
        engine.resources.add_resource("gold", 100)
        engine.resources.add_resource("wood", 50)

        self.assertTrue(engine.buy_building("lumberyard"))
        self.assertEqual(stone(engine), 0)
        self.assertTrue(engine.buy_building("lumberyard"))
        self.assertEqual(stone(engine), 1)

        self.assertFalse(engine.buy_building("lumberyard"))
        engine.tick()
        self.assertEqual(stone(engine), 1)

    def test_building_maxed_by_bulk_purchase(self) -> None:
        engine = reacting_engine("onBuildingMaxed", buildingId="lumberyard")
        engine.resources.add_resource("gold", 100)
        engine.resources.add_resource("wood", 50)

        self.assertTrue(engine.buy_building("lumberyard", 2))
        self.assertEqual(stone(engine), 1)

    def test_achievement_count_threshold(self) -> None:
        engine = reacting_engine("afterXAchievements", achievementCount=2, achievements=[
            {"id": "firstClick", "name": "First Click", "requirements": [{"type": "totalClicks", "amount": 1}]},
            {"id": "tenClicks", "name": "Ten Clicks", "requirements": [{"type": "totalClicks", "amount": 10}]},
            {"id": "hundredClicks", "name": "Hundred Clicks", "requirements": [{"type": "totalClicks", "amount": 100}]},
        ])
        achievements = engine.achievements

        self.assertTrue(achievements.unlock_achievement("firstClick"))
        self.assertEqual(stone(engine), 0)
        self.assertTrue(achievements.unlock_achievement("tenClicks"))
        self.assertEqual(stone(engine), 1)

        self.assertFalse(achievements.unlock_achievement("tenClicks"))
        self.assertTrue(achievements.unlock_achievement("hundredClicks"))
        self.assertEqual(stone(engine), 1)


class PrestigeTest(unittest.TestCase):
    """Test prestige currency, reset and bonus."""

    def test_prestige_resets_run_and_keeps_level(self) -> None:
        engine = make_engine()
        engine.resources.add_resource("gold", 250)
        engine.buy_building("mine")

        self.assertEqual(engine.prestige.calculate_prestige_currency(), 2)
        self.assertTrue(engine.prestige.can_prestige())
        self.assertTrue(engine.perform_prestige())

        self.assertEqual(engine.prestige.level, 1)
        self.assertEqual(engine.prestige.currency, 2)
        self.assertEqual(engine.resources.amount("gold"), 0)
        self.assertEqual(engine.buildings.owned("mine"), 0)
        self.assertAlmostEqual(engine.upgrades.get_prestige_multiplier(), 1.1)
        self.assertAlmostEqual(engine.click(), 1.1)
        self.assertFalse(engine.perform_prestige())

    def test_formulas(self) -> None:
        sqrt = make_engine(prestige={"enabled": True, "formula": "sqrt", "divisor": 1000})
        sqrt.resources.add_resource("gold", 16000)
        self.assertEqual(sqrt.prestige.calculate_prestige_currency(), 4)

        log = make_engine(prestige={"enabled": True, "formula": "log", "multiplier": 2})
        self.assertEqual(log.prestige.calculate_prestige_currency(), 0)
        log.resources.add_resource("gold", 1000)
        self.assertEqual(log.prestige.calculate_prestige_currency(), 6)

    def test_disabled(self) -> None:
        engine = make_engine(prestige={"enabled": False})
        engine.resources.add_resource("gold", 10_000)
        self.assertFalse(engine.prestige.can_prestige())
        self.assertFalse(engine.perform_prestige())


if __name__ == "__main__":
    unittest.main()
