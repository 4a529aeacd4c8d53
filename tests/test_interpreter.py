"""Logic Interpreter Tests.

Tests for graph traversal: events, actions, conditions, control-flow nodes,
threshold counters, delays and the traversal guards.
"""

import unittest
from typing import Optional

from idlekit_core.graph import LogicNode
from idlekit_engine.config import EngineConfig
from idlekit_engine.engine import GameEngine


def event(node_id: str, event_type: str, **data) -> dict:
    return {"id": node_id, "type": "event", "data": {"eventType": event_type, **data}}


def action(node_id: str, action_type: str, **data) -> dict:
    return {"id": node_id, "type": "action", "data": {"actionType": action_type, **data}}


def condition(node_id: str, condition_type: str, **data) -> dict:
    return {"id": node_id, "type": "condition", "data": {"conditionType": condition_type, **data}}


def logic(node_id: str, logic_type: str, **data) -> dict:
    return {"id": node_id, "type": "logic", "data": {"logicType": logic_type, **data}}


def edge(source: str, target: str, handle: Optional[str] = None) -> dict:
    data = {"source": source, "target": target}
    if handle:
        data["sourceHandle"] = handle
    return data


def add_wood(node_id: str, amount: float = 1) -> dict:
    return action(node_id, "addResource", resourceId="wood", amount=amount)


def graph_engine(nodes: list, edges: list, **config) -> GameEngine:
    template = {
        "meta": {"name": "Graph", "version": "1"},
        "primary": {"name": "Gold", "namePlural": "Gold", "clickVerb": "Mine"},
        "resources": [
            {"id": "gold", "clickable": True},
            {"id": "wood", "maxAmount": 50},
        ],
        "buildings": [
            {"id": "mine", "cost": [{"resourceId": "gold", "baseAmount": 1}]},
            {"id": "lumberyard", "cost": [{"resourceId": "gold", "baseAmount": 1}]},
        ],
        "upgrades": [
            {"id": "goldRush", "name": "Gold Rush", "baseCost": 1,
             "effect": {"type": "multiply", "target": "production", "value": 2},
             "requirements": [{"type": "prestige", "level": 5}]},
        ],
        "prestige": {"enabled": True},
        "logic": {"nodes": nodes, "edges": edges},
    }
    return GameEngine(template, config=EngineConfig(**config))


def wood(engine: GameEngine) -> float:
    return engine.resources.amount("wood")


class TraversalTest(unittest.TestCase):
    """Test depth-first traversal and branching."""

    def test_sequence_of_actions(self) -> None:
        engine = graph_engine(
            [event("e", "onClick"), add_wood("a", 5), add_wood("b", 1)],
            [edge("e", "a"), edge("a", "b")],
        )
        engine.click()
        self.assertEqual(wood(engine), 6)

    def test_fan_out_runs_in_authored_order(self) -> None:
        engine = graph_engine(
            [
                event("e", "onClick"),
                action("first", "showNotification", message="first"),
                action("second", "showNotification", message="second"),
                action("nested", "showNotification", message="nested"),
            ],
            [edge("e", "first"), edge("e", "second"), edge("first", "nested")],
        )
        engine.click()

        messages = [n.message for n in engine.notifications.drain()]
        self.assertEqual(messages, ["first", "nested", "second"])

    def test_condition_picks_branch_and_runs_target(self) -> None:
        nodes = [
            event("e", "onClick"),
            condition("c", "ifResource", resourceId="gold", amount=3, operator=">="),
            add_wood("yes", 10),
            add_wood("no", 1),
        ]
        edges = [edge("e", "c"), edge("c", "yes", "true"), edge("c", "no", "false")]

        engine = graph_engine(nodes, edges)
        engine.click()
        self.assertEqual(wood(engine), 1)

        engine = graph_engine(nodes, edges)
        engine.resources.add_resource("gold", 5)
        engine.click()
        self.assertEqual(wood(engine), 10)

    def test_registry_condition_node(self) -> None:
        engine = graph_engine(
            [
                event("e", "onClick"),
                condition("c", "registry", condition={"type": "total_clicks", "value": 2}),
                add_wood("a"),
            ],
            [edge("e", "c"), edge("c", "a", "true")],
        )
        engine.click()
        self.assertEqual(wood(engine), 0)
        engine.click()
        self.assertEqual(wood(engine), 1)

    def test_named_comparison_operators(self) -> None:
        engine = graph_engine(
            [
                event("e", "onClick"),
                condition("c", "ifClicks", count=2, comparison="less"),
                add_wood("a"),
            ],
            [edge("e", "c"), edge("c", "a", "true")],
        )
        for _ in range(3):
            engine.click()
        self.assertEqual(wood(engine), 1)

    def test_unknown_action_does_not_stop_walk(self) -> None:
        engine = graph_engine(
            [event("e", "onClick"), action("x", "launchRocket"), add_wood("a")],
            [edge("e", "x"), edge("x", "a")],
        )
        with self.assertLogs("idlekit", level="WARNING"):
            engine.click()
        self.assertEqual(wood(engine), 1)

    def test_events_raised_mid_walk_run_before_continuation(self) -> None:
        engine = graph_engine(
            [
                event("click", "onClick"),
                add_wood("fill", 50),
                action("after", "showNotification", message="after"),
                event("full", "onResourceFull", resourceId="wood"),
                action("notifyFull", "showNotification", message="full"),
            ],
            [edge("click", "fill"), edge("fill", "after"), edge("full", "notifyFull")],
        )
        engine.click()

        messages = [n.message for n in engine.notifications.drain()]
        self.assertEqual(messages, ["full", "after"])


class ControlNodeTest(unittest.TestCase):
    """Test random, loop and delay nodes."""

    def random_graph(self, chance: float, seed: Optional[int] = None) -> GameEngine:
        return graph_engine(
            [event("e", "onClick"), logic("r", "random", chance=chance), add_wood("hit", 1), add_wood("miss", 2)],
            [edge("e", "r"), edge("r", "hit", "true"), edge("r", "miss", "false")],
            seed=seed,
        )

    def test_random_extremes(self) -> None:
        never = self.random_graph(0)
        never.click()
        self.assertEqual(wood(never), 2)

        always = self.random_graph(100)
        always.click()
        self.assertEqual(wood(always), 1)

    def test_random_is_reproducible_with_seed(self) -> None:
        first = self.random_graph(50, seed=7)
        second = self.random_graph(50, seed=7)
        for _ in range(10):
            first.click()
            second.click()
        self.assertEqual(wood(first), wood(second))

    def test_loop_runs_body_per_iteration(self) -> None:
        engine = graph_engine(
            [event("e", "onClick"), logic("l", "loop", iterations=3), add_wood("a")],
            [edge("e", "l"), edge("l", "a")],
        )
        engine.click()
        self.assertEqual(wood(engine), 3)

    def test_loop_iteration_in_context(self) -> None:
        engine = graph_engine([], [])
        node = LogicNode(id="l", type="logic", data={"logicType": "loop", "repeatCount": 3})

        items = engine.interpreter.logic.execute(node, {"targetId": "global"})

        self.assertEqual([item.context["loopIteration"] for item in items], [0, 1, 2])
        self.assertTrue(all(item.context["targetId"] == "global" for item in items))

    def test_loop_is_capped(self) -> None:
        engine = graph_engine(
            [event("e", "onClick"), logic("l", "loop", iterations=100), add_wood("a")],
            [edge("e", "l"), edge("l", "a")],
            max_loop_iterations=5,
        )
        with self.assertLogs("idlekit", level="WARNING"):
            engine.click()
        self.assertEqual(wood(engine), 5)

    def delay_graph(self) -> GameEngine:
        return graph_engine(
            [event("e", "onClick"), logic("d", "delay", seconds=0.45), add_wood("a")],
            [edge("e", "d"), edge("d", "a")],
        )

    def test_delay_runs_on_simulation_time(self) -> None:
        engine = self.delay_graph()
        engine.click()
        self.assertEqual(engine.scheduler.pending, 1)

        for _ in range(4):
            engine.tick()
        self.assertEqual(wood(engine), 0)

        engine.tick()
        self.assertEqual(wood(engine), 1)
        self.assertEqual(engine.scheduler.pending, 0)

    def test_reset_cancels_delays(self) -> None:
        engine = self.delay_graph()
        engine.click()
        engine.reset()

        self.assertEqual(engine.scheduler.pending, 0)
        for _ in range(10):
            engine.tick()
        self.assertEqual(wood(engine), 0)

    def test_step_budget_stops_cycles(self) -> None:
        engine = graph_engine(
            [event("e", "onClick"), add_wood("a"), add_wood("b")],
            [edge("e", "a"), edge("a", "b"), edge("b", "a")],
            max_steps_per_dispatch=50,
        )
        with self.assertLogs("idlekit", level="WARNING") as logs:
            engine.click()

        self.assertEqual(engine.interpreter.last_dispatch_steps, 50)
        self.assertTrue(any("Dispatch stopped" in line for line in logs.output))
        self.assertFalse(engine.interpreter.is_running)


class EventCounterTest(unittest.TestCase):
    """Test threshold events and their latches."""

    def test_threshold_fires_once(self) -> None:
        engine = graph_engine(
            [event("e", "afterXClicks", clickCount=3), add_wood("a", 10)],
            [edge("e", "a")],
        )
        for _ in range(5):
            engine.click()

        self.assertEqual(wood(engine), 10)
        self.assertEqual(len(engine.interpreter.counters), 1)
        self.assertEqual(engine.interpreter.check_event_counter("afterXClicks", "global", 100), 0)

    def test_elapsed_seconds(self) -> None:
        engine = graph_engine(
            [event("e", "afterXSeconds", seconds=1), add_wood("a")],
            [edge("e", "a")],
        )
        for _ in range(9):
            engine.tick()
        self.assertEqual(wood(engine), 0)

        engine.tick()
        self.assertEqual(wood(engine), 1)

    def test_event_filtered_by_target(self) -> None:
        engine = graph_engine(
            [event("e", "afterBoughtBuilding", buildingId="mine"), add_wood("a")],
            [edge("e", "a")],
        )
        engine.resources.add_resource("gold", 10)

        engine.buy_building("lumberyard")
        self.assertEqual(wood(engine), 0)
        engine.buy_building("mine")
        self.assertEqual(wood(engine), 1)

    def test_full_reset_clears_latches(self) -> None:
        engine = graph_engine(
            [event("e", "afterXClicks", clickCount=1), add_wood("a")],
            [edge("e", "a")],
        )
        engine.click()
        engine.reset()
        engine.click()

        self.assertEqual(wood(engine), 1)
        self.assertEqual(len(engine.interpreter.counters), 1)


class ActionTest(unittest.TestCase):
    """Test actions that reach into the managers."""

    def test_start_runs_game_start_once(self) -> None:
        engine = graph_engine(
            [event("e", "onGameStart"), action("u", "unlockUpgrade", upgradeId="goldRush")],
            [edge("e", "u")],
        )
        self.assertFalse(engine.get_upgrade("goldRush").unlocked)

        engine.start()
        engine.start()

        self.assertTrue(engine.get_upgrade("goldRush").unlocked)

    def test_force_prestige(self) -> None:
        engine = graph_engine(
            [event("e", "afterXClicks", clickCount=2), action("p", "forcePrestige")],
            [edge("e", "p")],
        )
        engine.click()
        engine.click()
        engine.click()

        self.assertEqual(engine.prestige.level, 1)

    def test_apply_effect(self) -> None:
        engine = graph_engine(
            [event("e", "onGameStart"), action("fx", "applyEffect", effect={"type": "add_click_power", "value": 2})],
            [edge("e", "fx")],
        )
        engine.start()
        self.assertEqual(engine.click(), 3)

    def test_buy_and_notify(self) -> None:
        engine = graph_engine(
            [
                event("e", "onGameStart"),
                action("buy", "buyBuilding", buildingId="mine", amount=2),
                action("note", "showNotification", message="Bought!", duration=1),
            ],
            [edge("e", "buy"), edge("buy", "note")],
        )
        engine.resources.add_resource("gold", 5)
        engine.start()

        self.assertEqual(engine.buildings.owned("mine"), 2)
        self.assertEqual(len(engine.notifications), 1)
        for _ in range(10):
            engine.tick()
        self.assertEqual(engine.notifications.expire(), 1)


if __name__ == "__main__":
    unittest.main()
