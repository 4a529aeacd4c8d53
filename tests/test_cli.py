"""CLI Tests.

Runs the typer commands in-process against the bundled template.
"""

import tempfile
import unittest
from pathlib import Path

import yaml
from typer.testing import CliRunner

from idlekit_core.loader import DEFAULT_TEMPLATE_PATH
from idlekit_engine.cli import MAX_BUILDINGS_PER_TICK, _Autoplayer, app
from idlekit_engine.engine import GameEngine

FREE_SHRINE = {
    "meta": {"name": "Shrines", "version": "1.0.0"},
    "primary": {"name": "Gold", "namePlural": "Gold", "clickVerb": "Pray"},
    "resources": [{"id": "gold", "clickable": True}],
    "buildings": [{"id": "shrine", "cost": [{"resourceId": "gold", "baseAmount": 0}]}],
}


class CliTest(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def test_validate_default_template(self) -> None:
        result = self.runner.invoke(app, ["validate", str(DEFAULT_TEMPLATE_PATH)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("is valid", result.output)

    def test_validate_reports_errors(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.yaml"
            path.write_text(yaml.safe_dump({
                "meta": {"name": "Broken", "version": "1.0.0"},
                "primary": {"name": "Point", "namePlural": "Points"},
                "buildings": [{"id": "mine", "cost": [{"resourceId": "gold", "baseAmount": 1}]}],
            }), encoding="utf-8")
            result = self.runner.invoke(app, ["validate", str(path)])

        self.assertEqual(result.exit_code, 1)
        self.assertIn("unknown resource 'gold'", result.output)

    def test_validate_missing_file(self) -> None:
        result = self.runner.invoke(app, ["validate", "/nonexistent/game.yaml"])
        self.assertEqual(result.exit_code, 1)

    def test_inspect(self) -> None:
        result = self.runner.invoke(app, ["inspect", str(DEFAULT_TEMPLATE_PATH)])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("no problems found", result.output)

    def test_run(self) -> None:
        result = self.runner.invoke(
            app, ["run", str(DEFAULT_TEMPLATE_PATH), "--ticks", "20", "-c", "1", "-b", "cursor"]
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Simulation", result.output)
        self.assertIn("Welcome to Idle Clicker!", result.output)

    def test_run_with_free_building_finishes(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "shrines.yaml"
            path.write_text(yaml.safe_dump(FREE_SHRINE), encoding="utf-8")
            result = self.runner.invoke(app, ["run", str(path), "--ticks", "3", "-b", "shrine"])

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn(str(3 * MAX_BUILDINGS_PER_TICK), result.output)

    def test_autoplayer_caps_purchases_per_tick(self) -> None:
        engine = GameEngine(FREE_SHRINE)
        player = _Autoplayer(engine, clicks=0, buildings=["shrine"], upgrades=[])

        player.tick()

        self.assertEqual(engine.buildings.owned("shrine"), MAX_BUILDINGS_PER_TICK)
        self.assertEqual(engine.current_tick, 1)

    def test_clicker(self) -> None:
        result = self.runner.invoke(app, ["clicker", "--ticks", "50", "--clicks", "20"])
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Upgrades", result.output)


if __name__ == "__main__":
    unittest.main()
