"""
Tests for AlertEngine: gate-driven scan start/stop, immediate evaluation,
periodic ticks, last-trigger-wins per tick, dismissal, route bearing and
shutdown.
"""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import MagicMock

from custom_components.hazard_alert.engine import AlertEngine
from custom_components.hazard_alert.models import Coordinate, Destination

from .test_common import FAST_CONFIG, ORIGIN, make_hazard, point_east_km


class TestGate(unittest.IsolatedAsyncioTestCase):

    async def asyncTearDown(self):
        for engine in getattr(self, "_engines", []):
            engine.shutdown()

    def _engine(self, **kwargs) -> AlertEngine:
        engine = AlertEngine(FAST_CONFIG, **kwargs)
        self._engines = getattr(self, "_engines", []) + [engine]
        return engine

    async def test_no_scan_without_hazards(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        self.assertFalse(engine.is_scanning)

    async def test_no_scan_without_position(self):
        engine = self._engine()
        engine.on_hazards_changed([make_hazard()])
        self.assertFalse(engine.is_scanning)

    async def test_scan_starts_with_immediate_evaluation(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])

        # No timer has fired yet, the alert comes from the start-up evaluation
        self.assertTrue(engine.is_scanning)
        self.assertIsNotNone(engine.active_alert)
        self.assertEqual(engine.active_alert.signature, "h-20")

    async def test_periodic_tick_picks_up_new_position(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=0.0)])
        self.assertIsNone(engine.active_alert)  # standing on the hazard

        engine.on_position_update(point_east_km(-1.55))
        self.assertIsNone(engine.active_alert)  # waits for the next tick
        await asyncio.sleep(FAST_CONFIG.tick_interval * 1.6)
        self.assertEqual(engine.active_alert.signature, "h-15")

    async def test_disabling_alerts_stops_scan_and_clears_alert(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        self.assertIsNotNone(engine.active_alert)

        engine.set_alerts_enabled(False)
        self.assertFalse(engine.is_scanning)
        self.assertIsNone(engine.active_alert)
        self.assertFalse(engine.lifecycle.expiry_pending)

        # A new bucket while disabled must not trigger on any later tick
        engine.on_position_update(point_east_km(0.5))
        await asyncio.sleep(FAST_CONFIG.tick_interval * 3)
        self.assertIsNone(engine.active_alert)
        self.assertEqual(engine.ledger.signatures(), frozenset({"h-20"}))

    async def test_disabling_tracking_stops_scan(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard()])
        engine.set_tracking_enabled(False)
        self.assertFalse(engine.is_scanning)

    async def test_reenabling_evaluates_current_position_immediately(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        engine.set_alerts_enabled(False)

        engine.on_position_update(point_east_km(0.5))
        engine.set_alerts_enabled(True)

        self.assertTrue(engine.is_scanning)
        self.assertEqual(engine.active_alert.signature, "h-15")

    async def test_start_is_idempotent(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard()])
        task = engine._scan_task
        engine.on_position_update(point_east_km(0.1))
        engine.set_alerts_enabled(True)
        self.assertIs(engine._scan_task, task)

    async def test_emptying_hazards_stops_scan(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard()])
        engine.on_hazards_changed([])
        self.assertFalse(engine.is_scanning)

    async def test_shutdown_cancels_everything(self):
        engine = self._engine()
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        engine.shutdown()
        self.assertFalse(engine.is_scanning)
        self.assertIsNone(engine.active_alert)
        self.assertFalse(engine.lifecycle.expiry_pending)


class TestTick(unittest.IsolatedAsyncioTestCase):

    async def test_last_evaluated_trigger_wins(self):
        engine = AlertEngine(FAST_CONFIG)
        first = make_hazard("first", km=1.25)
        last = make_hazard("last", km=2.75)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([first, last])

        self.assertIs(engine.active_alert.hazard, last)
        self.assertIn("first-12", engine.ledger)
        self.assertIn("last-27", engine.ledger)
        engine.shutdown()

    async def test_tick_without_new_triggers_keeps_alert(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        alert = engine.active_alert
        self.assertIsNone(engine.tick())
        self.assertIs(engine.active_alert, alert)
        engine.shutdown()

    async def test_dismissed_signature_never_resurfaces(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        self.assertTrue(engine.dismiss())
        self.assertIsNone(engine.tick())
        self.assertIsNone(engine.active_alert)
        self.assertIn("h-20", engine.ledger)
        engine.shutdown()

    async def test_alert_expires_while_scanning(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        await asyncio.sleep(FAST_CONFIG.alert_duration * 1.5)
        self.assertIsNone(engine.active_alert)
        self.assertTrue(engine.is_scanning)
        engine.shutdown()

    async def test_tick_without_position_is_noop(self):
        engine = AlertEngine(FAST_CONFIG)
        self.assertIsNone(engine.tick())

    async def test_tick_with_alerts_disabled_is_noop(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.set_alerts_enabled(False)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])

        self.assertIsNone(engine.tick())
        self.assertFalse(engine.is_scanning)
        self.assertIsNone(engine.active_alert)
        self.assertEqual(len(engine.ledger), 0)

    async def test_tick_with_tracking_disabled_is_noop(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.set_tracking_enabled(False)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])

        self.assertIsNone(engine.tick())
        self.assertIsNone(engine.active_alert)
        self.assertEqual(len(engine.ledger), 0)

    async def test_cue_and_on_change_called(self):
        cue = MagicMock()
        on_change = MagicMock()
        engine = AlertEngine(FAST_CONFIG, cue=cue, on_change=on_change)
        engine.on_position_update(ORIGIN)
        engine.on_hazards_changed([make_hazard("h", km=2.05)])
        cue.assert_called_once()
        self.assertTrue(on_change.called)
        engine.shutdown()


class TestRoute(unittest.TestCase):

    def test_bearing_defaults_to_zero(self):
        engine = AlertEngine(FAST_CONFIG)
        self.assertEqual(engine.bearing, 0.0)
        self.assertIsNone(engine.route_distance_km)

    def test_bearing_and_distance_to_destination(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.on_position_update(Coordinate(0, 0))
        engine.set_destination(Destination("East", Coordinate(0, 1)))
        self.assertAlmostEqual(engine.bearing, 90.0, places=6)
        self.assertAlmostEqual(engine.route_distance_km, 111.19, delta=0.5)
        self.assertAlmostEqual(engine.route_estimate_km, 111.0)

    def test_bearing_follows_position(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.on_position_update(Coordinate(0, 0))
        engine.set_destination(Destination("North", Coordinate(1, 0)))
        self.assertAlmostEqual(engine.bearing, 0.0, places=6)
        engine.on_position_update(Coordinate(2, 0))
        self.assertAlmostEqual(engine.bearing, 180.0, places=6)

    def test_bearing_kept_after_route_ends(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.on_position_update(Coordinate(0, 0))
        engine.set_destination(Destination("East", Coordinate(0, 1)))
        engine.clear_destination()
        engine.on_position_update(Coordinate(5, 5))
        self.assertAlmostEqual(engine.bearing, 90.0, places=6)
        self.assertIsNone(engine.route_distance_km)

    def test_hazard_distances_sorted_nearest_first(self):
        engine = AlertEngine(FAST_CONFIG)
        engine.set_alerts_enabled(False)
        engine.on_hazards_changed([make_hazard("far", km=4.0), make_hazard("near", km=1.0)])
        engine.on_position_update(ORIGIN)
        self.assertEqual([h.id for h, _ in engine.hazard_distances()], ["near", "far"])
