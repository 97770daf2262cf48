"""
Tests for ProximityScanner and TrackingGate.

Covers:
- boundary inclusivity of the (0.1, 3.2] km window
- signature derivation from the 0.1 km distance bucket
- signature progression while approaching a hazard, and no re-trigger when
  moving away and back within a recorded bucket
- every new trigger of a tick lands in the ledger, in hazard order
- gate predicate
"""

from __future__ import annotations

import unittest
from unittest.mock import patch

from custom_components.hazard_alert.alert_lifecycle import DedupLedger
from custom_components.hazard_alert.models import ScanConfig, alert_signature
from custom_components.hazard_alert.scanner import ProximityScanner, TrackingGate

from .test_common import ORIGIN, make_hazard, point_east_km


def _scanner() -> tuple[ProximityScanner, DedupLedger]:
    ledger = DedupLedger()
    return ProximityScanner(ScanConfig(), ledger), ledger


class TestQualifies(unittest.TestCase):

    def test_outer_bound_is_inclusive(self):
        scanner, _ = _scanner()
        self.assertTrue(scanner.qualifies(3.2))

    def test_just_past_outer_bound(self):
        scanner, _ = _scanner()
        self.assertFalse(scanner.qualifies(3.2001))

    def test_inner_bound_is_exclusive(self):
        scanner, _ = _scanner()
        self.assertFalse(scanner.qualifies(0.1))

    def test_just_past_inner_bound(self):
        scanner, _ = _scanner()
        self.assertTrue(scanner.qualifies(0.1001))

    def test_zero_does_not_qualify(self):
        scanner, _ = _scanner()
        self.assertFalse(scanner.qualifies(0.0))


class TestSignature(unittest.TestCase):

    def test_bucket_is_floor_of_tenths(self):
        self.assertEqual(alert_signature("hazard-1", 3.19), "hazard-1-31")
        self.assertEqual(alert_signature("hazard-1", 3.2), "hazard-1-32")
        self.assertEqual(alert_signature("hazard-1", 0.15), "hazard-1-1")


class TestEvaluate(unittest.TestCase):

    def test_boundaries_through_evaluate(self):
        """Exact distances are fed in by patching the distance function."""
        cases = {3.2: True, 3.2001: False, 0.1: False, 0.1001: True}
        for distance, expected in cases.items():
            with self.subTest(distance=distance):
                scanner, ledger = _scanner()
                with patch("custom_components.hazard_alert.scanner.distance_km", return_value=distance):
                    triggers = scanner.evaluate(ORIGIN, [make_hazard("h")])
                self.assertEqual(bool(triggers), expected)
                self.assertEqual(len(ledger), 1 if expected else 0)

    def test_hazard_out_of_range_produces_nothing(self):
        scanner, ledger = _scanner()
        self.assertEqual(scanner.evaluate(ORIGIN, [make_hazard(km=5.0)]), [])
        self.assertEqual(len(ledger), 0)

    def test_trigger_carries_hazard_distance_and_signature(self):
        scanner, ledger = _scanner()
        hazard = make_hazard("h", km=2.35)
        [trigger] = scanner.evaluate(ORIGIN, [hazard])
        self.assertIs(trigger.hazard, hazard)
        self.assertAlmostEqual(trigger.distance_km, 2.35, places=6)
        self.assertEqual(trigger.signature, "h-23")
        self.assertIn("h-23", ledger)

    def test_same_bucket_never_triggers_twice(self):
        scanner, _ = _scanner()
        hazards = [make_hazard("h", km=2.35)]
        self.assertEqual(len(scanner.evaluate(ORIGIN, hazards)), 1)
        self.assertEqual(scanner.evaluate(ORIGIN, hazards), [])

    def test_signature_progression_while_approaching(self):
        """
        Approaching from 3.19 km to 2.81 km: one new signature per bucket,
        each recorded exactly once.
        """
        scanner, ledger = _scanner()
        hazard = make_hazard("h", km=0.0)
        seen = []
        for km in (3.19, 3.15, 3.05, 2.95, 2.92, 2.81):
            # Position km west of the hazard sitting at the origin
            position = point_east_km(-km)
            seen.extend(t.signature for t in scanner.evaluate(position, [hazard]))

        self.assertEqual(seen, ["h-31", "h-30", "h-29", "h-28"])
        self.assertEqual(len(seen), len(set(seen)))
        self.assertEqual(ledger.signatures(), frozenset(seen))

    def test_moving_away_and_back_within_bucket_does_not_retrigger(self):
        scanner, _ = _scanner()
        hazard = make_hazard("h", km=0.0)
        first = scanner.evaluate(point_east_km(-2.95), [hazard])
        away = scanner.evaluate(point_east_km(-5.0), [hazard])
        back = scanner.evaluate(point_east_km(-2.91), [hazard])

        self.assertEqual([t.signature for t in first], ["h-29"])
        self.assertEqual(away, [])
        self.assertEqual(back, [])

    def test_multiple_new_triggers_returned_in_hazard_order(self):
        scanner, ledger = _scanner()
        hazards = [make_hazard("a", km=1.55), make_hazard("b", km=5.0), make_hazard("c", km=2.55)]
        triggers = scanner.evaluate(ORIGIN, hazards)
        self.assertEqual([t.hazard.id for t in triggers], ["a", "c"])
        self.assertEqual(ledger.signatures(), frozenset({"a-15", "c-25"}))


class TestTrackingGate(unittest.TestCase):

    def test_open_when_everything_present(self):
        self.assertTrue(TrackingGate().is_open(ORIGIN, [make_hazard()]))

    def test_closed_without_position(self):
        self.assertFalse(TrackingGate().is_open(None, [make_hazard()]))

    def test_closed_without_hazards(self):
        self.assertFalse(TrackingGate().is_open(ORIGIN, []))

    def test_closed_when_tracking_disabled(self):
        self.assertFalse(TrackingGate(tracking_enabled=False).is_open(ORIGIN, [make_hazard()]))

    def test_closed_when_alerts_disabled(self):
        self.assertFalse(TrackingGate(alerts_enabled=False).is_open(ORIGIN, [make_hazard()]))
