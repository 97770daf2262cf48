"""
DedupLedger and AlertLifecycle: the single active alert and its display window.

This is a pure asyncio primitive with no HA or network dependencies. Expiry
is scheduled with loop.call_later on the running event loop, so every method
that schedules must be called from the loop.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import datetime, timezone

from .models import HazardReport, ProximityAlert, alert_signature

_LOGGER = logging.getLogger(__name__)


class DedupLedger:
    """
    Signatures already handed to the alert lifecycle.

    Append-only unless max_age is set, in which case entries older than
    max_age seconds are forgotten on the next lookup.
    """

    def __init__(self, max_age: float | None = None, clock: Callable[[], float] = time.monotonic) -> None:
        # signature → monotonic time it was recorded
        self._seen: dict[str, float] = {}
        self._max_age = max_age
        self._clock = clock

    def add(self, signature: str) -> None:
        self._seen.setdefault(signature, self._clock())

    def signatures(self) -> frozenset[str]:
        self._evict()
        return frozenset(self._seen)

    def _evict(self) -> None:
        if self._max_age is None:
            return
        cutoff = self._clock() - self._max_age
        expired = [sig for sig, recorded in self._seen.items() if recorded < cutoff]
        for sig in expired:
            del self._seen[sig]
        if expired:
            _LOGGER.debug("Evicted %s signatures from the dedup ledger", len(expired))

    def __contains__(self, signature: object) -> bool:
        self._evict()
        return signature in self._seen

    def __len__(self) -> int:
        self._evict()
        return len(self._seen)


class AlertLifecycle:
    """
    Owns the one currently displayed ProximityAlert.

    trigger() always replaces the active alert (no queue) and restarts the
    expiry timer. The cue callback is best-effort: whatever it raises is
    logged and dropped.
    """

    def __init__(
        self,
        alert_duration: float,
        cue: Callable[[ProximityAlert], None] | None = None,
        on_change: Callable[[ProximityAlert | None], None] | None = None,
    ) -> None:
        self._alert_duration = alert_duration
        self._cue = cue
        self._on_change = on_change
        self._active: ProximityAlert | None = None
        self._expiry: asyncio.TimerHandle | None = None

    @property
    def active(self) -> ProximityAlert | None:
        return self._active

    @property
    def expiry_pending(self) -> bool:
        return self._expiry is not None

    def trigger(self, hazard: HazardReport, distance_km: float) -> ProximityAlert:
        """Show a new alert for hazard, replacing whatever was active."""
        alert = ProximityAlert(
            signature=alert_signature(hazard.id, distance_km),
            hazard=hazard,
            distance_km=distance_km,
            triggered_at=datetime.now(timezone.utc),
        )
        self._cancel_expiry()
        self._active = alert
        self._expiry = asyncio.get_running_loop().call_later(self._alert_duration, self._expire)
        _LOGGER.debug("Alert %s active for %.1fs", alert.signature, self._alert_duration)

        self._play_cue(alert)
        self._notify()
        return alert

    def dismiss(self) -> bool:
        """Clear the active alert early. Returns False when nothing was shown."""
        if self._active is None:
            return False
        _LOGGER.debug("Alert %s dismissed", self._active.signature)
        self._clear()
        return True

    def cancel(self) -> None:
        """Drop the active alert and any pending expiry without a trace."""
        had_alert = self._active is not None
        self._cancel_expiry()
        self._active = None
        if had_alert:
            self._notify()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _expire(self) -> None:
        self._expiry = None
        if self._active is not None:
            _LOGGER.debug("Alert %s expired", self._active.signature)
        self._clear()

    def _clear(self) -> None:
        self._cancel_expiry()
        self._active = None
        self._notify()

    def _cancel_expiry(self) -> None:
        if self._expiry is not None:
            self._expiry.cancel()
            self._expiry = None

    def _play_cue(self, alert: ProximityAlert) -> None:
        if self._cue is None:
            return
        try:
            self._cue(alert)
        except Exception as exc:  # noqa: BLE001
            _LOGGER.debug("Alert cue failed for %s: %s", alert.signature, exc)

    def _notify(self) -> None:
        if self._on_change is not None:
            self._on_change(self._active)
