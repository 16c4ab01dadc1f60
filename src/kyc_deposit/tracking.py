"""
Conversion tracking — pixel-style event sink.

Tracking is fire-and-forget: emitter failures never reach the caller.
"""

import logging
from decimal import Decimal
from typing import Any, Callable, Optional, Protocol

logger = logging.getLogger(__name__)

Emitter = Callable[[str, str, Optional[dict[str, Any]]], None]


class TrackingSink(Protocol):
    def track_purchase(self, value: Decimal) -> None: ...


def _log_emitter(action: str, event: str, data: Optional[dict[str, Any]] = None) -> None:
    logger.info("pixel %s %s %s", action, event, data or {})


class PixelTracker:
    def __init__(self, emit: Optional[Emitter] = None, currency: str = "BRL"):
        self._emit = emit or _log_emitter
        self._currency = currency

    def _send(self, event: str, data: Optional[dict[str, Any]] = None) -> None:
        try:
            self._emit("track", event, data)
        except Exception as e:
            logger.debug(f"Tracking {event} dropped: {e}")

    def track_page_view(self) -> None:
        self._send("PageView")

    def track_lead(self, user_data: Optional[dict[str, Any]] = None) -> None:
        self._send("Lead", user_data)

    def track_purchase(self, value: Decimal, currency: Optional[str] = None) -> None:
        self._send("Purchase", {"value": float(value), "currency": currency or self._currency})


class RecordingTracker:
    """Keeps every tracked purchase in memory."""

    def __init__(self) -> None:
        self.purchases: list[Decimal] = []

    def track_purchase(self, value: Decimal) -> None:
        self.purchases.append(value)
