from __future__ import annotations

import logging
import threading
from typing import Optional

from .service import QRCodeService

logger = logging.getLogger(__name__)


class ExpiredTokenSweeper:
    """Runs QRCodeService.sweep_expired on a daemon thread every `interval_seconds`."""

    def __init__(self, service: QRCodeService, interval_seconds: float):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._service = service
        self._interval = float(interval_seconds)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> int:
        try:
            return self._service.sweep_expired()
        except Exception:
            # Keep the loop alive; the next tick retries.
            logger.exception("Expired QR code sweep failed")
            return 0

    def _loop(self) -> None:
        while not self._stop.wait(self._interval):
            self.run_once()

    def start(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._loop, name="qr-expiry-sweeper", daemon=True)
        self._thread.start()
        logger.info("QR expiry sweeper started (every %ss)", self._interval)

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
