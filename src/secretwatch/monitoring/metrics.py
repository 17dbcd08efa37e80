"""Metrics collection for the rotation watcher.

Counters are exported through the OpenTelemetry API. Local tallies are kept
as well so tests and health endpoints can read them without an SDK.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from secretwatch.__version__ import __version__
from secretwatch.logging import get_logger
from secretwatch.telemetry import get_meter


@dataclass
class WatcherStats:
    """Running totals for one watcher.

    Attributes:
        poll_cycles: Completed poll cycles (initial load excluded)
        fetch_failures: Fetches that produced no credential, by store key
        rotations: Rotation signals emitted (0 or 1 per watcher)
        last_cycle_at: When the last poll cycle finished
    """

    poll_cycles: int = 0
    fetch_failures: Dict[str, int] = field(default_factory=dict)
    rotations: int = 0
    last_cycle_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        data = asdict(self)
        data['last_cycle_at'] = self.last_cycle_at.isoformat() if self.last_cycle_at else None
        return data


class WatcherMetrics:
    """Collector for rotation watcher metrics.

    Attributes:
        watcher_name: Value of the ``watcher`` attribute on every data point
        stats: Local running totals
        meter: OpenTelemetry meter
    """

    def __init__(self, watcher_name: str = "confluent"):
        """Initialize metrics collector.

        Args:
            watcher_name: Name used to tag recorded data points
        """
        self.watcher_name = watcher_name
        self.logger = get_logger(__name__)
        self.stats = WatcherStats()
        self.meter = get_meter("secretwatch", __version__)
        self._setup_instruments()

    def _setup_instruments(self) -> None:
        """Setup OpenTelemetry instruments."""
        self.cycle_counter = self.meter.create_counter(
            "secretwatch.poll.cycles",
            description="Completed secret rotation poll cycles",
            unit="cycles"
        )

        self.failure_counter = self.meter.create_counter(
            "secretwatch.fetch.failures",
            description="Secret fetches that produced no valid credential",
            unit="fetches"
        )

        self.rotation_counter = self.meter.create_counter(
            "secretwatch.rotations",
            description="Secret rotations that triggered a restart",
            unit="rotations"
        )

    def record_cycle(self) -> None:
        self.stats.poll_cycles += 1
        self.stats.last_cycle_at = datetime.now(timezone.utc)
        self.cycle_counter.add(1, {"watcher": self.watcher_name})

    def record_fetch_failure(self, store_key: str, reason: str) -> None:
        self.stats.fetch_failures[store_key] = self.stats.fetch_failures.get(store_key, 0) + 1
        self.failure_counter.add(1, {"watcher": self.watcher_name, "store_key": store_key, "reason": reason})

    def record_rotation(self) -> None:
        self.stats.rotations += 1
        self.rotation_counter.add(1, {"watcher": self.watcher_name})
        self.logger.info("Recorded secret rotation", extra={"stats": self.stats.to_dict()})
