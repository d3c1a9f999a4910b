import logging
import uuid
from datetime import datetime, timezone
from typing import Mapping, Optional

from tenantkit.app.services.ports import ClockPort, MetricsPort, UuidPort

logger = logging.getLogger(__name__)


class SystemClock(ClockPort):
    """Wall clock in UTC"""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class Uuid4Generator(UuidPort):
    def generate(self) -> str:
        return str(uuid.uuid4())


class LoggingMetrics(MetricsPort):
    """Metrics sink writing counters and timings to the log at DEBUG"""

    def increment(self, name: str, tags: Optional[Mapping[str, str]] = None) -> None:
        logger.debug("metric %s +1 %s", name, dict(tags or {}))

    def timing(self, name: str, milliseconds: float, tags: Optional[Mapping[str, str]] = None) -> None:
        logger.debug("metric %s %.2fms %s", name, milliseconds, dict(tags or {}))
