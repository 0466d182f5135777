# backend/honeypot_intel/services/events/load_context.py
from dataclasses import dataclass, field
from typing import Dict, Optional

from honeypot_intel.services.normalize.timestamps import normalize_timestamp


@dataclass
class LoadContext:
    """
    State owned by one load -> expand -> aggregate cycle.

    `attempt_counts` maps a campaign/session id to the number of attempts
    the sensor declared for it. It is written during expansion only and read
    by the KPI summary afterwards.
    """
    attempt_counts: Dict[str, int] = field(default_factory=dict)

    files_read: int = 0
    lines_dropped: int = 0
    records_parsed: int = 0
    timestamps_defaulted: int = 0

    def record_attempts(self, attack_id: str, count: Optional[int]) -> None:
        if count and count > 0:
            self.attempt_counts[str(attack_id)] = count

    def timestamp(self, value: Optional[str]) -> str:
        return normalize_timestamp(value, on_fallback=self._timestamp_defaulted)

    def _timestamp_defaulted(self, _value: Optional[str]) -> None:
        self.timestamps_defaulted += 1
