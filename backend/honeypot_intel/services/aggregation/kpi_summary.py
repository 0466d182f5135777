# backend/honeypot_intel/services/aggregation/kpi_summary.py
from typing import Dict, List

from honeypot_intel.schemas.aggregates import KPISummary
from honeypot_intel.schemas.events import Event


def summarize(events: List[Event], attempt_counts: Dict[str, int]) -> KPISummary:
    """
    KPIs for a filtered event set.

    "Attacks" are distinct source records (original ids). "Attempts" use the
    totals sensors declared for those records when any are known, since a
    campaign may report far more attempts than it recorded individually.
    """
    attack_ids = list(dict.fromkeys(e.original_id for e in events if e.original_id))
    declared = sum(attempt_counts.get(attack_id, 0) for attack_id in attack_ids)
    total_attempts = declared if declared > 0 else len(events)

    return KPISummary(
        total_attacks=len(attack_ids) or total_attempts,
        total_attempts=total_attempts,
        unique_ips=len({e.src_ip for e in events}),
        unique_sensors=len({e.sensor for e in events}),
        unique_countries=len(
            {e.geoip.country_iso_code for e in events if e.geoip and e.geoip.country_iso_code}
        ),
    )
