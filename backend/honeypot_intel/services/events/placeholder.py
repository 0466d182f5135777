# backend/honeypot_intel/services/events/placeholder.py
"""
Synthetic events shown when no sensor export could be loaded, so the
dashboard never renders empty. Disabled with PLACEHOLDER_ENABLED=false.
"""
import random
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from honeypot_intel.schemas.events import (
    AbuseIPDBIntel,
    Event,
    GeoIP,
    GeoLocation,
    HTTPInfo,
    MalwareBazaarIntel,
    MitreEntry,
    SSHCredentials,
    ThreatIntel,
    VirusTotalIntel,
)
from honeypot_intel.services.normalize.timestamps import format_instant

SENSORS = {"cowrie-1": "cowrie", "dionaea-1": "dionaea", "canary-1": "opencanary"}
PROTOCOL_EVENT_TYPES = {
    "ssh": "ssh_login_attempt",
    "http": "http_probe",
    "ftp": "ftp_connection",
    "smb": "malware_download",
}
PORTS = [22, 80, 21, 445, 443, 3389, 3306, 5432]
CITIES = [
    ("US", 37.77, -122.42, "San Francisco"),
    ("DE", 52.52, 13.4, "Berlin"),
    ("CN", 39.9, 116.4, "Beijing"),
    ("GB", 51.5, -0.12, "London"),
    ("RU", 55.75, 37.61, "Moscow"),
    ("BR", -23.55, -46.63, "Sao Paulo"),
    ("FR", 48.85, 2.35, "Paris"),
    ("IN", 28.61, 77.2, "New Delhi"),
    ("JP", 35.68, 139.76, "Tokyo"),
    ("NL", 52.37, 4.89, "Amsterdam"),
]
USERNAMES = ["root", "admin", "user", "test", "ubuntu", "pi", "oracle", "postgres"]
PASSWORDS = ["123456", "password", "admin123", "root", "12345678", "qwerty", "raspberry"]
URLS = [
    "http://example.com/login",
    "http://example.com/admin",
    "https://example.com/api",
    "http://example.com/wp-admin",
    "http://example.com/phpmyadmin",
]
MALWARE_FAMILIES = ["Mirai", "Emotet", "TrickBot", "Qakbot", "Zeus", "Dridex", "Cobalt Strike"]
MITRE_TACTICS = [
    MitreEntry(tactic="Initial Access", technique="T1190"),
    MitreEntry(tactic="Credential Access", technique="T1110"),
    MitreEntry(tactic="Discovery", technique="T1046"),
    MitreEntry(tactic="Command and Control", technique="T1071"),
    MitreEntry(tactic="Execution", technique="T1059"),
]


def _threat_intel(rng: random.Random) -> ThreatIntel:
    detections = rng.randint(0, 69)
    malware = None
    if rng.random() > 0.7:
        malware = MalwareBazaarIntel(
            family=rng.choice(MALWARE_FAMILIES),
            hash="%032x" % rng.getrandbits(128),
        )
    mitre = rng.sample(MITRE_TACTICS, rng.randint(1, 3)) if rng.random() > 0.5 else []
    return ThreatIntel(
        abuseipdb=AbuseIPDBIntel(score=rng.randint(0, 99)),
        virustotal=VirusTotalIntel(reputation=-detections, detections=detections),
        malwarebazaar=malware,
        mitre=mitre,
    )


def generate_placeholder_events(
    count: int, now: Optional[datetime] = None, seed: int = 1337
) -> List[Event]:
    """`count` events spread over the 30 days before `now`, newest first."""
    rng = random.Random(seed)
    now = now or datetime.now(timezone.utc)

    events: List[Event] = []
    for i in range(count):
        sensor = rng.choice(list(SENSORS))
        protocol = rng.choice(list(PROTOCOL_EVENT_TYPES))
        iso, lat, lon, city = rng.choice(CITIES)
        ts = now - timedelta(seconds=rng.uniform(0, 30 * 24 * 3600))

        events.append(
            Event(
                id=f"evt-{i + 1:04d}",
                original_id=f"evt-{i + 1:04d}",
                timestamp=format_instant(ts),
                sensor=sensor,
                sensor_type=SENSORS[sensor],
                src_ip=".".join(str(rng.randint(1, 254)) for _ in range(4)),
                dst_port=rng.choice(PORTS),
                protocol=protocol,
                event_type=PROTOCOL_EVENT_TYPES[protocol],
                geoip=GeoIP(
                    country_iso_code=iso,
                    city_name=city,
                    location=GeoLocation(lat=lat, lon=lon),
                ),
                ssh=SSHCredentials(username=rng.choice(USERNAMES), password=rng.choice(PASSWORDS))
                if protocol == "ssh" and rng.random() > 0.3
                else None,
                http=HTTPInfo(url=rng.choice(URLS)) if protocol == "http" and rng.random() > 0.3 else None,
                ti=_threat_intel(rng) if rng.random() > 0.3 else None,
            )
        )

    events.sort(key=lambda e: e.timestamp, reverse=True)
    return events
