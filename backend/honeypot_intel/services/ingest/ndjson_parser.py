# backend/honeypot_intel/services/ingest/ndjson_parser.py
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    records: List[Dict[str, Any]] = field(default_factory=list)
    dropped: int = 0


def parse_ndjson(text: str, source: Optional[str] = None) -> ParseResult:
    """
    Split newline-delimited JSON into one dict per line.

    Blank lines are skipped. A line that is not valid JSON, or is JSON but
    not an object, is dropped with a warning; the rest of the file is kept.
    """
    result = ParseResult()
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            record = json.loads(line)
        except json.JSONDecodeError as e:
            logger.warning(
                "Skipping invalid NDJSON line %s:%d (%s)", source or "<text>", lineno, e
            )
            result.dropped += 1
            continue

        if not isinstance(record, dict):
            logger.warning(
                "Skipping non-object NDJSON line %s:%d (%s)",
                source or "<text>",
                lineno,
                type(record).__name__,
            )
            result.dropped += 1
            continue

        result.records.append(record)
    return result


def read_ndjson_sources(data_dir: str, pattern: str = "*.ndjson") -> List[Tuple[str, str]]:
    """
    Read every sensor export under `data_dir` as (file name, text) pairs.
    Unreadable files are logged and skipped so one broken export doesn't
    hide the others.
    """
    root = Path(data_dir)
    if not root.is_dir():
        logger.warning("Sensor data directory %s does not exist", root)
        return []

    sources: List[Tuple[str, str]] = []
    for path in sorted(root.glob(pattern)):
        try:
            sources.append((path.name, path.read_text(encoding="utf-8")))
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to read sensor export %s: %s", path, e)
    return sources
