# backend/honeypot_intel/services/events/event_store_service.py

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Tuple

from honeypot_intel.core.config import settings
from honeypot_intel.schemas.events import Event
from honeypot_intel.schemas.raw_records import parse_raw_record
from honeypot_intel.services.events.expander import expand_record
from honeypot_intel.services.events.load_context import LoadContext
from honeypot_intel.services.events.placeholder import generate_placeholder_events
from honeypot_intel.services.ingest.ndjson_parser import parse_ndjson, read_ndjson_sources

logger = logging.getLogger(__name__)

# (source name, NDJSON text)
SourceLoader = Callable[[], Iterable[Tuple[str, str]]]


@dataclass(frozen=True)
class EventSnapshot:
    """One load cycle: every event, newest first, plus its LoadContext."""
    events: List[Event]
    context: LoadContext = field(default_factory=LoadContext)
    loaded_at: float = 0.0
    is_placeholder: bool = False


def build_snapshot(
    sources: Iterable[Tuple[str, str]],
    placeholder_count: int = 0,
    loaded_at: Optional[float] = None,
) -> EventSnapshot:
    """
    Parse + expand every source into a sorted snapshot.

    When nothing expands to an event and `placeholder_count` > 0, a
    synthetic dataset is returned instead (flagged `is_placeholder`).
    """
    ctx = LoadContext()
    events: List[Event] = []
    index = 0

    for name, text in sources:
        ctx.files_read += 1
        parsed = parse_ndjson(text, source=name)
        ctx.lines_dropped += parsed.dropped
        for data in parsed.records:
            record = parse_raw_record(data)
            ctx.records_parsed += 1
            events.extend(expand_record(record, index, ctx))
            index += 1

    loaded_at = time.time() if loaded_at is None else loaded_at

    if not events and placeholder_count > 0:
        logger.warning(
            "No events loaded from %d source(s); serving %d placeholder events",
            ctx.files_read,
            placeholder_count,
        )
        return EventSnapshot(
            events=generate_placeholder_events(placeholder_count),
            context=ctx,
            loaded_at=loaded_at,
            is_placeholder=True,
        )

    # canonical timestamps sort lexically; sort is stable for ties
    events.sort(key=lambda e: e.timestamp, reverse=True)

    logger.info(
        "Loaded %d events from %d records in %d source(s) (%d lines dropped, %d timestamps defaulted)",
        len(events),
        ctx.records_parsed,
        ctx.files_read,
        ctx.lines_dropped,
        ctx.timestamps_defaulted,
    )
    return EventSnapshot(events=events, context=ctx, loaded_at=loaded_at)


def _directory_loader() -> Iterable[Tuple[str, str]]:
    return read_ndjson_sources(settings.DATA_DIR, settings.DATA_GLOB)


class EventStoreService:
    """
    In-process event cache.

    The snapshot is rebuilt when older than `ttl_seconds`. There is a single
    writer (the load) and readers never mutate a snapshot, so no lock.
    """

    def __init__(
        self,
        loader: Optional[SourceLoader] = None,
        ttl_seconds: Optional[float] = None,
        placeholder_count: Optional[int] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader or _directory_loader
        self._ttl = settings.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        if placeholder_count is None:
            placeholder_count = (
                settings.PLACEHOLDER_EVENT_COUNT if settings.PLACEHOLDER_ENABLED else 0
            )
        self._placeholder_count = placeholder_count
        self._clock = clock
        self._cached: Optional[EventSnapshot] = None
        self._cached_at = 0.0

    # --------------------------------------------------------
    # Read
    # --------------------------------------------------------
    def get_snapshot(self) -> EventSnapshot:
        now = self._clock()
        if self._cached is not None and now - self._cached_at < self._ttl:
            return self._cached

        try:
            snapshot = build_snapshot(self._loader(), self._placeholder_count)
        except Exception:
            logger.exception("Failed to load honeypot data; falling back")
            snapshot = build_snapshot([], self._placeholder_count)

        self._cached = snapshot
        self._cached_at = now
        return self._cached

    def list_events(self) -> List[Event]:
        return self.get_snapshot().events

    # --------------------------------------------------------
    # Invalidate
    # --------------------------------------------------------
    def invalidate(self) -> None:
        self._cached = None
        self._cached_at = 0.0


event_store_service = EventStoreService()
