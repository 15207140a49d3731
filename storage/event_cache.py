"""In-memory event cache refreshed from the upstream release feed."""
import logging
import threading
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from fetcher.exceptions import AssetNotFoundError, UpstreamError
from processor.event_processor import EventProcessor
from processor.models import CacheSnapshot, Event, RefreshResult

logger = logging.getLogger(__name__)


class EventCache:
    """
    Read-mostly cache of transformed events.

    Readers grab the current immutable snapshot without waiting on a refresh.
    Refresh cycles are serialized by a lock; the network call and the
    transformation run before the snapshot reference is swapped, so readers
    see either the previous snapshot or the new one in full.
    """

    CACHE_DURATION_HOURS = 1
    NEVER_REFRESHED = "never"

    def __init__(self, fetcher, processor: Optional[EventProcessor] = None):
        """
        Initialize an empty cache.

        Args:
            fetcher: Object exposing fetch_events() -> List[RawEvent]
            processor: Transformer for raw records (default: EventProcessor())
        """
        self.fetcher = fetcher
        self.processor = processor or EventProcessor()
        self._snapshot = CacheSnapshot()
        self._refresh_lock = threading.Lock()

    @property
    def snapshot(self) -> CacheSnapshot:
        """Current snapshot."""
        return self._snapshot

    def initialize(self) -> RefreshResult:
        """
        Load the cache once at startup.

        On failure the cache stays empty until the next scheduled refresh.
        """
        logger.info("Initializing event cache and loading initial data...")
        return self.refresh()

    def get_all(self) -> Tuple[Event, ...]:
        """Return all cached events."""
        events = self._snapshot.events
        logger.debug(f"Retrieving all events from cache ({len(events)} events)")
        return events

    def get_upcoming(self) -> List[Event]:
        """Return cached events that have not started yet, in cache order."""
        upcoming = [event for event in self._snapshot.events if event.is_upcoming]
        logger.debug(f"Retrieving upcoming events from cache ({len(upcoming)} events)")
        return upcoming

    def get_cache_info(self) -> Dict[str, Any]:
        """Return cache metadata for health reporting."""
        snapshot = self._snapshot
        last_refresh = (
            snapshot.last_refresh.isoformat()
            if snapshot.last_refresh is not None
            else self.NEVER_REFRESHED
        )
        return {
            'totalEvents': len(snapshot.events),
            'upcomingEvents': sum(1 for event in snapshot.events if event.is_upcoming),
            'lastRefresh': last_refresh,
            'cacheDurationHours': self.CACHE_DURATION_HOURS
        }

    def refresh(self) -> RefreshResult:
        """
        Reload events from upstream and swap the snapshot.

        Never raises. A failed cycle is logged and leaves the current
        snapshot untouched.

        Returns:
            RefreshResult describing the outcome
        """
        with self._refresh_lock:
            logger.info("Refreshing events from GitHub API...")

            try:
                raw_events = self.fetcher.fetch_events()
                events = tuple(self.processor.process_events(raw_events))
            except AssetNotFoundError as e:
                logger.error(
                    f"Failed to refresh events: {e}",
                    extra={
                        'error_type': type(e).__name__,
                        'repository': e.repository,
                        'asset_name': e.asset_name
                    }
                )
                return self._failure(e)
            except UpstreamError as e:
                logger.error(
                    f"Failed to refresh events: {e}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                return self._failure(e)
            except Exception as e:
                logger.error(
                    f"Failed to transform events: {e}",
                    extra={'error_type': type(e).__name__},
                    exc_info=True
                )
                return self._failure(e)

            new_snapshot = CacheSnapshot(
                events=events,
                last_refresh=datetime.now(timezone.utc)
            )
            self._snapshot = new_snapshot

            upcoming_count = sum(1 for event in events if event.is_upcoming)
            logger.info(
                f"Successfully refreshed {len(events)} events ({upcoming_count} upcoming)",
                extra={
                    'total_events': len(events),
                    'upcoming_events': upcoming_count
                }
            )
            return RefreshResult(
                success=True,
                total_events=len(events),
                upcoming_events=upcoming_count
            )

    def force_refresh(self) -> RefreshResult:
        """
        Refresh on demand.

        Waits for a refresh already in progress, then runs its own cycle.
        """
        logger.info("Manual refresh triggered")
        return self.refresh()

    def _failure(self, error: Exception) -> RefreshResult:
        """Build the result of a failed cycle; the snapshot is kept as is."""
        snapshot = self._snapshot
        logger.warning(
            f"Keeping existing cache with {len(snapshot.events)} events",
            extra={'total_events': len(snapshot.events)}
        )
        return RefreshResult(
            success=False,
            total_events=len(snapshot.events),
            upcoming_events=sum(1 for event in snapshot.events if event.is_upcoming),
            error_type=type(error).__name__,
            error_message=str(error)
        )
