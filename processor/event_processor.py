"""Event processor for transforming raw release records into served events."""
import logging
import re
from datetime import datetime
from typing import List, Optional

from processor.models import Event, RawEvent

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor for normalizing raw event records."""

    TITLE_SANITIZE_PATTERN = re.compile(r'[^a-zA-Z0-9]')
    DATE_PREFIX_LENGTH = 10
    ISO_DATE_TIME_PATTERN = re.compile(
        r'\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d{1,9})?)?(Z|[+-]\d{2}:\d{2})?'
    )

    def process_events(
        self,
        raw_events: List[RawEvent],
        now: Optional[datetime] = None
    ) -> List[Event]:
        """
        Transform raw records into events, preserving order.

        Unlike a lenient import, a record that cannot be transformed fails
        the whole batch so the caller keeps its previous data.

        Args:
            raw_events: List of RawEvent objects from the fetcher
            now: Reference time for the upcoming flag (default: local now)

        Returns:
            List of Event objects
        """
        if now is None:
            now = datetime.now()

        events = [self.transform(raw, now) for raw in raw_events]

        logger.info(
            f"Processed {len(events)} events "
            f"({sum(1 for e in events if e.is_upcoming)} upcoming)"
        )
        return events

    def transform(self, raw: RawEvent, now: datetime) -> Event:
        """
        Transform a single raw record.

        Args:
            raw: Raw event record
            now: Reference time for the upcoming flag

        Returns:
            Event object
        """
        event_id = raw.event_id or self.generate_event_id(
            title=raw.title,
            start_date=raw.start_date
        )

        return Event(
            id=event_id,
            title=raw.title,
            date_display=self.build_date_display(
                raw.date_display,
                raw.month,
                raw.weekday
            ),
            start_date=raw.start_date,
            end_date=raw.end_date,
            location=raw.location,
            organizer=raw.organizer,
            description=raw.description,
            url=raw.url,
            is_upcoming=self.is_upcoming(raw.start_date, now)
        )

    def generate_event_id(self, title: str, start_date: str) -> str:
        """
        Derive a stable identifier from title and start date.

        Titles that sanitize to the same string on the same day share an id.

        Args:
            title: Event title
            start_date: ISO-8601 start timestamp

        Returns:
            Identifier such as "20241107-test-event"
        """
        sanitized_title = self.TITLE_SANITIZE_PATTERN.sub('-', title).lower()
        date_prefix = start_date[:self.DATE_PREFIX_LENGTH].replace('-', '')
        return f"{date_prefix}-{sanitized_title}"

    @staticmethod
    def build_date_display(day: str, month: str, weekday: str) -> str:
        """Compose the presentational date, e.g. "07 nov. nov. (jeu.)"."""
        return f"{day} {month} ({weekday})"

    @classmethod
    def is_upcoming(cls, start_date: str, now: datetime) -> bool:
        """
        Check whether an event starts strictly after now.

        Only extended ISO-8601 date-times (YYYY-MM-DDTHH:MM[:SS[.f]][offset])
        are accepted; date-only or compact forms are never upcoming. Offsets
        are dropped and the timestamp read as local wall-clock time.
        """
        if not isinstance(start_date, str) or not cls.ISO_DATE_TIME_PATTERN.fullmatch(start_date):
            logger.debug(f"Unparseable start date: {start_date!r}")
            return False

        try:
            event_date = datetime.fromisoformat(start_date)
        except (TypeError, ValueError):
            logger.debug(f"Unparseable start date: {start_date!r}")
            return False

        return event_date.replace(tzinfo=None) > now.replace(tzinfo=None)
