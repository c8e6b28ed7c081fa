# ==============================================================================
# Ingestion Validator
# ==============================================================================
"""
Validation and normalization of collector batches.

A batch is ``{site_id, session_id, events: [...]}``. It is accepted or
rejected as a whole: the first malformed event fails the batch before anything
reaches the store, and the store write itself is a single atomic append.

Retried batches are not deduplicated; the collector's fire-and-forget delivery
makes occasional duplicates an accepted cost.
"""

import logging
from collections.abc import Mapping

from pydantic import ValidationError

from sitepulse.base import EventRepository
from sitepulse.core.errors import IngestionError
from sitepulse.core.models import parse_event

logger = logging.getLogger(__name__)

# Fields every raw event must carry
REQUIRED_EVENT_FIELDS = ("type", "path", "timestamp")

DEFAULT_MAX_BATCH_EVENTS = 1000


def _is_missing(value) -> bool:
    # Zero and false count as missing, like an empty string
    if isinstance(value, (bool, int, float)):
        return not value
    return value is None or value == ""


def _describe(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    return f"{location}: {first['msg']}" if location else first["msg"]


class IngestionValidator:
    """
    Turns raw collector batches into store records and persists them.

    Args:
        repository: Event store to append to
        max_batch_events: Largest batch accepted in one call
    """

    def __init__(
        self,
        repository: EventRepository,
        max_batch_events: int = DEFAULT_MAX_BATCH_EVENTS,
    ):
        self._repository = repository
        self.max_batch_events = max_batch_events

    def normalize(self, payload: Mapping) -> list[dict]:
        """
        Validate a batch and convert it to store records.

        Args:
            payload: Decoded request body

        Returns:
            One record per input event, in input order, stamped with the
            batch site_id and session_id

        Raises:
            IngestionError: If the envelope or any event is malformed
        """
        if not isinstance(payload, Mapping):
            raise IngestionError("Invalid request: body must be a JSON object")

        site_id = payload.get("site_id")
        session_id = payload.get("session_id")
        events = payload.get("events")

        if (
            not isinstance(site_id, str)
            or not site_id
            or not isinstance(session_id, str)
            or not session_id
            or not isinstance(events, list)
            or not events
        ):
            raise IngestionError(
                "Invalid request: site_id, session_id, and events array required"
            )

        if len(events) > self.max_batch_events:
            raise IngestionError(
                f"Invalid request: batch of {len(events)} events exceeds "
                f"limit of {self.max_batch_events}"
            )

        records = []
        for index, raw in enumerate(events):
            if not isinstance(raw, Mapping) or any(
                _is_missing(raw.get(field)) for field in REQUIRED_EVENT_FIELDS
            ):
                raise IngestionError(
                    f"Event {index}: each event must have type, path, and timestamp",
                    event_index=index,
                )
            try:
                event = parse_event(dict(raw))
                records.append(event.to_record(site_id, session_id))
            except ValidationError as e:
                raise IngestionError(f"Event {index}: {_describe(e)}", event_index=index) from e
            except (OverflowError, ValueError, OSError) as e:
                raise IngestionError(
                    f"Event {index}: timestamp out of range", event_index=index
                ) from e

        return records

    def ingest(self, payload: Mapping) -> int:
        """
        Validate a batch and append it to the store.

        Returns:
            Count of events stored

        Raises:
            IngestionError: If validation fails (nothing is stored)
            StoreError: If the store write fails (nothing is stored)
        """
        try:
            records = self.normalize(payload)
        except IngestionError as e:
            logger.warning("Rejected batch: %s", e)
            raise

        saved = self._repository.save(records)
        logger.debug(
            "Ingested %d events (site=%s, session=%s)",
            saved,
            records[0]["site_id"],
            records[0]["session_id"],
        )
        return saved
