"""Batch classification of raw records."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .classifier import DEFAULT_LOGON_PROCESS, classify
from .errors import ClassificationError
from .models import ClassificationFailure, MaterializeResult, RawRecord, TimelineEvent

LOGGER = logging.getLogger(__name__)


def materialize(
    records: Iterable[RawRecord],
    *,
    logon_process: str = DEFAULT_LOGON_PROCESS,
) -> MaterializeResult:
    """Classify every record in input order.

    A record that fails classification is reported in `failures` and left out
    of `events`; it never aborts the batch.
    """
    events: list[TimelineEvent] = []
    failures: list[ClassificationFailure] = []

    for record in records:
        try:
            events.append(classify(record, logon_process=logon_process))
        except ClassificationError as exc:
            LOGGER.debug(
                "Skipping event %s at %s (%s): %s",
                record.event_id,
                record.timestamp.isoformat(),
                exc.reason,
                exc,
            )
            failures.append(ClassificationFailure(record=record, error=exc))

    LOGGER.info("Materialized %d events, skipped %d records", len(events), len(failures))
    return MaterializeResult(events=events, failures=failures)
