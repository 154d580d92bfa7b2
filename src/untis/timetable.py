"""Weekly timetable normalization.

The weekly endpoint returns every element involved in the week (classes,
teachers, subjects, rooms, students) as one flat list, and each period only
references elements by (type, id). Ids are only unique within a type, so
elements are indexed as index[type][id] before periods are resolved.

The index is built fresh for every payload and never shared between calls.
"""

from collections.abc import Iterable

from src.untis.errors import MissingReferenceError, ProtocolError
from src.untis.logging import get_logger
from src.untis.models import TimetableEntry
from src.untis.schemas import (
    ELEMENT_TYPE_SUBJECT,
    RawElement,
    RawPeriod,
    WeeklyTimetableData,
)
from src.untis.timecodec import HOUR_OFFSET, parse_compact_datetime

logger = get_logger(__name__)

ElementIndex = dict[int, dict[int, RawElement]]


def build_element_index(elements: Iterable[RawElement]) -> ElementIndex:
    """Group elements by type, then by id. The first element per (type, id) wins."""
    index: ElementIndex = {}
    for element in elements:
        index.setdefault(element.type, {}).setdefault(element.id, element)
    return index


def resolve_subject(period: RawPeriod, index: ElementIndex) -> str:
    """Return the name of the subject element a period references.

    Raises:
        MissingReferenceError: If the period has no subject reference or the
            referenced subject is not in the index.
        ProtocolError: If the subject element has no name.
    """
    refs = [ref for ref in period.elements if ref.type == ELEMENT_TYPE_SUBJECT]
    if not refs:
        raise MissingReferenceError(
            f"Period {period.date} {period.start_time} has no subject reference"
        )
    if len(refs) > 1:
        logger.warning(
            "multiple_subject_references",
            date=period.date,
            start_time=period.start_time,
            subject_ids=[ref.id for ref in refs],
        )

    subject = index.get(ELEMENT_TYPE_SUBJECT, {}).get(refs[0].id)
    if subject is None:
        raise MissingReferenceError(
            f"Period {period.date} {period.start_time} references unknown subject id {refs[0].id}"
        )
    if not subject.name:
        raise ProtocolError(f"Subject element {subject.id} has no name")
    return subject.name


def normalize_week(
    elements: Iterable[RawElement],
    periods: Iterable[RawPeriod],
    hour_offset: int = HOUR_OFFSET,
) -> list[TimetableEntry]:
    """Resolve raw periods into timetable entries sorted by start time.

    Periods starting at the same time keep their payload order.
    """
    index = build_element_index(elements)

    entries: list[TimetableEntry] = []
    for period in periods:
        entries.append(
            TimetableEntry(
                start_date=parse_compact_datetime(period.date, period.start_time, hour_offset),
                end_date=parse_compact_datetime(period.date, period.end_time, hour_offset),
                subject=resolve_subject(period, index),
                cancelled=period.cancelled,
            )
        )

    # sorted() is stable
    return sorted(entries, key=lambda e: e.start_date)


def normalize_timetable(
    data: WeeklyTimetableData, hour_offset: int = HOUR_OFFSET
) -> list[TimetableEntry]:
    """Normalize a validated weekly payload for its first requested element."""
    entries = normalize_week(data.elements, data.periods(), hour_offset)
    logger.debug("timetable_normalized", entries=len(entries), elements=len(data.elements))
    return entries
