"""
Record intake and validation.

Callers hand the engine whatever their storage layer produced. Each record
is validated on its own; a malformed or out-of-range record is dropped and
counted rather than failing the whole batch. Timestamps within one analysis
must either all carry a timezone or all omit one: the first accepted record
fixes the convention and records that disagree are dropped as well.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)


class AnalyticsInputError(Exception):
    """Raised when a payload is structurally unusable (not a record list)."""

    pass


@dataclass
class IntakeResult(Generic[RecordT]):
    """Validated records plus the number of records that were rejected."""

    records: List[RecordT] = field(default_factory=list)
    skipped: int = 0
    # None until a timestamped record has been accepted
    aware: Optional[bool] = None


def is_aware(stamp: datetime) -> bool:
    return stamp.tzinfo is not None and stamp.utcoffset() is not None


def coerce_records(
    items: Optional[Iterable[Any]],
    model: Type[RecordT],
    kind: str = "record",
    aware: Optional[bool] = None,
) -> IntakeResult[RecordT]:
    """
    Validate a collection of records against a model.

    Args:
        items: Model instances or plain dictionaries (None is treated as empty)
        model: The pydantic model each item must satisfy
        kind: Label used in log messages
        aware: Timezone convention already fixed by another collection, if any

    Returns:
        IntakeResult with the accepted records in input order

    Raises:
        AnalyticsInputError: If items is not an iterable of records
    """
    result: IntakeResult[RecordT] = IntakeResult(aware=aware)
    if items is None:
        return result
    if isinstance(items, (str, bytes, dict)):
        raise AnalyticsInputError(f"Expected a list of {kind} records, got {type(items).__name__}")

    try:
        iterator = iter(items)
    except TypeError as e:
        raise AnalyticsInputError(f"Expected a list of {kind} records: {e}") from e

    for index, item in enumerate(iterator):
        if isinstance(item, model):
            record = item
        else:
            try:
                if isinstance(item, BaseModel):
                    item = item.model_dump()
                record = model.model_validate(item)
            except ValidationError as e:
                result.skipped += 1
                logger.warning(f"Skipping malformed {kind} at index {index}: {e.error_count()} error(s)")
                continue

        stamp = getattr(record, "timestamp", None)
        if isinstance(stamp, datetime):
            if result.aware is None:
                result.aware = is_aware(stamp)
            elif is_aware(stamp) != result.aware:
                result.skipped += 1
                logger.warning(
                    f"Skipping {kind} at index {index}: timestamp "
                    f"{'has' if is_aware(stamp) else 'lacks'} a timezone unlike the rest"
                )
                continue

        result.records.append(record)

    if result.skipped:
        logger.info(f"Accepted {len(result.records)} {kind} records, skipped {result.skipped}")
    return result


def check_reference_time(now: Optional[datetime], aware: Optional[bool]) -> None:
    """Reject a reference time that cannot be compared with the record timestamps."""
    if now is None or aware is None:
        return
    if is_aware(now) != aware:
        raise AnalyticsInputError(
            "Reference time and record timestamps must either both carry a timezone or both omit one"
        )


def coerce_optional(item: Any, model: Type[RecordT], kind: str = "record") -> Optional[RecordT]:
    """Validate a single optional record; an invalid one degrades to None."""
    if item is None or isinstance(item, model):
        return item
    try:
        return model.model_validate(item)
    except ValidationError as e:
        logger.warning(f"Ignoring malformed {kind}: {e.error_count()} error(s)")
        return None
