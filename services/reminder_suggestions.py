"""
Reminder suggestions for a batch.

``suggest_reminders`` is pure: the same stage, start time and target duration
always produce the same suggestions in the same order. All arithmetic is done
on whole milliseconds since the epoch, so no calendar or timezone rules apply.
"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union

from models.batch import BatchStage
from models.reminder import ReminderSuggestion
from utils.clock import parse_iso

MS_PER_HOUR = 3_600_000

# Fixed check-ins for an open ferment with no target duration.
STAGE1_DAILY_CHECK_HOURS = 24
STAGE1_READY_CHECK_HOURS = 48

STAGE2_DEFAULT_DURATION_HOURS = 24
REFRIGERATE_GRACE_HOURS = 2

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _epoch_ms(start_time: Union[str, datetime]) -> int:
    if isinstance(start_time, str):
        start_time = parse_iso(start_time)
    elif start_time.tzinfo is None:
        start_time = start_time.replace(tzinfo=timezone.utc)
    return (start_time - _EPOCH) // timedelta(milliseconds=1)


def _offset_ms(hours: float) -> int:
    return int(hours * MS_PER_HOUR)


def format_instant(epoch_ms: int) -> str:
    """ISO-8601 UTC; the millisecond fraction only appears when non-zero."""
    instant = _EPOCH + timedelta(milliseconds=epoch_ms)
    if epoch_ms % 1000:
        return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{epoch_ms % 1000:03d}Z"
    return instant.strftime("%Y-%m-%dT%H:%M:%SZ")


def _suggestion(type_: str, at_ms: int, message: str, description: str):
    return ReminderSuggestion(
        type=type_,
        suggested_time=format_instant(at_ms),
        message=message,
        description=description,
    )


def suggest_reminders(
    stage: str,
    start_time: Union[str, datetime],
    target_duration_hours: Optional[float] = None,
) -> List[ReminderSuggestion]:
    """
    Suggest reminder times for a batch.

    Args:
        stage: Batch stage; unrecognised stages get no suggestions
        start_time: When the stage started (ISO-8601 string or datetime)
        target_duration_hours: Planned length of the stage, if any

    Returns:
        Suggestions ordered by suggested time
    """
    if stage == BatchStage.STAGE1_OPEN:
        start = _epoch_ms(start_time)
        if target_duration_hours:
            return [
                _suggestion(
                    "midpoint_check",
                    start + _offset_ms(target_duration_hours / 2),
                    "Check your kefir batch (halfway point)",
                    "Time to check the fermentation progress",
                ),
                _suggestion(
                    "stage1_complete",
                    start + _offset_ms(target_duration_hours),
                    "Your kefir may be ready for bottling",
                    "Stage 1 target duration reached",
                ),
            ]
        return [
            _suggestion(
                "daily_check",
                start + _offset_ms(STAGE1_DAILY_CHECK_HOURS),
                "Daily kefir check (24h)",
                "Check fermentation progress",
            ),
            _suggestion(
                "ready_check",
                start + _offset_ms(STAGE1_READY_CHECK_HOURS),
                "Your kefir may be ready (48h)",
                "Check if ready for bottling",
            ),
        ]

    if stage == BatchStage.STAGE2_BOTTLED:
        start = _epoch_ms(start_time)
        duration = target_duration_hours or STAGE2_DEFAULT_DURATION_HOURS
        ready = start + _offset_ms(duration)
        return [
            _suggestion(
                "carbonation_check",
                start + _offset_ms(duration / 2),
                "Check carbonation level",
                "Halfway through second fermentation",
            ),
            _suggestion(
                "stage2_complete",
                ready,
                "Your kefir is ready to refrigerate",
                "Second fermentation complete",
            ),
            _suggestion(
                "refrigerate",
                ready + _offset_ms(REFRIGERATE_GRACE_HOURS),
                "Move your kefir to the fridge",
                "Prevent over-carbonation",
            ),
        ]

    return []
