"""Shard-day classification. Shard table rows look like yyyyMMdd_N; the day is the group."""

import logging
from datetime import date, datetime

from placement.domain.models import Tablet

logger = logging.getLogger(__name__)

NULL_GROUP = "null"
SHARD_DAY_FORMAT = "%Y%m%d"
EPOCH_DAY = date(1970, 1, 1)


def shard_day(tablet: Tablet) -> str:
    """Group name for a shard tablet: end row up to the first '_', or "null" for the last tablet."""
    if tablet.end_row is None:
        return NULL_GROUP
    row = tablet.end_row
    idx = row.find("_")
    return row[:idx] if idx > 0 else row


def parse_shard_day(day: str) -> date:
    """Parse yyyyMMdd. Malformed shard rows map to the epoch so they land in the oldest tier."""
    if len(day) == 8 and day.isdigit():
        try:
            return datetime.strptime(day, SHARD_DAY_FORMAT).date()
        except ValueError:
            pass
    logger.warning("shard_day_unparsable", extra={"shard_day": day})
    return EPOCH_DAY
