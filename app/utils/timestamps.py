"""
XMLTV timestamp parsing

Broadcast start/stop attributes use a fixed fourteen digit format with no
timezone suffix. Values are interpreted as UTC.
"""
from datetime import datetime, timezone
import re

from app.exceptions import TimestampFormatError


XMLTV_TIME_FORMAT = '%Y%m%d%H%M%S'

_XMLTV_TIME_RE = re.compile(r'[0-9]{14}')


def parse_xmltv_timestamp(value: str, attribute: str | None = None) -> datetime:
    """
    Parse a YYYYMMDDhhmmss attribute value

    Args:
        value: Raw attribute value like '20240101120000'
        attribute: Attribute name, reported in the error

    Returns:
        Timezone-aware datetime in UTC

    Raises:
        TimestampFormatError: If the value is not exactly 14 ASCII digits
            or does not denote a valid calendar time
    """
    # strptime alone accepts single-digit fields, so check the shape first
    if not _XMLTV_TIME_RE.fullmatch(value):
        raise TimestampFormatError(value, attribute)

    try:
        dt = datetime.strptime(value, XMLTV_TIME_FORMAT)
    except ValueError as e:
        raise TimestampFormatError(value, attribute) from e

    return dt.replace(tzinfo=timezone.utc)


def format_timestamp(value: datetime | None) -> str:
    """Format a decoded timestamp for display"""
    if value is None:
        return "-"
    return value.strftime('%Y-%m-%d %H:%M:%S')
