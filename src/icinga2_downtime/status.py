"""
Extraction of identifiers from Icinga2 action status messages.

Icinga2 only reports which objects an action touched inside human readable
status strings, quoting every name in single quotes:

    Successfully scheduled downtime 'web01!4f3c...' for object 'web01'.
    Successfully removed downtime 'web01!4f3c...'.

Splitting on the quote character gives the names at fixed odd positions:

    schedule-downtime: index 1 = downtime name, index 3 = object name
    remove-downtime:   index 1 = removed name; when a second quoted name is
                       present ("... 'dt' from object 'host'"), index 3 is the
                       object and index 1 the downtime

Any wording change upstream breaks these positions.
"""

from typing import List

from .client import StatusParseError
from .models import DowntimeAction, ResultRecord

QUOTE = "'"


def _split(message: str, minimum: int) -> List[str]:
    parts = message.split(QUOTE)
    if len(parts) < minimum:
        raise StatusParseError(f"Unexpected status message format: {message!r}")
    return parts


def parse_scheduled(message: str) -> ResultRecord:
    """Parse a schedule-downtime status line into (object, downtime name)."""
    parts = _split(message, 4)
    return ResultRecord(object=parts[3], downtime_name=parts[1])


def parse_removed(message: str) -> ResultRecord:
    """Parse a remove-downtime status line."""
    parts = _split(message, 2)
    if len(parts) >= 4:
        return ResultRecord(object=parts[3], downtime_name=parts[1])
    return ResultRecord(object=parts[1])


def parse_status(action: DowntimeAction, message: str) -> ResultRecord:
    if action is DowntimeAction.SCHEDULE:
        return parse_scheduled(message)
    return parse_removed(message)
