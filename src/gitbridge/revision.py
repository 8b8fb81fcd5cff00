"""Revision identifiers and the ordered-fallback revision parser."""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from pathlib import Path

from gitbridge.errors import BridgeError, MalformedRevisionError

logger = logging.getLogger(__name__)

# Full commit hash as printed by git
FULL_HASH_PATTERN = "[0-9a-fA-F]{40}"

# Strings longer than this carry a "date[hash" encoding; the hash ends at this offset
COMBINED_ENCODING_WIDTH = 40

_FULL_HASH_RE = re.compile(rf"^{FULL_HASH_PATTERN}$")

# Resolver used for rule 3: (path hint, revision) -> resolved RevisionId
RevisionResolver = Callable[[Path, str], "RevisionId"]


@dataclass(frozen=True)
class RevisionId:
    """A point in the repository history.

    Attributes:
        raw: The string the revision was parsed from
        hash: Canonical identifier (commit hash or literal revision text)
        timestamp: Date associated with the revision, if known
    """

    raw: str
    hash: str
    timestamp: datetime | None = None

    @property
    def is_full_hash(self) -> bool:
        """Whether the identifier is a full 40-character commit hash."""
        return is_full_hash(self.hash)

    def __str__(self) -> str:
        return self.hash


def is_full_hash(text: str) -> bool:
    """Check if text is a full 40-character hexadecimal commit hash."""
    return bool(_FULL_HASH_RE.match(text))


# Zone names understood by the legacy date format, as UTC offsets in hours
_LEGACY_ZONES: dict[str, int] = {
    "GMT": 0,
    "UT": 0,
    "UTC": 0,
    "Z": 0,
    "EST": -5,
    "EDT": -4,
    "CST": -6,
    "CDT": -5,
    "MST": -7,
    "MDT": -6,
    "PST": -8,
    "PDT": -7,
}

# e.g. "Tue Jan 06 10:00:00 UTC 2009"
_ZONE_NAME_DATE_RE = re.compile(
    r"^(?P<head>\w{3} \w{3} +\d{1,2} \d{1,2}:\d{2}:\d{2}) (?P<zone>[A-Za-z]{1,4}) (?P<year>\d{4})$"
)

_STRPTIME_FORMATS = (
    "%a %b %d %H:%M:%S %Y %z",  # git log default
    "%a %b %d %H:%M:%S %Y",
    "%Y-%m-%d %H:%M:%S %z",  # git log --date=iso
    "%Y-%m-%d %H:%M:%S",
)


def _with_utc_default(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_legacy_date(text: str) -> datetime:
    """Parse a date in one of the broad, locale-independent legacy formats.

    Accepts "Tue Jan 06 10:00:00 UTC 2009" style dates, git's default and
    ISO-like log dates, RFC 2822 dates, and ISO 8601. Dates without a
    zone are taken as UTC.

    Args:
        text: The date text

    Returns:
        Timezone-aware datetime

    Raises:
        MalformedRevisionError: If no format matches
    """
    value = text.strip()
    if not value:
        raise MalformedRevisionError("Empty date in revision", revision=text)

    match = _ZONE_NAME_DATE_RE.match(value)
    if match and match.group("zone").upper() in _LEGACY_ZONES:
        offset = _LEGACY_ZONES[match.group("zone").upper()]
        try:
            parsed = datetime.strptime(
                f"{match.group('head')} {match.group('year')}", "%a %b %d %H:%M:%S %Y"
            )
        except ValueError:
            pass
        else:
            return parsed.replace(tzinfo=timezone(timedelta(hours=offset)))

    for fmt in _STRPTIME_FORMATS:
        try:
            return _with_utc_default(datetime.strptime(value, fmt))
        except ValueError:
            continue

    try:
        return _with_utc_default(parsedate_to_datetime(value))
    except (TypeError, ValueError, IndexError):
        pass

    try:
        return _with_utc_default(datetime.fromisoformat(value))
    except ValueError:
        pass

    raise MalformedRevisionError(f"Unrecognized revision date: {value!r}", revision=text)


def _parse_combined(revision: str) -> RevisionId:
    """Parse the "date[hash" encoding used for strings longer than 40 characters."""
    bracket = revision.find("[")
    if bracket < 0:
        raise MalformedRevisionError(
            f"Revision is too long for a hash and has no date separator: {revision!r}",
            revision=revision,
        )
    if bracket + 1 > COMBINED_ENCODING_WIDTH:
        raise MalformedRevisionError(
            f"Date part of revision exceeds {COMBINED_ENCODING_WIDTH} characters: {revision!r}",
            revision=revision,
        )

    date_part = revision[:bracket]
    hash_part = revision[bracket + 1 : COMBINED_ENCODING_WIDTH]
    try:
        timestamp = parse_legacy_date(date_part)
    except MalformedRevisionError as e:
        raise MalformedRevisionError(str(e), revision=revision) from e
    return RevisionId(raw=revision, hash=hash_part, timestamp=timestamp)


def parse_revision(
    revision: str | None,
    path_hint: Path | None = None,
    resolver: RevisionResolver | None = None,
) -> RevisionId | None:
    """Parse a revision string, trying each encoding in order.

    1. Empty input gives None.
    2. Longer than 40 characters: "date[hash" combined encoding.
    3. With a path hint and resolver: ask the tool to resolve it. Failures
       are logged and parsing falls through.
    4. The whole string as a literal revision with no timestamp.

    Args:
        revision: The revision text
        path_hint: A path inside the repository the revision belongs to
        resolver: Callable resolving (path, revision) through the tool

    Returns:
        RevisionId, or None for empty input

    Raises:
        MalformedRevisionError: Only for combined encodings that cannot be parsed
    """
    if not revision:
        return None

    if len(revision) > COMBINED_ENCODING_WIDTH:
        return _parse_combined(revision)

    if path_hint is not None and resolver is not None:
        try:
            return resolver(path_hint, revision)
        except (BridgeError, OSError):
            logger.exception(
                "Unexpected problem resolving git revision %r for %s", revision, path_hint
            )

    return RevisionId(raw=revision, hash=revision)
