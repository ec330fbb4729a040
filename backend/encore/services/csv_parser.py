"""CSV parsing and validation for song imports.

Header contract: ``title`` and ``artist`` are required, ``album``,
``duration`` and ``genre`` are optional. Names are matched exactly
(case-sensitive, surrounding whitespace ignored).

Row numbers are 1-based source line numbers, the header being line 1.
Blank lines are skipped but still counted, so a row number always points
at the line the user sees in their spreadsheet export.
"""
import csv
import io
import re
from typing import Dict, List, Optional, Tuple

from encore.config import settings
from encore.schemas.imports import CSVParseResult, ParsedSong, RowError

REQUIRED_COLUMNS = ("title", "artist")
OPTIONAL_COLUMNS = ("album", "duration", "genre")

TITLE_REQUIRED = "Title is required"
ARTIST_REQUIRED = "Artist is required"

_SECONDS = re.compile(r"^[0-9]+$")
_MINUTES_SECONDS = re.compile(r"^([0-9]+):([0-9]{1,2})$")
_MINUTES_SECONDS_UNITS = re.compile(r"^([0-9]+)m\s*([0-9]+)s$")


def parse_duration(value: Optional[str]) -> Optional[int]:
    """Parse "323", "5:23" / "05:23" or "5m23s" into seconds.

    Anything else returns None; an unreadable duration does not fail the row.
    """
    if not value:
        return None
    value = value.strip()

    if _SECONDS.match(value):
        return int(value)

    match = _MINUTES_SECONDS.match(value) or _MINUTES_SECONDS_UNITS.match(value)
    if match:
        return int(match.group(1)) * 60 + int(match.group(2))

    return None


def _field(fields: List[str], columns: Dict[str, int], name: str) -> Optional[str]:
    """Trimmed cell value for a column, None when absent or blank."""
    index = columns.get(name)
    if index is None or index >= len(fields):
        return None
    value = fields[index].strip()
    return value or None


def _failure(row: int, message: str) -> CSVParseResult:
    return CSVParseResult(success=False, errors=[RowError(row=row, message=message)])


def parse_csv(csv_data: str, max_duration: Optional[int] = None) -> CSVParseResult:
    """Parse CSV text into song rows.

    Fails only for an empty document or a header without the required
    columns. Rows missing title/artist are returned with errors so they can
    be reported, not dropped.
    """
    if max_duration is None:
        max_duration = settings.csv_max_duration

    if not csv_data or not csv_data.strip():
        return _failure(0, "CSV data is empty")

    reader = csv.reader(io.StringIO(csv_data.lstrip("\ufeff")), skipinitialspace=True)

    header: Optional[List[str]] = None
    header_row = 0
    rows: List[Tuple[int, List[str]]] = []
    line_num = 0

    try:
        for fields in reader:
            row_number = line_num + 1
            line_num = reader.line_num

            if not any(field.strip() for field in fields):
                continue

            if header is None:
                header = [field.strip() for field in fields]
                header_row = row_number
                continue

            rows.append((row_number, fields))
    except csv.Error as e:
        return _failure(reader.line_num, f"Malformed CSV: {e}")

    if header is None:
        return _failure(0, "CSV data is empty")

    missing = [name for name in REQUIRED_COLUMNS if name not in header]
    if missing:
        return _failure(
            header_row,
            f"CSV is missing required column(s): {', '.join(missing)} "
            '(header must include "title" and "artist")',
        )

    columns = {
        name: header.index(name)
        for name in REQUIRED_COLUMNS + OPTIONAL_COLUMNS
        if name in header
    }

    songs: List[ParsedSong] = []
    errors: List[RowError] = []

    for row_number, fields in rows:
        title = _field(fields, columns, "title") or ""
        artist = _field(fields, columns, "artist") or ""
        duration = parse_duration(_field(fields, columns, "duration"))

        row_errors = []
        if not title:
            row_errors.append(TITLE_REQUIRED)
        if not artist:
            row_errors.append(ARTIST_REQUIRED)
        if duration is not None and not 0 <= duration <= max_duration:
            row_errors.append(f"Invalid duration (must be between 0 and {max_duration} seconds)")

        if row_errors:
            errors.append(RowError(row=row_number, message="; ".join(row_errors)))

        songs.append(ParsedSong(
            title=title,
            artist=artist,
            album=_field(fields, columns, "album"),
            duration=duration,
            genre=_field(fields, columns, "genre"),
            row_number=row_number,
            errors=row_errors,
        ))

    valid_rows = sum(1 for song in songs if song.is_valid)

    return CSVParseResult(
        success=True,
        songs=songs,
        total_rows=len(songs),
        valid_rows=valid_rows,
        invalid_rows=len(songs) - valid_rows,
        errors=errors,
    )


def validate_songs(songs: List[ParsedSong]) -> Tuple[List[ParsedSong], List[ParsedSong]]:
    """Split rows into (valid, invalid).

    A row is valid when it has a title and an artist and no parse errors.
    Invalid rows come back with their reasons filled in.
    """
    valid: List[ParsedSong] = []
    invalid: List[ParsedSong] = []

    for song in songs:
        reasons = list(song.errors)
        if not song.title.strip() and TITLE_REQUIRED not in reasons:
            reasons.append(TITLE_REQUIRED)
        if not song.artist.strip() and ARTIST_REQUIRED not in reasons:
            reasons.append(ARTIST_REQUIRED)

        if reasons:
            invalid.append(song.model_copy(update={"errors": reasons}))
        else:
            valid.append(song)

    return valid, invalid
