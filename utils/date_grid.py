"""
Contribution-calendar grid: maps calendar dates onto a W x 7 torus of cells and back.

Column 0 is the oldest week, column W-1 the week containing the anchor date.
Rows are weekdays with Sunday = 0, so every column is one Sunday-started week.
"""
import logging
import math
from datetime import date, datetime, timedelta, timezone

import numpy as np

logger = logging.getLogger(__name__)

GRID_WIDTH = math.ceil(365 / 7)
GRID_HEIGHT = 7


class MalformedDateError(ValueError):
    """An observation could not be turned into a calendar date."""


def today_utc():
    """Current calendar date at UTC midnight, the default anchor."""
    return datetime.now(timezone.utc).date()


def weekday_index(day):
    """Weekday of `day` with Sunday = 0 ... Saturday = 6."""
    return (day.weekday() + 1) % 7


def normalize_date(value):
    """
    Turn one raw observation into its UTC calendar date.

    Accepts date/datetime objects (naive datetimes are taken as UTC), numpy
    datetime64 values, POSIX timestamps in seconds and ISO 8601 strings.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            raise MalformedDateError(f"not a date: {value!r}")
        return value.astype('datetime64[D]').item()
    if isinstance(value, (bool, np.bool_)):
        raise MalformedDateError(f"not a date: {value!r}")
    if isinstance(value, (int, float, np.integer, np.floating)):
        try:
            return datetime.fromtimestamp(float(value), tz=timezone.utc).date()
        except (OverflowError, OSError, ValueError) as exc:
            raise MalformedDateError(f"timestamp out of range: {value!r}") from exc
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise MalformedDateError("blank date")
        if text.endswith(('Z', 'z')):
            text = text[:-1] + '+00:00'
        try:
            return normalize_date(datetime.fromisoformat(text))
        except ValueError as exc:
            raise MalformedDateError(f"unparsable date: {value!r}") from exc
    raise MalformedDateError(f"not a date: {value!r}")


def normalize_dates(values, strict=False):
    """
    Normalize a batch of observations.

    Malformed entries are dropped with a warning; with strict=True the first
    one raises MalformedDateError instead.
    """
    dates = []
    for value in values:
        try:
            dates.append(normalize_date(value))
        except MalformedDateError as exc:
            if strict:
                raise
            logger.warning("dropping observation: %s", exc)
    return dates


def locate(day, anchor, width=GRID_WIDTH):
    """
    Return the (column, row) cell of `day` relative to `anchor`.

    The column counts calendar weeks, not days // 7: a Saturday one day
    before a Sunday anchor is already a full column back. Columns outside
    [0, width) mean the date is off the grid.
    """
    days = (anchor - day).days
    anchor_row = weekday_index(anchor)
    row = ((anchor_row - days) % 7 + 7) % 7
    weeks = (days - anchor_row + row) // 7
    return width - 1 - weeks, row


def place(column, row, anchor, width=GRID_WIDTH):
    """Inverse of locate(): the date shown in cell (column, row)."""
    if not 0 <= column < width or not 0 <= row < GRID_HEIGHT:
        raise ValueError(f"cell ({column}, {row}) is outside a {width}x{GRID_HEIGHT} grid")
    week_start = anchor - timedelta(days=weekday_index(anchor))
    return week_start - timedelta(weeks=width - 1 - column) + timedelta(days=row)


def empty_grid(width=GRID_WIDTH):
    return np.zeros((width, GRID_HEIGHT), dtype=np.int64)


def check_grid(grid, width=GRID_WIDTH):
    """Raise ValueError unless `grid` is a (width, 7) array of non-negative counts."""
    grid = np.asarray(grid)
    if grid.shape != (width, GRID_HEIGHT):
        raise ValueError(f"Expected a ({width}, {GRID_HEIGHT}) grid, got shape {grid.shape}")
    if not np.issubdtype(grid.dtype, np.integer) and grid.dtype != np.bool_:
        raise ValueError(f"Expected integer cell counts, got dtype {grid.dtype}")
    if (grid < 0).any():
        raise ValueError("Cell counts must be non-negative")
    return grid


def freeze(grid):
    grid.flags.writeable = False
    return grid


def build_grid(observations, anchor, width=GRID_WIDTH, strict=False):
    """
    Build the generation grid from dated observations.

    Every observation adds one to the vitality of its cell. Dates that fall
    outside the grid's span are dropped without complaint.
    """
    anchor = normalize_date(anchor)
    grid = empty_grid(width)
    days = normalize_dates(observations, strict=strict)
    if not days:
        return freeze(grid)
    cells = np.array([locate(d, anchor, width) for d in days], dtype=np.int64)
    cols, rows = cells[:, 0], cells[:, 1]
    in_range = (cols >= 0) & (cols < width)
    dropped = int((~in_range).sum())
    if dropped:
        logger.debug("%d observation(s) fall outside the %d-week grid", dropped, width)
    np.add.at(grid, (cols[in_range], rows[in_range]), 1)
    return freeze(grid)


def live_cells(grid):
    """Live (column, row) cells, oldest week first, then by weekday."""
    return [(int(c), int(r)) for c, r in np.argwhere(np.asarray(grid) > 0)]


def save_grid(grid, path):
    np.save(path, np.asarray(grid, dtype=np.int64))


def load_grid(path, width=GRID_WIDTH):
    grid = np.load(path)
    return freeze(check_grid(grid, width).astype(np.int64))
