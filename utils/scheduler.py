"""
Turn a generation back into dated commit events, one per live cell.
"""
from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import List

import numpy as np

from utils.date_grid import GRID_WIDTH, check_grid, place, weekday_index

# commits land at noon UTC so the day holds for viewers within +-11h of UTC
EVENT_TIME = time(12, 0, tzinfo=timezone.utc)


@dataclass(frozen=True)
class Identity:
    """Author of the replayed commits. `message` may use {date}, {column}, {row}, {vitality}."""
    name: str
    email: str
    message: str


@dataclass(frozen=True)
class Event:
    date: date
    author_name: str
    author_email: str
    message: str
    column: int
    row: int

    @property
    def timestamp(self):
        return datetime.combine(self.date, EVENT_TIME)

    def to_record(self):
        return {
            'date': self.date.isoformat(),
            'author_name': self.author_name,
            'author_email': self.author_email,
            'message': self.message,
        }


def schedule_events(grid, anchor, identity, width=GRID_WIDTH) -> List[Event]:
    """
    One event per live cell of `grid`, dated with place() against `anchor`.

    `anchor` must be the one the source grid was built with. Events come
    column-major then by weekday, which is strictly increasing date order.
    Live cells on days after the anchor in its own week are skipped.
    """
    grid = check_grid(grid, width)
    last_day = weekday_index(anchor)
    events = []
    for column, row in np.argwhere(grid > 0):
        column, row = int(column), int(row)
        if column == width - 1 and row > last_day:
            continue
        day = place(column, row, anchor, width)
        message = identity.message.format(
            date=day.isoformat(), column=column, row=row, vitality=int(grid[column, row]))
        events.append(Event(day, identity.name, identity.email, message, column, row))
    return events


def events_to_records(events):
    return [e.to_record() for e in events]
