"""
Versioned per-venue fee schedules.

Each venue has one YAML record in this directory. Records are read once and
handed to calculators as plain dictionaries; nothing writes them back.
"""
from pathlib import Path
from typing import Dict, Iterable, Optional

import yaml
from pydantic import BaseModel, ConfigDict

from ..models import Venue

SCHEDULES_DIR = Path(__file__).parent


class ScheduleRecord(BaseModel):
    """Metadata every schedule record must carry. Venue tables pass through."""
    model_config = ConfigDict(extra="allow")

    venue: Venue
    version: str
    updated_at: str
    source: str
    source_url: str
    disclaimer: str


def load_schedule(venue: Venue, schedules_dir: Optional[Path] = None) -> Dict:
    """
    Load and validate the fee schedule for a venue.

    Raises:
        FileNotFoundError: If no schedule record exists for the venue
        ValueError: If the record belongs to another venue or lacks metadata
    """
    venue = Venue(venue)
    directory = Path(schedules_dir) if schedules_dir else SCHEDULES_DIR
    schedule_file = directory / f"{venue.value.lower()}.yaml"

    if not schedule_file.exists():
        raise FileNotFoundError(f"Fee schedule not found: {schedule_file}")

    with open(schedule_file, 'r') as f:
        raw = yaml.safe_load(f) or {}

    record = ScheduleRecord(**raw)
    if record.venue != venue:
        raise ValueError(f"Schedule {schedule_file.name} is for {record.venue.value}, expected {venue.value}")

    return record.model_dump(mode="json")


class ScheduleStore:
    """Fee schedules for a set of venues, loaded once at construction."""

    def __init__(self, venues: Optional[Iterable[Venue]] = None, schedules_dir: Optional[Path] = None):
        self.schedules_dir = schedules_dir
        self._schedules: Dict[Venue, Dict] = {}
        for venue in venues or list(Venue):
            self._schedules[Venue(venue)] = load_schedule(venue, schedules_dir)

    def get(self, venue: Venue) -> Dict:
        return self._schedules[Venue(venue)]

    def versions(self) -> Dict[Venue, str]:
        return {venue: schedule["version"] for venue, schedule in self._schedules.items()}

    def __contains__(self, venue) -> bool:
        return Venue(venue) in self._schedules
