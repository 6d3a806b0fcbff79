"""
Calendar events derived from tournament records.

Each tournament contributes registration, start, finals, bracket-generation
and custom events. Events are grouped by calendar day (UTC) and sorted within
a day by priority (higher first), then time.
"""
import logging
import re
from datetime import date, datetime, time, timedelta, timezone
from typing import List, Dict, Optional

logger = logging.getLogger(__name__)

VIEW_MODES = ('upcoming', 'past', 'all')


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO date/datetime (or a YAML-loaded date) into an aware UTC datetime."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time())
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class Event:
    def __init__(self, id, tournament_id, tournament_title, type, title, description, date, priority):
        self.id = id
        self.tournament_id = tournament_id
        self.tournament_title = tournament_title
        self.type = type
        self.title = title
        self.description = description
        self.date = date
        self.priority = priority

    def status(self, now=None):
        now = now or datetime.now(timezone.utc)
        return 'completed' if self.date <= now else 'upcoming'

    def to_dict(self, now=None):
        return {
            'id': self.id,
            'tournamentId': self.tournament_id,
            'tournamentTitle': self.tournament_title,
            'type': self.type,
            'title': self.title,
            'description': self.description,
            'date': self.date.isoformat(),
            'time': self.date.strftime('%H:%M'),
            'priority': self.priority,
            'status': self.status(now),
        }

    def __repr__(self):
        return f"Event(id={self.id}, type={self.type}, date={self.date.isoformat()}, priority={self.priority})"


def _slug(title: str) -> str:
    return re.sub(r'\s+', '-', title.lower())


def extract_tournament_events(tournament: Dict, now: Optional[datetime] = None) -> List[Event]:
    """Derive the events of a single tournament record."""
    events = []
    now = now or datetime.now(timezone.utc)

    if not tournament or not tournament.get('_id') or not tournament.get('title'):
        logger.warning("Invalid tournament data: %r", tournament)
        return events

    tid = tournament['_id']
    title = tournament['title']

    def add(suffix, event_type, event_title, description, raw_date, priority, field):
        if not raw_date:
            return
        when = parse_datetime(raw_date)
        if when is None:
            logger.warning("Invalid %s date for tournament %s: %r", field, title, raw_date)
            return
        events.append(Event(f"{tid}-{suffix}", tid, title, event_type, event_title,
                            description, when, priority))

    add('reg-start', 'registration_open', 'Registration Opens',
        f"Registration period begins for {title}", tournament.get('registrationStart'), 3,
        'registrationStart')
    add('reg-end', 'registration_close', 'Registration Closes',
        f"Last chance to register for {title}", tournament.get('registrationEnd'), 4,
        'registrationEnd')

    start_raw = tournament.get('tournamentStart') or tournament.get('startDate')
    add('start', 'tournament_start', 'Tournament Begins',
        f"{title} competition starts", start_raw, 5, 'tournamentStart')

    end_raw = tournament.get('tournamentEnd') or tournament.get('endDate')
    add('finals', 'finals', 'Finals',
        f"Championship finals for {title}", end_raw, 1, 'tournamentEnd')

    finals_raw = tournament.get('finalsDate')
    if finals_raw and finals_raw != tournament.get('tournamentEnd') and finals_raw != tournament.get('endDate'):
        add('specific-finals', 'finals', 'Championship Finals',
            f"Special championship finals for {title}", finals_raw, 1, 'finalsDate')

    start = parse_datetime(start_raw)
    if start and tournament.get('status') in ('registration_open', 'registration_closed'):
        bracket_date = (start - timedelta(days=1)).replace(hour=18, minute=0, second=0, microsecond=0)
        if bracket_date > now or bracket_date.date() == now.date():
            events.append(Event(f"{tid}-brackets", tid, title, 'bracket_generation',
                                'Brackets Generated',
                                f"Tournament brackets will be finalized for {title}",
                                bracket_date, 4))

    for custom in tournament.get('scheduleEvents') or tournament.get('events') or []:
        if not isinstance(custom, dict):
            logger.warning("Invalid custom event for tournament %s: %r", title, custom)
            continue
        if custom.get('title') and custom.get('date') and custom.get('time'):
            raw = f"{custom['date']}T{custom['time']}"
            custom_title = custom['title']
        elif custom.get('name') and custom.get('dateTime'):
            raw = custom['dateTime']
            custom_title = custom['name']
        else:
            continue
        add(f"custom-{_slug(custom_title)}", 'custom_event', custom_title,
            custom.get('description') or f"{custom_title} for {title}", raw, 2, 'custom event')

    return events


def derive_events(tournaments: List[Dict], now: Optional[datetime] = None) -> List[Event]:
    """All events of all tournaments, ordered by date."""
    events = []
    for tournament in tournaments or []:
        events.extend(extract_tournament_events(tournament, now))
    events.sort(key=lambda e: e.date)
    return events


def filter_events(events: List[Event], view_mode: str = 'all', now: Optional[datetime] = None) -> List[Event]:
    today = (now or datetime.now(timezone.utc)).date()
    if view_mode == 'upcoming':
        return [e for e in events if e.date.date() >= today]
    if view_mode == 'past':
        return [e for e in events if e.date.date() < today]
    return list(events)


def group_events_by_date(events: List[Event]) -> Dict[date, List[Event]]:
    """Group by calendar day (ascending); within a day priority desc, then time asc."""
    grouped = {}
    for event in sorted(events, key=lambda e: e.date):
        grouped.setdefault(event.date.date(), []).append(event)
    for day_events in grouped.values():
        day_events.sort(key=lambda e: (-(e.priority or 0), e.date))
    return grouped
