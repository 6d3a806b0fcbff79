import copy
from datetime import datetime, timezone


class MatchStatus:
    NO_TEAMS = 'no_teams'
    BYE = 'bye'
    SCHEDULED = 'scheduled'
    AWAITING = 'awaiting'
    ONGOING = 'ongoing'
    COMPLETED = 'completed'

    ALL = (NO_TEAMS, BYE, SCHEDULED, AWAITING, ONGOING, COMPLETED)


def utc_timestamp(now=None):
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2026-01-01T10:00:00.000Z"""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime('%Y-%m-%dT%H:%M:%S.') + f"{now.microsecond // 1000:03d}Z"


class Participant:
    def __init__(self, id, name, seed):
        self.id = id
        self.name = name
        self.seed = seed

    @classmethod
    def from_record(cls, record, seed):
        """Build a participant from a backend registration record."""
        if isinstance(record, Participant):
            return cls(record.id, record.name, seed)
        participant_id = record.get('_id', record.get('id'))
        name = record.get('teamName') or record.get('name') or record.get('username') or str(participant_id)
        return cls(participant_id, name, seed)

    @classmethod
    def from_dict(cls, data):
        if data is None:
            return None
        return cls(data.get('id'), data.get('name'), data.get('seed'))

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'seed': self.seed}

    def __eq__(self, other):
        if not isinstance(other, Participant):
            return NotImplemented
        return (self.id, self.name, self.seed) == (other.id, other.name, other.seed)

    def __repr__(self):
        return f"Participant(id={self.id}, name={self.name}, seed={self.seed})"


class Match:
    def __init__(self, match_id, round, match_in_round, team1=None, team2=None,
                 status=MatchStatus.SCHEDULED, winner=None, result=None, scheduled_time=None):
        self.match_id = match_id
        self.round = round
        self.match_in_round = match_in_round
        self.team1 = team1
        self.team2 = team2
        self.status = status
        self.winner = winner
        self.result = result
        self.scheduled_time = scheduled_time

    @property
    def has_both_teams(self):
        return self.team1 is not None and self.team2 is not None

    def team_for(self, participant_id):
        """Return the slot snapshot whose id matches participant_id, or None."""
        for team in (self.team1, self.team2):
            if team is not None and str(team.id) == str(participant_id):
                return team
        return None

    @classmethod
    def from_dict(cls, data):
        return cls(
            match_id=data['matchId'],
            round=data.get('round', 1),
            match_in_round=data.get('matchInRound'),
            team1=Participant.from_dict(data.get('team1')),
            team2=Participant.from_dict(data.get('team2')),
            status=data.get('status', MatchStatus.SCHEDULED),
            winner=data.get('winner'),
            result=data.get('result'),
            scheduled_time=data.get('scheduledTime'),
        )

    def to_dict(self):
        return {
            'matchId': self.match_id,
            'round': self.round,
            'matchInRound': self.match_in_round,
            'team1': self.team1.to_dict() if self.team1 else None,
            'team2': self.team2.to_dict() if self.team2 else None,
            'status': self.status,
            'winner': self.winner,
            'result': copy.deepcopy(self.result),
            'scheduledTime': self.scheduled_time,
        }

    def __repr__(self):
        return (f"Match(id={self.match_id}, round={self.round}, match_in_round={self.match_in_round}, "
                f"team1={self.team1}, team2={self.team2}, status={self.status}, winner={self.winner})")


class Bracket:
    def __init__(self, format, rounds, matches=None, created_at=None):
        self.format = format
        self.rounds = rounds
        self.matches = matches if matches is not None else []
        self.created_at = created_at or utc_timestamp()

    def copy(self):
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, data):
        return cls(
            format=data.get('format'),
            rounds=data.get('rounds', 0),
            matches=[Match.from_dict(m) for m in data.get('matches') or []],
            created_at=data.get('createdAt'),
        )

    def to_dict(self):
        return {
            'format': self.format,
            'rounds': self.rounds,
            'matches': [m.to_dict() for m in self.matches],
            'createdAt': self.created_at,
        }

    def __repr__(self):
        return f"Bracket(format={self.format}, rounds={self.rounds}, matches={len(self.matches)})"
