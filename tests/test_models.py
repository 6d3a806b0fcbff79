"""
Unit tests for bracket data models.
"""
import pytest
import sys
import os
from datetime import datetime, timezone

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from core.models import Bracket, Match, MatchStatus, Participant, utc_timestamp


class TestParticipant:
    """Tests for the Participant class."""

    def test_from_record_uses_backend_fields(self):
        """Backend records carry _id and teamName."""
        p = Participant.from_record({'_id': 'abc', 'teamName': 'Falcons'}, 3)
        assert p.id == 'abc'
        assert p.name == 'Falcons'
        assert p.seed == 3

    def test_from_record_falls_back_to_plain_fields(self):
        """Records without _id/teamName use id and name."""
        p = Participant.from_record({'id': 7, 'name': 'Owls'}, 1)
        assert p.id == 7
        assert p.name == 'Owls'

    def test_from_record_reseeds_participant(self):
        """An existing Participant gets the new seed."""
        p = Participant.from_record(Participant('x', 'X', 9), 2)
        assert p == Participant('x', 'X', 2)

    def test_from_dict_none(self):
        """Empty slots stay None."""
        assert Participant.from_dict(None) is None


class TestMatch:
    """Tests for the Match class."""

    def test_to_dict_uses_wire_field_names(self):
        """Serialized matches use the camelCase wire names."""
        match = Match(4, 2, 1, team1=Participant('a', 'A', 1))
        data = match.to_dict()
        assert set(data) == {'matchId', 'round', 'matchInRound', 'team1', 'team2',
                             'status', 'winner', 'result', 'scheduledTime'}
        assert data['team1'] == {'id': 'a', 'name': 'A', 'seed': 1}
        assert data['team2'] is None

    def test_team_for_compares_ids_as_strings(self):
        """Numeric ids from forms match stored ids."""
        match = Match(1, 1, 1, team1=Participant(10, 'A', 1), team2=Participant(20, 'B', 2))
        assert match.team_for('20').name == 'B'
        assert match.team_for('30') is None

    def test_has_both_teams(self):
        assert not Match(1, 1, 1, team1=Participant('a', 'A', 1)).has_both_teams
        assert Match(1, 1, 1, team1=Participant('a', 'A', 1), team2=Participant('b', 'B', 2)).has_both_teams


class TestBracket:
    """Tests for the Bracket class."""

    def test_from_dict_restores_matches(self):
        """A stored bracket loads back with its matches and slots."""
        data = {
            'format': 'single-elimination',
            'rounds': 1,
            'createdAt': '2026-01-01T00:00:00.000Z',
            'matches': [{
                'matchId': 1, 'round': 1, 'matchInRound': 1,
                'team1': {'id': 'a', 'name': 'A', 'seed': 1},
                'team2': {'id': 'b', 'name': 'B', 'seed': 2},
                'status': 'completed', 'winner': 'a',
                'result': {'winner': 'a', 'notes': '2-0'}, 'scheduledTime': None,
            }],
        }
        bracket = Bracket.from_dict(data)
        assert bracket.matches[0].team2.name == 'B'
        assert bracket.matches[0].status == MatchStatus.COMPLETED
        assert bracket.to_dict() == data

    def test_copy_is_independent(self):
        """Copies do not share match objects."""
        bracket = Bracket('round-robin', 1, [Match(1, 1, 1)])
        clone = bracket.copy()
        clone.matches[0].status = MatchStatus.COMPLETED
        assert bracket.matches[0].status == MatchStatus.SCHEDULED

    def test_created_at_defaults_to_now(self):
        assert Bracket('round-robin', 1).created_at.endswith('Z')


class TestUtcTimestamp:
    def test_millisecond_precision(self):
        now = datetime(2026, 3, 4, 5, 6, 7, 891234, tzinfo=timezone.utc)
        assert utc_timestamp(now) == '2026-03-04T05:06:07.891Z'
