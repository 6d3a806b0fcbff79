"""
Round robin schedule generation and standings.
"""
from itertools import combinations
from typing import List, Dict

from .models import Match, MatchStatus, Participant


def create_round_robin_matches(participants: List[Participant]) -> List[Match]:
    """Every unordered pair plays once, all in round 1, in seed order."""
    matches = []
    for match_id, (team1, team2) in enumerate(combinations(participants, 2), start=1):
        matches.append(Match(match_id, 1, match_id, team1=team1, team2=team2,
                             status=MatchStatus.SCHEDULED))
    return matches


def calculate_standings(matches: List[Match]) -> List[Dict]:
    """
    Tally played/wins/losses per participant from completed matches.

    Sorted by wins (desc), then seed (asc).
    """
    table = {}

    def row_for(team):
        key = str(team.id)
        if key not in table:
            table[key] = {'id': team.id, 'name': team.name, 'seed': team.seed,
                          'played': 0, 'wins': 0, 'losses': 0}
        return table[key]

    for match in matches:
        for team in (match.team1, match.team2):
            if team is not None:
                row_for(team)
        if match.status != MatchStatus.COMPLETED or not match.has_both_teams:
            continue
        for team in (match.team1, match.team2):
            row = row_for(team)
            row['played'] += 1
            if str(team.id) == str(match.winner):
                row['wins'] += 1
            else:
                row['losses'] += 1

    return sorted(table.values(), key=lambda r: (-r['wins'], r['seed'] if r['seed'] is not None else 0))
