"""
Single elimination bracket generation and winner advancement.
"""
from typing import List, Dict, Optional

from .models import Match, MatchStatus, Participant


def get_round_name(round_number: int, total_rounds: int) -> str:
    """Get the display name of a round, counted back from the final."""
    if round_number == total_rounds:
        return "Final"
    elif round_number == total_rounds - 1:
        return "Semi-Final"
    elif round_number == total_rounds - 2:
        return "Quarter-Final"
    else:
        return f"Round {round_number}"


def calculate_rounds(num_participants: int) -> int:
    """ceil(log2(n)) rounds; a lone participant still gets one round."""
    if num_participants <= 0:
        return 0
    if num_participants == 1:
        return 1
    return (num_participants - 1).bit_length()


def calculate_bracket_size(num_participants: int) -> int:
    """Calculate the bracket size (next power of 2)."""
    if num_participants <= 0:
        return 0
    return 2 ** calculate_rounds(num_participants)


def calculate_byes(num_participants: int) -> int:
    """Calculate number of empty first-round slots."""
    return calculate_bracket_size(num_participants) - num_participants


def first_round_status(team1: Optional[Participant], team2: Optional[Participant]) -> str:
    if team1 is None and team2 is None:
        return MatchStatus.NO_TEAMS
    if team1 is None or team2 is None:
        return MatchStatus.BYE
    return MatchStatus.SCHEDULED


def create_single_elimination_matches(participants: List[Participant]) -> List[Match]:
    """
    Create every match of a single elimination bracket.

    Round 1 pairs participants in list order: match m takes the participants
    at indices 2(m-1) and 2(m-1)+1. Later rounds start empty and are filled
    by advancement. Match ids run 1..M, round by round.
    """
    num_participants = len(participants)
    if num_participants == 0:
        return []

    if num_participants == 1:
        only = participants[0]
        return [Match(1, 1, 1, team1=only, team2=None,
                      status=MatchStatus.BYE, winner=only.id)]

    num_rounds = calculate_rounds(num_participants)
    matches = []
    match_id = 1

    for round_number in range(1, num_rounds + 1):
        matches_in_round = 2 ** (num_rounds - round_number)

        for match_in_round in range(1, matches_in_round + 1):
            team1 = team2 = None
            if round_number == 1:
                team1_index = (match_in_round - 1) * 2
                team2_index = team1_index + 1
                if team1_index < num_participants:
                    team1 = participants[team1_index]
                if team2_index < num_participants:
                    team2 = participants[team2_index]
                status = first_round_status(team1, team2)
            else:
                status = MatchStatus.AWAITING

            matches.append(Match(match_id, round_number, match_in_round,
                                 team1=team1, team2=team2, status=status))
            match_id += 1

    return matches


def find_match(matches: List[Match], round_number: int, match_in_round: int) -> Optional[Match]:
    for match in matches:
        if match.round == round_number and match.match_in_round == match_in_round:
            return match
    return None


def next_match_position(match: Match) -> tuple:
    """(round, matchInRound) of the match the winner of `match` moves into."""
    return match.round + 1, (match.match_in_round + 1) // 2


def advance_winner(matches: List[Match], completed_match: Match) -> Optional[Match]:
    """
    Write the winner of completed_match into its downstream slot.

    Odd matchInRound feeds team1, even feeds team2. The downstream match is
    promoted to scheduled once both slots are filled. A downstream bye (see
    resolve_byes) passes the winner straight on. Returns the downstream
    match, or None when completed_match was the final.
    """
    if completed_match.winner is None:
        return None

    next_match = find_match(matches, *next_match_position(completed_match))
    if next_match is None:
        return None

    winner_team = completed_match.team_for(completed_match.winner)
    if completed_match.match_in_round % 2 == 1:
        next_match.team1 = winner_team
    else:
        next_match.team2 = winner_team

    if next_match.has_both_teams and next_match.status == MatchStatus.AWAITING:
        next_match.status = MatchStatus.SCHEDULED
    elif next_match.status == MatchStatus.BYE and winner_team is not None:
        next_match.winner = winner_team.id
        advance_winner(matches, next_match)

    return next_match


def _feeders(matches: List[Match], match: Match) -> tuple:
    previous_round = match.round - 1
    return (find_match(matches, previous_round, match.match_in_round * 2 - 1),
            find_match(matches, previous_round, match.match_in_round * 2))


def _is_empty(match: Optional[Match]) -> bool:
    return match is None or match.status == MatchStatus.NO_TEAMS


def resolve_byes(matches: List[Match]) -> None:
    """
    Carry bye winners forward through the bracket, in place.

    A round-1 bye is won by its only team. In later rounds a match fed by two
    empty matches is empty too, and a match fed by exactly one empty match is
    a bye: whoever arrives from the other side goes straight through.
    """
    num_rounds = max((m.round for m in matches), default=0)

    for round_number in range(1, num_rounds + 1):
        for match in [m for m in matches if m.round == round_number]:
            if round_number > 1 and match.status == MatchStatus.AWAITING:
                empty1, empty2 = (_is_empty(f) for f in _feeders(matches, match))
                if empty1 and empty2:
                    match.status = MatchStatus.NO_TEAMS
                elif empty1 or empty2:
                    match.status = MatchStatus.BYE

            if match.status != MatchStatus.BYE:
                continue
            if match.winner is None:
                lone_team = match.team1 or match.team2
                if lone_team is None:
                    continue
                match.winner = lone_team.id
            advance_winner(matches, match)


def matches_by_round(matches: List[Match]) -> Dict[int, List[Match]]:
    rounds = {}
    for match in sorted(matches, key=lambda m: (m.round, m.match_in_round or 0)):
        rounds.setdefault(match.round, []).append(match)
    return rounds
