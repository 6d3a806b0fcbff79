"""
Bracket engine: generation, result entry and winner advancement.

Every public operation takes a Bracket and returns a new one; the input is
never modified.
"""
from datetime import datetime
from typing import List, Dict, Optional

from . import elimination
from .errors import EmptyParticipants, InvalidBracket, MatchNotEligible, MatchNotFound
from .formats import BracketFormat, TournamentFormat, parse_format
from .models import Bracket, Match, MatchStatus, Participant, utc_timestamp
from .round_robin import calculate_standings

STATUS_TEXT = {
    MatchStatus.SCHEDULED: 'Scheduled',
    MatchStatus.ONGOING: 'Ongoing',
    MatchStatus.COMPLETED: 'Completed',
    MatchStatus.BYE: 'Bye',
    MatchStatus.AWAITING: 'Awaiting',
}


def seed_participants(records) -> List[Participant]:
    """Assign 1-based seeds in list order."""
    return [Participant.from_record(record, seed) for seed, record in enumerate(records, start=1)]


def generate(fmt, participants, created_at=None) -> Bracket:
    """
    Generate a fresh bracket for the given format.

    participants is an ordered sequence of Participant objects or backend
    records; index 0 becomes seed 1. Raises EmptyParticipants for an empty
    list and FormatNotSupported for double elimination.
    """
    seeded = seed_participants(participants or [])
    if not seeded:
        raise EmptyParticipants()
    if isinstance(created_at, datetime):
        created_at = utc_timestamp(created_at)
    return TournamentFormat(seeded).build(parse_format(fmt), created_at)


def get_match(bracket: Bracket, match_id) -> Optional[Match]:
    for match in bracket.matches:
        if str(match.match_id) == str(match_id):
            return match
    return None


def bracket_from_dict(data) -> Bracket:
    """
    Build a Bracket from its wire form, rejecting data that breaks the match
    invariants: every match has a unique id and a known status, and a
    completed match's winner is one of its teams.
    """
    try:
        bracket = Bracket.from_dict(data)
    except (AttributeError, KeyError, TypeError) as e:
        raise InvalidBracket(f"malformed match data ({e!r})") from e

    seen = set()
    for match in bracket.matches:
        if match.match_id is None:
            raise InvalidBracket("every match needs a matchId")
        if str(match.match_id) in seen:
            raise InvalidBracket(f"duplicate matchId {match.match_id}")
        seen.add(str(match.match_id))
        if match.status not in MatchStatus.ALL:
            raise InvalidBracket(f"match {match.match_id} has unknown status {match.status!r}")
        if match.status == MatchStatus.COMPLETED and match.team_for(match.winner) is None:
            raise InvalidBracket(f"winner of match {match.match_id} is not one of its teams")
    return bracket


def check_result_eligible(bracket: Bracket, match_id, winner_id) -> Match:
    match = get_match(bracket, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    if not match.has_both_teams:
        raise MatchNotEligible(match_id, "both teams must be assigned before entering a result")
    if match.status != MatchStatus.SCHEDULED:
        raise MatchNotEligible(match_id, f"cannot enter a result for a {match.status} match")
    if match.team_for(winner_id) is None:
        raise MatchNotEligible(match_id, f"winner {winner_id} is not playing in this match")
    return match


def record_result(bracket: Bracket, match_id, winner_id, notes='') -> Bracket:
    """Complete a match and, for single elimination, advance its winner."""
    check_result_eligible(bracket, match_id, winner_id)

    updated = bracket.copy()
    match = get_match(updated, match_id)
    winner = match.team_for(winner_id).id
    match.winner = winner
    match.status = MatchStatus.COMPLETED
    match.result = {'winner': winner, 'notes': notes or ''}

    _advance(updated, match)
    return updated


def _advance(bracket: Bracket, match: Match) -> Optional[Match]:
    if parse_format(bracket.format) != BracketFormat.SINGLE_ELIMINATION:
        return None
    return elimination.advance_winner(bracket.matches, match)


def advance_winner(bracket: Bracket, match_id) -> Bracket:
    """Re-apply advancement for a decided match. Idempotent."""
    updated = bracket.copy()
    match = get_match(updated, match_id)
    if match is None:
        raise MatchNotFound(match_id)
    _advance(updated, match)
    return updated


def resolve_byes(bracket: Bracket) -> Bracket:
    """Carry bye winners forward (single elimination only). Idempotent."""
    updated = bracket.copy()
    if parse_format(updated.format) == BracketFormat.SINGLE_ELIMINATION:
        elimination.resolve_byes(updated.matches)
    return updated


def pending_matches(bracket: Bracket) -> List[Match]:
    """Matches that can take a result right now."""
    return [m for m in bracket.matches if m.status == MatchStatus.SCHEDULED and m.has_both_teams]


def champion(bracket: Bracket) -> Optional[Participant]:
    if parse_format(bracket.format) != BracketFormat.SINGLE_ELIMINATION:
        return None
    final = elimination.find_match(bracket.matches, bracket.rounds, 1)
    if final is None or final.winner is None:
        return None
    return final.team_for(final.winner)


def get_status_text(status: str) -> str:
    return STATUS_TEXT.get(status, 'Unknown')


def get_bracket_display(bracket: Bracket) -> Dict:
    """
    Get bracket data formatted for display.
    """
    fmt = parse_format(bracket.format)
    rounds = {}
    for round_number, matches in elimination.matches_by_round(bracket.matches).items():
        if fmt == BracketFormat.SINGLE_ELIMINATION:
            round_name = elimination.get_round_name(round_number, bracket.rounds)
        else:
            round_name = f"Round {round_number}"
        rounds[round_name] = [dict(m.to_dict(), statusText=get_status_text(m.status)) for m in matches]

    winner = champion(bracket)
    display = {
        'format': bracket.format,
        'total_rounds': bracket.rounds,
        'total_matches': len(bracket.matches),
        'rounds': rounds,
        'byes': sum(1 for m in bracket.matches if m.status == MatchStatus.BYE),
        'pending': len(pending_matches(bracket)),
        'completed': sum(1 for m in bracket.matches if m.status == MatchStatus.COMPLETED),
        'champion': winner.to_dict() if winner else None,
    }
    if fmt == BracketFormat.ROUND_ROBIN:
        display['standings'] = calculate_standings(bracket.matches)
    return display
