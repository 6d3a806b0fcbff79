"""
Bracket management flows for the host dashboard.

The manager holds no bracket state of its own: callers pass the current
bracket in and get the new one back, so a failed save leaves the caller's
copy exactly as it was.
"""
import logging

from api_client import ApiError
from core import engine
from core.errors import EmptyParticipants, PersistenceFailure
from core.models import Bracket

logger = logging.getLogger(__name__)


class BracketManager:
    def __init__(self, client):
        self.client = client

    def load_tournament(self, tournament_id):
        """Return (tournament, participants) for a tournament."""
        response = self.client.get_tournament(tournament_id)
        if not response.get('success'):
            raise ApiError('Failed to load tournament details')
        tournament = response.get('data') or {}

        participants = []
        response = self.client.get_tournament_participants(tournament_id)
        if response.get('success'):
            participants = (response.get('data') or {}).get('participants') or []
        return tournament, participants

    def check_existing_brackets(self, tournament_id):
        """Best-effort probe: any failure means there is no bracket yet."""
        try:
            response = self.client.get_tournament_brackets(tournament_id)
        except ApiError as e:
            logger.debug(f'No existing brackets found for {tournament_id}: {e}')
            return None
        if response.get('success') and response.get('data'):
            return Bracket.from_dict(response['data'])
        return None

    def generate_brackets(self, tournament, participants):
        """Generate a bracket from the tournament's format, resolve its byes and save it."""
        if not tournament or not participants:
            raise EmptyParticipants()

        bracket = engine.resolve_byes(engine.generate(tournament.get('format'), participants))
        tournament_id = tournament.get('_id', tournament.get('id'))
        try:
            response = self.client.create_tournament_brackets(tournament_id, bracket.to_dict())
        except ApiError as e:
            raise PersistenceFailure(f'Failed to generate brackets: {e}') from e
        if not response.get('success'):
            raise PersistenceFailure(response.get('message') or 'Failed to generate brackets')

        logger.info(f'Generated {bracket.format} bracket with {len(bracket.matches)} matches for {tournament_id}')
        saved = response.get('data')
        return Bracket.from_dict(saved) if saved else bracket

    def submit_match_result(self, tournament_id, bracket, match_id, winner_id, notes=''):
        """
        Record a result locally, then save it.

        Eligibility is checked before anything is sent. Byes are resolved on
        both sides so the local and stored brackets stay the same. If the
        save fails, PersistenceFailure is raised and no updated bracket is
        returned.
        """
        updated = engine.resolve_byes(engine.record_result(bracket, match_id, winner_id, notes))
        match = engine.get_match(updated, match_id)
        payload = {'winner': match.winner, 'notes': notes or '', 'status': match.status,
                   'resolveByes': True}
        try:
            response = self.client.update_match_result(tournament_id, match.match_id, payload)
        except ApiError as e:
            raise PersistenceFailure(f'Failed to save match result: {e}') from e
        if not response.get('success'):
            raise PersistenceFailure(response.get('message') or 'Failed to save match result')
        return updated
