import logging
from enum import Enum

from .elimination import calculate_rounds, create_single_elimination_matches
from .errors import FormatNotSupported, InvalidFormat
from .models import Bracket
from .round_robin import create_round_robin_matches

logger = logging.getLogger(__name__)


class BracketFormat(Enum):
    SINGLE_ELIMINATION = 'single-elimination'
    DOUBLE_ELIMINATION = 'double-elimination'
    ROUND_ROBIN = 'round-robin'


def parse_format(value, strict=False):
    """
    Map a format string to a BracketFormat.

    Case-insensitive, '_' and '-' are interchangeable. Empty values mean
    single elimination. Unknown values fall back to single elimination unless
    strict is set, in which case InvalidFormat is raised.
    """
    if isinstance(value, BracketFormat):
        return value
    if not value:
        return BracketFormat.SINGLE_ELIMINATION

    normalized = str(value).strip().lower().replace('_', '-').replace(' ', '-')
    try:
        return BracketFormat(normalized)
    except ValueError:
        if strict:
            raise InvalidFormat(value)
        logger.warning("Unknown tournament format %r, using single-elimination", value)
        return BracketFormat.SINGLE_ELIMINATION


class TournamentFormat:
    def __init__(self, participants):
        self.participants = list(participants)

    def single_elimination(self, created_at=None):
        matches = create_single_elimination_matches(self.participants)
        return Bracket(BracketFormat.SINGLE_ELIMINATION.value,
                       calculate_rounds(len(self.participants)), matches, created_at)

    def round_robin(self, created_at=None):
        matches = create_round_robin_matches(self.participants)
        return Bracket(BracketFormat.ROUND_ROBIN.value, 1, matches, created_at)

    def double_elimination(self, created_at=None):
        raise FormatNotSupported(BracketFormat.DOUBLE_ELIMINATION.value)

    def build(self, fmt, created_at=None):
        builders = {
            BracketFormat.SINGLE_ELIMINATION: self.single_elimination,
            BracketFormat.DOUBLE_ELIMINATION: self.double_elimination,
            BracketFormat.ROUND_ROBIN: self.round_robin,
        }
        return builders[parse_format(fmt)](created_at)
