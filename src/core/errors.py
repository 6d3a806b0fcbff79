"""
Errors raised by bracket generation, result entry and persistence.
"""


class BracketError(Exception):
    """Base class for bracket errors shown to the host."""


class InvalidFormat(BracketError):
    def __init__(self, value):
        super().__init__(f"Unknown tournament format: {value!r}")
        self.value = value


class EmptyParticipants(BracketError):
    def __init__(self, message="No participants found for bracket generation"):
        super().__init__(message)


class FormatNotSupported(BracketError):
    def __init__(self, fmt):
        super().__init__(f"{fmt} brackets are not supported yet")
        self.format = fmt


class MatchNotEligible(BracketError):
    def __init__(self, match_id, reason):
        super().__init__(f"Match {match_id}: {reason}")
        self.match_id = match_id
        self.reason = reason


class MatchNotFound(MatchNotEligible):
    def __init__(self, match_id):
        super().__init__(match_id, "no such match in bracket")


class PersistenceFailure(BracketError):
    """The backend rejected or never received a bracket change."""


class InvalidBracket(BracketError):
    """A bracket received from outside breaks the match invariants."""

    def __init__(self, reason):
        super().__init__(f"Invalid bracket: {reason}")
        self.reason = reason
