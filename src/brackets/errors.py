"""
Errors raised by the bracket engine and the tournament store.
"""


class BracketError(Exception):
    """Base class for all bracket errors."""


class InvalidInputError(BracketError):
    """Malformed construction request, e.g. fewer than 2 participants."""


class MatchNotFoundError(BracketError):
    """Match index outside the bracket."""


class AlreadyDecidedError(BracketError):
    """The match already has a winner."""


class InvalidParticipantError(BracketError):
    """Winner is not eligible for the match, or the match is not playable yet."""


class TournamentNotFoundError(BracketError):
    """No stored tournament with the given slug."""
