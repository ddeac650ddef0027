"""Guard failures raised by the codecs, the rules and the step programs.

Every check aborts the whole action; nothing here is meant to be caught and
retried inside the package.
"""

from __future__ import annotations


class MastermindError(ValueError):
    """Base class for every rejected action."""


class InvalidEncoding(MastermindError):
    """Raised when a packed value is out of bounds or does not round-trip."""


class ZeroDigit(MastermindError):
    """Raised when a combination digit other than the first is zero."""


class DuplicateDigit(MastermindError):
    """Raised when two combination digits are equal."""


class IndexOutOfRange(MastermindError):
    """Raised when a history slot index does not select exactly one slot."""


class TurnSequenceViolation(MastermindError):
    """Raised on wrong turn parity, exceeded turn bound or wrong lifecycle phase."""


class IdentityMismatch(MastermindError):
    """Raised when a signature or a stored player identity does not match."""


class CommitmentMismatch(MastermindError):
    """Raised when the recomputed solution commitment differs from the stored one."""


class AlreadyFinalized(MastermindError):
    """Raised when acting on a solved, expired or paid-out game."""


class NotYetFinalized(MastermindError):
    """Raised when a terminal-only action is attempted mid-game."""


class StaleChain(MastermindError):
    """Raised when a settled step chain is not ahead of the stored turn count."""
