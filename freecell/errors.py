class InvariantError(RuntimeError):
    """Raised when card ownership or move bookkeeping is corrupted."""


class MoveStateError(InvariantError):
    """Raised when execute/undo are called out of order."""


class ConfigError(ValueError):
    """Raised for a game configuration that cannot be dealt."""
