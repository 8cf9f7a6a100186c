class CipherError(Exception):
    """Base class for cipher failures."""


class PreconditionError(CipherError, ValueError):
    """A caller passed an argument that violates an operation's contract."""


class PostconditionError(CipherError, RuntimeError):
    """An operation produced a result that violates its own contract."""
