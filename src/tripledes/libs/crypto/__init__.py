__all__ = ["BitArray", "CipherError", "PostconditionError", "PreconditionError"]

from .bits import BitArray
from .errors import CipherError, PostconditionError, PreconditionError
