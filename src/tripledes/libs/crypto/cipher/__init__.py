"""
Block ciphers: single DES and Triple DES (EDE), one 64-bit block at a time.
"""

__all__ = ["DES", "DES3", "BlockCipher", "create_backend"]

from . import DES, DES3
from .backends import BlockCipher, create_backend
