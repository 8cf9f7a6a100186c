"""
Defines structured configuration models using dataclasses.
"""

from dataclasses import dataclass


@dataclass
class CipherConfig:
    """Configuration for the command-line cipher front end.

    Attributes:
        backend: Single-DES backend name ("builtin" or "pycryptodome").
        input_format: Encoding of keys and blocks read from the command line.
        output_format: Encoding of the result block.
    """

    backend: str = "builtin"
    input_format: str = "hex"
    output_format: str = "hex"


@dataclass
class LogConfig:
    """Configuration for console logging.

    Attributes:
        log_level: Logging level name such as "INFO" or "DEBUG".
    """

    log_level: str = "WARNING"
