from .version import __version__ as __version__

__title__ = "tripledes"
__description__ = "Triple DES (EDE) single-block encryption and decryption."
__license__ = "Apache-2.0"
