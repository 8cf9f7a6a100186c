"""
Command-line front end.

Usage:
    tripledes encrypt --key 0123456789abcdef23456789abcdef01 5468652071756663
    tripledes decrypt --key <hex> --backend pycryptodome <hex block>
    tripledes init-config [PATH] [--force]
    tripledes save-config SOURCE [--output PATH]
"""

from __future__ import annotations

import argparse
import base64
import binascii
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

from tripledes import __version__
from tripledes.infra.config import (
    ConfigAdapter,
    copy_default_config,
    load_config,
    save_config_file,
)
from tripledes.infra.config.adapter import SUPPORTED_BACKENDS, SUPPORTED_FORMATS
from tripledes.infra.logger import setup_logging
from tripledes.infra.paths import DEFAULT_CONFIG_FILENAME
from tripledes.libs.crypto import BitArray, CipherError
from tripledes.libs.crypto.cipher import DES3, create_backend
from tripledes.schemas import CipherConfig

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_USAGE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tripledes",
        description="Triple DES (EDE) single-block cipher.",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a settings.toml or settings.json file",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Override the configured log level (DEBUG, INFO, WARNING, ERROR)",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    for name, verb in (("encrypt", "Encrypt"), ("decrypt", "Decrypt")):
        p = sub.add_parser(name, help=f"{verb} one 64-bit block")
        p.add_argument(
            "--key",
            required=True,
            help="Key material: 112, 128, 168 or 192 bits",
        )
        p.add_argument("block", help="The 64-bit data block")
        p.add_argument(
            "--backend",
            choices=SUPPORTED_BACKENDS,
            default=None,
            help="Single-DES backend (overrides config)",
        )
        p.add_argument(
            "--input-format",
            choices=SUPPORTED_FORMATS,
            default=None,
            help="Encoding of --key and block (overrides config)",
        )
        p.add_argument(
            "--output-format",
            choices=SUPPORTED_FORMATS,
            default=None,
            help="Encoding of the printed result (overrides config)",
        )

    p = sub.add_parser("init-config", help="Write the sample settings file")
    p.add_argument(
        "path",
        nargs="?",
        type=Path,
        default=Path(DEFAULT_CONFIG_FILENAME),
        help=f"Destination (default: ./{DEFAULT_CONFIG_FILENAME})",
    )
    p.add_argument("--force", action="store_true", help="Overwrite an existing file")

    p = sub.add_parser(
        "save-config", help="Convert a TOML/JSON settings file to the user JSON file"
    )
    p.add_argument("source", type=Path, help="settings.toml or settings.json to convert")
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Destination (default: the per-user settings.json)",
    )

    return parser


def _decode(value: str, fmt: str) -> BitArray:
    if fmt == "base64":
        try:
            return BitArray.from_bytes(base64.b64decode(value, validate=True))
        except binascii.Error as e:
            raise ValueError(f"Invalid base64 value: {value!r}") from e
    return BitArray.from_hex(value)


def _encode(block: BitArray, fmt: str) -> str:
    if fmt == "base64":
        return base64.b64encode(block.to_bytes()).decode("ascii")
    return block.hex()


def _load_adapter(config_path: Path | None) -> ConfigAdapter:
    try:
        config = load_config(config_path)
    except FileNotFoundError:
        logger.debug("No config file found; using defaults")
        config = {}
    return ConfigAdapter(config)


def _run_cipher(args: argparse.Namespace, cfg: CipherConfig) -> int:
    backend = create_backend(args.backend or cfg.backend)
    cipher = DES3.TripleDESCipher(backend)

    in_fmt = args.input_format or cfg.input_format
    key = _decode(args.key, in_fmt)
    block = _decode(args.block, in_fmt)

    if args.command == "encrypt":
        result = cipher.encrypt(key, block)
    else:
        result = cipher.decrypt(key, block)

    print(_encode(result, args.output_format or cfg.output_format))
    return EXIT_OK


def _run_init_config(args: argparse.Namespace) -> int:
    target: Path = args.path.expanduser()
    if target.exists() and not args.force:
        print(f"error: {target} already exists (use --force)", file=sys.stderr)
        return EXIT_ERROR
    copy_default_config(target)
    print(f"Wrote {target}")
    return EXIT_OK


def _run_save_config(args: argparse.Namespace) -> int:
    save_config_file(args.source, args.output)
    print(f"Saved {args.source}")
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the ``tripledes`` console script.

    Returns:
        Process exit status: 0 on success, 1 for environment failures
        (unwritable files, missing optional backends) and 2 for invalid
        input or configuration.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        # Config maintenance commands must work even when the config is broken.
        if args.command in ("init-config", "save-config"):
            setup_logging(args.log_level or "WARNING")
            if args.command == "init-config":
                return _run_init_config(args)
            return _run_save_config(args)

        adapter = _load_adapter(args.config)
        cipher_cfg = adapter.get_cipher_config()
        log_cfg = adapter.get_log_config()
        setup_logging(args.log_level or log_cfg.log_level)
        return _run_cipher(args, cipher_cfg)

    except (CipherError, ValueError, TypeError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_USAGE
    except (ImportError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
