from __future__ import annotations

from typing import Any

from tripledes.schemas import CipherConfig, LogConfig

SUPPORTED_BACKENDS = ("builtin", "pycryptodome")
SUPPORTED_FORMATS = ("hex", "base64")


class ConfigAdapter:
    """Typed accessor over a loaded configuration mapping.

    Values are read from the ``general`` block and fall back to built-in
    defaults when missing.

    Args:
        config (dict[str, Any]): Loaded configuration mapping, usually the
            result of :func:`~tripledes.infra.config.load_config`.
    """

    def __init__(self, config: dict[str, Any]) -> None:
        self._config: dict[str, Any] = dict(config)

    def get_cipher_config(self) -> CipherConfig:
        """Build a CipherConfig from general settings.

        Returns:
            CipherConfig: Resolved cipher settings.

        Raises:
            ValueError: If the backend or an encoding name is not supported.
        """
        general_cfg = self._gen_cfg()

        backend = general_cfg.get("backend", "builtin")
        if backend not in SUPPORTED_BACKENDS:
            raise ValueError(f"Unsupported backend in config: {backend!r}")

        formats = {}
        for key in ("input_format", "output_format"):
            value = general_cfg.get(key, "hex")
            if value not in SUPPORTED_FORMATS:
                raise ValueError(f"Unsupported {key} in config: {value!r}")
            formats[key] = value

        return CipherConfig(backend=backend, **formats)

    def get_log_config(self) -> LogConfig:
        """Build a LogConfig from ``general.debug`` settings.

        Returns:
            LogConfig: Resolved logging settings.
        """
        debug_cfg = self._gen_cfg().get("debug") or {}
        level = debug_cfg.get("log_level")
        return LogConfig(log_level=level if isinstance(level, str) else "WARNING")

    def _gen_cfg(self) -> dict[str, Any]:
        """Return general configuration mapping.

        Returns:
            dict[str, Any]: ``general`` config or empty dict.
        """
        general = self._config.get("general")
        return general if isinstance(general, dict) else {}
