"""
Runtime configuration from environment variables
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

DEFAULT_SECRET_KEY = 'dev_secret_key_change_in_production'

_TRUE = {'1', 'true', 'yes', 'on'}
_FALSE = {'0', 'false', 'no', 'off'}


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"{name} must be a boolean, got {value!r}")


def _parse_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {value!r}") from None


@dataclass
class AppConfig:
    secret_key: str = DEFAULT_SECRET_KEY
    host: str = "0.0.0.0"
    port: int = 10000
    log_level: str = "INFO"
    placeholder_vaults: bool = True  # fabricate vaults for unknown addresses

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'AppConfig':
        env = os.environ if environ is None else environ
        defaults = cls()

        log_level = env.get("MULTISIG_LOG_LEVEL", defaults.log_level).upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise ValueError(f"MULTISIG_LOG_LEVEL must be a logging level, got {log_level!r}")

        return cls(
            secret_key=env.get("MULTISIG_SECRET_KEY", defaults.secret_key),
            host=env.get("HOST", defaults.host),
            port=_parse_int("PORT", env.get("PORT", str(defaults.port))),
            log_level=log_level,
            placeholder_vaults=_parse_bool(
                "MULTISIG_PLACEHOLDER_VAULTS",
                env.get("MULTISIG_PLACEHOLDER_VAULTS", "true")
            )
        )


def configure_logging(level: str = "INFO") -> None:
    """Root logging setup for entry points; library modules only create loggers"""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
