"""Suite configuration with environment variable overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping

from vc_di_suite.errors import SuiteError
from vc_di_suite.runner import SetupPolicy


ENV_PREFIX = "VC_DI_SUITE_"


class ConfigError(SuiteError):
    """Raised when a configuration value is invalid."""

    error_code = "config"


@dataclass(frozen=True)
class SuiteConfig:
    """Settings for a suite run."""

    implementations: Path = Path("implementations")
    fixture: Path | None = None
    verifier_tag: str = "VC-API"
    issuer_tag: str = "VC-API"
    reference_issuer: str = "Danube Tech"
    reference_issuer_tag: str = "Ed25519Signature2020"
    timeout: float = 30.0
    verify_ssl: bool = True
    max_workers: int = 4
    setup_policy: SetupPolicy = SetupPolicy.MARK_ERRORED
    strict_status: bool = False
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> SuiteConfig:
        """Build a config from ``VC_DI_SUITE_*`` environment variables.

        Raises:
            ConfigError: If a variable cannot be converted.
        """
        environ = os.environ if environ is None else environ
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = environ.get(ENV_PREFIX + f.name.upper())
            if raw is not None:
                values[f.name] = _convert(f.name, raw)
        return cls(**values)

    def with_overrides(self, **overrides: Any) -> SuiteConfig:
        """Copy with every non-None override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def _convert(name: str, raw: str) -> Any:
    try:
        if name in ("implementations", "fixture"):
            return Path(raw)
        if name == "timeout":
            return float(raw)
        if name == "max_workers":
            return int(raw)
        if name in ("verify_ssl", "strict_status"):
            return _parse_bool(raw)
        if name == "setup_policy":
            return SetupPolicy(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid value for {ENV_PREFIX}{name.upper()}: {raw!r}") from e
    return raw


def _parse_bool(raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off"):
        return False
    raise ValueError(raw)
