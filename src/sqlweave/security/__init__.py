"""Credential handling helpers for sqlweave."""

from .dsns import DSNConfig, dsn_from_env, parse_dsn
from .redaction import redact_params, redact_value

__all__ = ["DSNConfig", "dsn_from_env", "parse_dsn", "redact_params", "redact_value"]
