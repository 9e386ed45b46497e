"""DSN parsing and redaction utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, unquote, urlencode, urlparse

from ..errors import DriverConfigurationError
from .redaction import REDACTED_VALUE, redact_query_params


@dataclass
class DSNConfig:
    scheme: str
    username: Optional[str]
    password: Optional[str]
    host: Optional[str]
    port: Optional[int]
    database: Optional[str]
    path: str
    query: dict[str, str]

    @property
    def engine(self) -> str:
        """Scheme without a ``+driver`` suffix (``mysql+pymysql`` -> ``mysql``)."""

        return self.scheme.split("+", 1)[0].lower()

    def redacted(self) -> str:
        """
        Return the DSN with credentials and sensitive query options masked.
        """

        netloc = ""
        if self.username:
            netloc += self.username
            if self.password:
                netloc += f":{REDACTED_VALUE}"
            netloc += "@"
        if self.host:
            netloc += self.host
        if self.port:
            netloc += f":{self.port}"

        query_string = urlencode(redact_query_params(self.query)) if self.query else ""

        # keep the double slash even when netloc is empty (sqlite:///file.db)
        result = f"{self.scheme}://"
        if netloc:
            result += netloc
        result += self.path or ""
        if query_string:
            result += f"?{query_string}"
        return result


def parse_dsn(dsn: str) -> DSNConfig:
    parsed = urlparse(dsn)
    if not parsed.scheme:
        raise DriverConfigurationError(f"DSN is missing a scheme: {dsn!r}")
    query = {k: v[0] for k, v in parse_qs(parsed.query, keep_blank_values=True).items()}
    try:
        port = parsed.port
    except ValueError as exc:
        raise DriverConfigurationError(f"Invalid port in DSN for scheme '{parsed.scheme}'.") from exc
    return DSNConfig(
        scheme=parsed.scheme,
        username=unquote(parsed.username) if parsed.username else None,
        password=unquote(parsed.password) if parsed.password else None,
        host=parsed.hostname,
        port=port,
        database=unquote(parsed.path.lstrip("/")) or None,
        path=parsed.path or "",
        query=query,
    )


def dsn_from_env(env_var: str) -> DSNConfig:
    value = os.getenv(env_var)
    if not value:
        raise DriverConfigurationError(f"Environment variable {env_var} is not set")
    return parse_dsn(value)
