"""
Process configuration for the team survey API.

Settings are read once from the environment when the Lambda module is imported.  The table
prefix picks which set of DynamoDB tables the function talks to; without a usable prefix the
function must not start.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Mapping, Optional

# DynamoDB table names are 3-255 chars from this alphabet; leave room for "_evaluations"
TABLE_PREFIX_RE = re.compile(r"^[A-Za-z0-9_.-]{1,240}$")


@dataclass(frozen=True)
class Config:
    table_prefix: str
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None
    log_level: str = "INFO"

    @property
    def surveys_table(self) -> str:
        return f"{self.table_prefix}_surveys"

    @property
    def evaluations_table(self) -> str:
        return f"{self.table_prefix}_evaluations"


def load_config(environ: Mapping[str, str]) -> Config:
    """
    Build the configuration from an environment mapping.

    Raises:
        RuntimeError: If SURVEY_TABLE_PREFIX is missing or not a valid table name prefix, or
            LOG_LEVEL names no logging level.
    """
    prefix = (environ.get("SURVEY_TABLE_PREFIX") or "").strip()
    if not prefix:
        raise RuntimeError("SURVEY_TABLE_PREFIX is not set")
    if not TABLE_PREFIX_RE.match(prefix):
        raise RuntimeError(f"SURVEY_TABLE_PREFIX is not a valid table name prefix: {prefix!r}")

    log_level = environ.get("LOG_LEVEL", "INFO").upper()
    if not isinstance(logging.getLevelName(log_level), int):
        raise RuntimeError(f"LOG_LEVEL is not a logging level: {log_level!r}")

    return Config(
        table_prefix=prefix,
        region=environ.get("AWS_REGION", "us-east-1"),
        endpoint_url=environ.get("DYNAMODB_ENDPOINT_URL") or None,
        log_level=log_level,
    )
