"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, subrules.toml only contains
overrides. A typical file sets only ``[subscriber] name``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from subrules.domain.filters import MAX_FILTER_LENGTH
from subrules.domain.versions import RuleVersion

# --- subrules.toml sections ---


class SubscriberConfig(BaseModel):
    """[subscriber] section."""

    model_config = {"frozen": True}

    name: str = "subscriber"
    omit_specific_subscriber_filter: bool = False


class BrokerConfig(BaseModel):
    """[broker] section."""

    model_config = {"frozen": True}

    max_filter_length: int = Field(default=MAX_FILTER_LENGTH, gt=0)


class VersionConfig(BaseModel):
    """[version] section.

    ``value`` pins an explicit ``major.minor.patch``; otherwise the version
    of the installed ``distribution`` is used.
    """

    model_config = {"frozen": True}

    value: str | None = None
    distribution: str = "subrules"

    @field_validator("value")
    @classmethod
    def _check_value(cls, value: str | None) -> str | None:
        if value is not None:
            RuleVersion.parse(value)
        return value

