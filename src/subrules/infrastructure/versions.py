"""RuleVersionSource implementations."""

from __future__ import annotations

import logging
from importlib import metadata

from subrules.domain.versions import RuleVersion

logger = logging.getLogger(__name__)


class StaticVersionSource:
    """Always reports the version it was constructed with."""

    def __init__(self, version: RuleVersion | str) -> None:
        if isinstance(version, str):
            version = RuleVersion.parse(version)
        self._version = version

    def get_version(self) -> RuleVersion:
        return self._version


class DistributionVersionSource:
    """Reads the version of an installed distribution (the deployed build).

    The lookup is repeated on every call; installed metadata does not change
    while a process runs, so results are stable.
    """

    def __init__(self, distribution: str) -> None:
        self._distribution = distribution

    def get_version(self) -> RuleVersion:
        raw = metadata.version(self._distribution)
        version = RuleVersion.parse(raw)
        logger.debug("Resolved %s version %s -> %s", self._distribution, raw, version)
        return version
