"""Semantic version ordering for registry version lists."""

from __future__ import annotations

import logging
from collections.abc import Iterable

import semver

logger = logging.getLogger(__name__)


def sort_versions_desc(versions: Iterable[str]) -> list[str]:
    """Sort version strings newest to oldest by semver precedence.

    Prereleases rank below their release (``1.0.0-1 < 1.0.0``) and above
    every lower release (``2.0.0-next.1 > 1.9.0``). Versions that are not
    valid semver sort after every valid version and keep their original
    relative order.

    Args:
        versions: Version strings as published (e.g. keys of a registry document)

    Returns:
        New list ordered newest first
    """
    parsed: list[tuple[semver.Version, str]] = []
    unparsed: list[str] = []

    for raw in versions:
        try:
            parsed.append((semver.Version.parse(raw), raw))
        except (ValueError, TypeError):
            logger.debug(f"Unparseable version '{raw}', ordering it last")
            unparsed.append(raw)

    parsed.sort(key=lambda item: item[0], reverse=True)
    return [raw for _, raw in parsed] + unparsed
