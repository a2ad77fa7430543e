"""
Resolve which platform the test run targets.

The platform comes from ``ebean.test.platform``. When the caller already
pins a db (for example a command line switch selecting an alternate
platform), that db name is itself taken as the platform identifier.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Mapping, Optional

from platform_autoconfig.config import PLATFORM_KEY
from platform_autoconfig.platforms.abstract import PlatformSetup
from platform_autoconfig.utils.logging import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class Resolution:
    """Outcome of platform resolution; ``setup`` is bound only when known."""

    platform: Optional[str]
    db: Optional[str]
    setup: Optional[PlatformSetup] = None

    @property
    def is_known(self) -> bool:
        return self.setup is not None


class PlatformResolver:
    def __init__(self, known_platforms: Mapping[str, PlatformSetup]) -> None:
        self.known_platforms = known_platforms

    def determine_platform(
        self, db_hint: Optional[str], properties: Mapping[str, str]
    ) -> Resolution:
        """Determine the platform and db name, without looking up a handler."""
        test_platform = properties.get(PLATFORM_KEY)
        if not test_platform:
            return Resolution(platform=None, db=db_hint)
        if db_hint is None:
            # a blank value trims to "" and is then reported as an unknown platform
            return Resolution(platform=test_platform.strip(), db="db")
        # the caller pinned a db; it must match a platform name
        return Resolution(platform=db_hint, db=db_hint)

    def resolve(self, db_hint: Optional[str], properties: Mapping[str, str]) -> Resolution:
        resolution = self.determine_platform(db_hint, properties)
        if resolution.platform is None:
            return resolution

        setup = self.known_platforms.get(resolution.platform)
        if setup is None:
            log.warning(
                "unknown platform %s - skipping platform setup",
                resolution.platform,
                extra={"platform": resolution.platform},
            )
            return resolution
        return Resolution(platform=resolution.platform, db=resolution.db, setup=setup)

    def available_platforms(self) -> List[str]:
        return sorted(self.known_platforms)


__all__ = ["PlatformResolver", "Resolution"]
