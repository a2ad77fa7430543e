"""
SAP HANA express platform.

The HANA express image may only be started after accepting the SAP
license, so setup refuses to run unless
``ebean.test.hana.agreeToSapLicense=true``.
"""

from __future__ import annotations

from platform_autoconfig.domain.models import Config, DockerProperties, PlatformConfigError
from platform_autoconfig.platforms.base import DockerPlatformSetup


class HanaSetup(DockerPlatformSetup):
    driver = "hana"
    url_template = "hana://{host}:{port}/?databaseName={database_name}"
    default_version = "2.00.061.00.20220519.1"
    default_port = 39017
    default_username = "SYSTEM"
    default_password = "HXEHana1"

    def setup(self, config: Config) -> DockerProperties:
        agreed = config.platform_property("agreeToSapLicense", "false")
        if agreed.lower() != "true":
            raise PlatformConfigError(
                "hana requires ebean.test.hana.agreeToSapLicense=true "
                "to start the HANA express image"
            )
        return super().setup(config)

    def extra_properties(self, config: Config) -> DockerProperties:
        return {"agreeToSapLicense": "true"}


__all__ = ["HanaSetup"]
