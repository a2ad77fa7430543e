"""
SQL Server platform.

The container only provisions the ``sa`` login; the password must satisfy
the SQL Server complexity policy.
"""

from __future__ import annotations

from platform_autoconfig.platforms.base import DockerPlatformSetup


class SqlServerSetup(DockerPlatformSetup):
    driver = "mssql"
    url_template = "mssql://{host}:{port}/{database_name}"
    default_version = "2019-latest"
    default_port = 1433
    default_username = "sa"
    default_password = "SqlS3rv#r"


__all__ = ["SqlServerSetup"]
