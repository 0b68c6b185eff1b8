"""Platform GraphQL API client and global ID helpers."""

from shopbridge.infrastructure.platform.client import (
    GraphQLResponse,
    PlatformClient,
    gid,
)

__all__ = ["GraphQLResponse", "PlatformClient", "gid"]
