"""AWS client helpers used by providers."""

from ddconfgen.collectors.session import create_client, create_session

__all__ = ["create_client", "create_session"]
