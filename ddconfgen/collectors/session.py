"""AWS session construction for discovery.

Credentials are resolved by boto3's default chain (environment, shared
config/credentials files, instance metadata); only the region and an
optional named profile are chosen here.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError

from ddconfgen.errors import DiscoveryError

logger = logging.getLogger(__name__)


def create_session(region: str, profile: Optional[str] = None) -> boto3.Session:
    """Create a boto3 session bound to a region.

    Args:
        region: AWS region name
        profile: Optional named profile

    Returns:
        Configured boto3 Session

    Raises:
        DiscoveryError: If the profile cannot be loaded
    """
    session_kwargs = {"region_name": region}
    if profile:
        session_kwargs["profile_name"] = profile

    logger.debug(f"Creating AWS session (region={region}, profile={profile or 'default'})")
    try:
        return boto3.Session(**session_kwargs)
    except BotoCoreError as e:
        raise DiscoveryError(f"failed to load AWS config: {e}") from e


def create_client(session: Any, service_name: str) -> Any:
    """Create a service client from a session.

    Raises:
        DiscoveryError: If the client cannot be created
    """
    try:
        return session.client(service_name)
    except BotoCoreError as e:
        raise DiscoveryError(f"failed to create {service_name} client: {e}") from e
