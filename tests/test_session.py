"""Tests for ddconfgen.collectors.session module."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ProfileNotFound, UnknownServiceError

from ddconfgen.collectors.session import create_client, create_session
from ddconfgen.errors import DiscoveryError


class TestCreateSession:
    """Tests for create_session function."""

    def test_create_session_region_only(self):
        """Test creating a session with only a region."""
        with patch("ddconfgen.collectors.session.boto3.Session") as mock_session:
            create_session("ap-northeast-1")

        mock_session.assert_called_once_with(region_name="ap-northeast-1")

    def test_create_session_with_profile(self):
        """Test creating a session with a named profile."""
        with patch("ddconfgen.collectors.session.boto3.Session") as mock_session:
            create_session("us-east-1", profile="monitoring")

        mock_session.assert_called_once_with(region_name="us-east-1", profile_name="monitoring")

    def test_create_session_profile_not_found(self):
        """Test a missing profile surfaces as DiscoveryError."""
        with patch(
            "ddconfgen.collectors.session.boto3.Session",
            side_effect=ProfileNotFound(profile="missing"),
        ):
            with pytest.raises(DiscoveryError, match="failed to load AWS config"):
                create_session("us-east-1", profile="missing")


class TestCreateClient:
    """Tests for create_client function."""

    def test_create_client(self):
        session = MagicMock()

        client = create_client(session, "elasticache")

        session.client.assert_called_once_with("elasticache")
        assert client is session.client.return_value

    def test_create_client_failure(self):
        session = MagicMock()
        session.client.side_effect = UnknownServiceError(
            service_name="nope", known_service_names="elasticache"
        )

        with pytest.raises(DiscoveryError, match="failed to create nope client"):
            create_client(session, "nope")
