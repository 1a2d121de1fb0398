"""Pytest configuration and shared fixtures for ddconfgen tests.

This module provides fake boto3 clients, sample AWS API responses and
helpers for writing temporary config and template files.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional
from unittest.mock import MagicMock

import pytest

from ddconfgen.config import get_settings


# ============================================================================
# Custom Pytest Markers
# ============================================================================

def pytest_configure(config):
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers", "aws: marks tests that exercise AWS client interactions (mocked)"
    )


# ============================================================================
# AWS Response Builders
# ============================================================================

def make_tag_mapping(arn: str, tags: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
    """Build one ResourceTagMappingList entry as returned by GetResources."""
    return {
        "ResourceARN": arn,
        "Tags": [{"Key": k, "Value": v} for k, v in (tags or {}).items()],
    }


def make_member(
    address: Optional[str],
    port: int = 6379,
    role: Optional[str] = "primary",
    cache_cluster_id: str = "cluster-001",
) -> Dict[str, Any]:
    """Build one NodeGroupMembers entry as returned by DescribeReplicationGroups."""
    member: Dict[str, Any] = {"CacheClusterId": cache_cluster_id}
    if role is not None:
        member["CurrentRole"] = role
    if address is not None:
        member["ReadEndpoint"] = {"Address": address, "Port": port}
    return member


def make_replication_group(group_id: str, node_groups: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Build a DescribeReplicationGroups response for one replication group."""
    return {
        "ReplicationGroups": [
            {
                "ReplicationGroupId": group_id,
                "NodeGroups": node_groups,
            }
        ]
    }


# ============================================================================
# AWS Mock Fixtures
# ============================================================================

@pytest.fixture
def mock_tagging_client() -> Callable[..., MagicMock]:
    """Factory for a mock resourcegroupstaggingapi client.

    Returns:
        Callable taking a list of ResourceTagMappingList entries (one page)
    """

    def _factory(mappings: Optional[List[Dict[str, Any]]] = None) -> MagicMock:
        client = MagicMock()
        paginator = MagicMock()
        paginator.paginate.return_value = [{"ResourceTagMappingList": mappings or []}]
        client.get_paginator.return_value = paginator
        return client

    return _factory


@pytest.fixture
def mock_elasticache_client() -> Callable[..., MagicMock]:
    """Factory for a mock elasticache client.

    Returns:
        Callable taking a replication group ID -> DescribeReplicationGroups response map
    """

    def _factory(responses: Optional[Dict[str, Dict[str, Any]]] = None) -> MagicMock:
        client = MagicMock()
        responses = responses or {}

        def describe(ReplicationGroupId: str, **kwargs: Any) -> Dict[str, Any]:
            return responses.get(ReplicationGroupId, {"ReplicationGroups": []})

        client.describe_replication_groups.side_effect = describe
        return client

    return _factory


@pytest.fixture
def sample_cluster_response() -> Dict[str, Any]:
    """Two shards, each with a primary and a replica."""
    return make_replication_group(
        "my-redis",
        [
            {
                "NodeGroupId": "0001",
                "NodeGroupMembers": [
                    make_member("my-redis-0001-001.cache.amazonaws.com", role="primary",
                                cache_cluster_id="my-redis-0001-001"),
                    make_member("my-redis-0001-002.cache.amazonaws.com", role="replica",
                                cache_cluster_id="my-redis-0001-002"),
                ],
            },
            {
                "NodeGroupId": "0002",
                "NodeGroupMembers": [
                    make_member("my-redis-0002-001.cache.amazonaws.com", role="primary",
                                cache_cluster_id="my-redis-0002-001"),
                    make_member("my-redis-0002-002.cache.amazonaws.com", role="replica",
                                cache_cluster_id="my-redis-0002-002"),
                ],
            },
        ],
    )


# ============================================================================
# Environment and File Fixtures
# ============================================================================

ENV_PREFIXES = ("DDCONFGEN_", "GENERATE_CONFIG_")
ENV_NAMES = ("INSTANCE_TEMPLATE", "OTHER_CONFIGS")


@pytest.fixture
def clean_environment(monkeypatch):
    """Fixture that removes ddconfgen environment variables.

    Removes DDCONFGEN_*, GENERATE_CONFIG_* and the check override
    variables for the duration of the test, and clears the settings cache.
    """
    for key in list(os.environ):
        if key.startswith(ENV_PREFIXES) or key in ENV_NAMES:
            monkeypatch.delenv(key, raising=False)

    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write a text file below tmp_path and return its path."""

    def _write(name: str, content: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write
