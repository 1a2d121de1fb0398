"""ElastiCache Redis provider.

Discovery runs in four steps:

1. Find replication groups whose AWS tags match ``filters.tags`` through
   the Resource Groups Tagging API.
2. Derive each replication group ID from its ARN.
3. Describe every replication group, one at a time, and flatten its node
   groups (shards) and members into one Resource per member endpoint.
4. Map the replication group's tags onto each resource.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ddconfgen.collectors.session import create_client, create_session
from ddconfgen.constants import (
    ELASTICACHE_REDIS_PROVIDER,
    ELASTICACHE_REPLICATION_GROUP_RESOURCE_TYPE,
    PRIMARY_ROLE,
)
from ddconfgen.errors import DiscoveryError

from .base import Provider, ProviderConfig, Resource, ResourceTagMapping, map_tags

logger = logging.getLogger(__name__)

SessionFactory = Callable[..., Any]


def extract_tag_filters(filters: Optional[Mapping[str, Any]]) -> Dict[str, str]:
    """Pull the ``tags`` filter out of a provider filter mapping.

    Values that are not strings are skipped.
    """
    tags: Dict[str, str] = {}
    if not filters:
        return tags

    tag_filters = filters.get("tags")
    if not isinstance(tag_filters, Mapping):
        return tags

    for key, value in tag_filters.items():
        if isinstance(value, str):
            tags[key] = value
        else:
            logger.warning(f"Ignoring non-string tag filter value for {key}: {value!r}")
    return tags


def build_tag_filters(tags: Mapping[str, str]) -> List[Dict[str, Any]]:
    """Convert a tag mapping to the TagFilters structure of GetResources."""
    return [{"Key": key, "Values": [value]} for key, value in tags.items()]


def extract_resource_id(arn: str) -> str:
    """Return the resource ID of an ARN (the text after the last colon)."""
    return arn.split(":")[-1]


def extract_resource_ids(arns: List[str]) -> List[str]:
    """Return the resource IDs of a list of ARNs, in the same order."""
    return [extract_resource_id(arn) for arn in arns]


def _tag_list_to_dict(tag_list: List[Dict[str, Any]]) -> Dict[str, str]:
    tags: Dict[str, str] = {}
    for tag in tag_list:
        key = tag.get("Key")
        value = tag.get("Value")
        if key is not None and value is not None:
            tags[key] = value
    return tags


def search_resources_by_tags(
    tagging_client: Any,
    tags: Mapping[str, str],
    resource_type: str = ELASTICACHE_REPLICATION_GROUP_RESOURCE_TYPE,
) -> List[ResourceTagMapping]:
    """Find resources of one type whose tags match every tag filter.

    Args:
        tagging_client: boto3 ``resourcegroupstaggingapi`` client
        tags: Required tag key -> value
        resource_type: Tagging API resource type filter

    Returns:
        Matching resources with their tags, in API order

    Raises:
        DiscoveryError: If the GetResources call fails
    """
    tag_filters = build_tag_filters(tags)
    logger.debug(
        f"Calling GetResources API (resource_type={resource_type}, "
        f"tag_filters_count={len(tag_filters)})"
    )

    mappings: List[ResourceTagMapping] = []
    try:
        paginator = tagging_client.get_paginator("get_resources")
        for page in paginator.paginate(
            ResourceTypeFilters=[resource_type],
            TagFilters=tag_filters,
        ):
            for item in page.get("ResourceTagMappingList", []):
                arn = item.get("ResourceARN")
                if not arn:
                    continue
                mappings.append(
                    ResourceTagMapping(
                        resource_arn=arn,
                        tags=_tag_list_to_dict(item.get("Tags", [])),
                    )
                )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"GetResources API call failed: {e}")
        raise DiscoveryError(f"failed to get resources by tags: {e}") from e

    logger.debug(f"Found resource ARNs: {[m.resource_arn for m in mappings]}")
    return mappings


def describe_replication_group(elasticache_client: Any, replication_group_id: str) -> List[Dict[str, Any]]:
    """Describe a single replication group.

    Raises:
        DiscoveryError: If the DescribeReplicationGroups call fails
    """
    logger.debug(f"Describing replication group {replication_group_id}")
    try:
        resp = elasticache_client.describe_replication_groups(
            ReplicationGroupId=replication_group_id,
        )
    except (ClientError, BotoCoreError) as e:
        logger.error(f"DescribeReplicationGroups failed for {replication_group_id}: {e}")
        raise DiscoveryError(
            f"failed to describe replication group {replication_group_id}: {e}",
            resource_id=replication_group_id,
        ) from e
    return resp.get("ReplicationGroups", [])


def extract_nodes(
    replication_groups: List[Dict[str, Any]],
    cluster_name: str,
    tags: Mapping[str, str],
) -> List[Resource]:
    """Flatten replication groups into one Resource per member endpoint.

    Members without a read endpoint are skipped.
    """
    result: List[Resource] = []

    for rg in replication_groups:
        node_groups = rg.get("NodeGroups", [])
        logger.debug(
            f"Processing replication group {rg.get('ReplicationGroupId', cluster_name)} "
            f"(node_groups={len(node_groups)})"
        )

        for ng in node_groups:
            shard_name = ng.get("NodeGroupId", "")
            members = ng.get("NodeGroupMembers", [])
            logger.debug(f"Processing node group {shard_name} (members={len(members)})")

            for member in members:
                endpoint = member.get("ReadEndpoint")
                if not endpoint or not endpoint.get("Address"):
                    logger.warning(
                        f"Node member has no read endpoint "
                        f"(node_group_id={shard_name}, "
                        f"cache_cluster_id={member.get('CacheClusterId', '')})"
                    )
                    continue

                is_primary = member.get("CurrentRole") == PRIMARY_ROLE
                resource = Resource(
                    host=endpoint["Address"],
                    port=int(endpoint.get("Port", 0)),
                    tags=dict(tags),
                    metadata={
                        "ClusterName": cluster_name,
                        "ShardName": shard_name,
                        "IsPrimary": is_primary,
                    },
                )
                logger.debug(
                    f"Extracted node {resource.host}:{resource.port} "
                    f"(shard={shard_name}, is_primary={is_primary})"
                )
                result.append(resource)

    return result


class ElastiCacheRedisProvider(Provider):
    """Discovers ElastiCache Redis nodes by replication group tags.

    Clients can be injected for testing; otherwise they are created from
    a boto3 session for the configured region on every discover call.
    """

    def __init__(
        self,
        session_factory: SessionFactory = create_session,
        profile: Optional[str] = None,
        tagging_client: Any = None,
        elasticache_client: Any = None,
    ):
        self._session_factory = session_factory
        self._profile = profile
        self._tagging_client = tagging_client
        self._elasticache_client = elasticache_client

    @property
    def type(self) -> str:
        return ELASTICACHE_REDIS_PROVIDER

    def _clients(self, region: str):
        tagging_client = self._tagging_client
        elasticache_client = self._elasticache_client
        if tagging_client is None or elasticache_client is None:
            session = self._session_factory(region, self._profile)
            if tagging_client is None:
                tagging_client = create_client(session, "resourcegroupstaggingapi")
            if elasticache_client is None:
                elasticache_client = create_client(session, "elasticache")
        return tagging_client, elasticache_client

    def discover(self, config: ProviderConfig) -> List[Resource]:
        logger.debug(f"Starting ElastiCache Redis discovery (region={config.region})")
        self.validate_config(config)

        tagging_client, elasticache_client = self._clients(config.region)

        tags = extract_tag_filters(config.filters)
        logger.debug(f"Extracted tag filters: {tags}")

        tag_mappings = search_resources_by_tags(tagging_client, tags)
        if not tag_mappings:
            logger.info(f"No replication groups found matching tag filters {tags}")
            return []
        logger.info(f"Found {len(tag_mappings)} replication group(s) by tags")

        arns = [m.resource_arn for m in tag_mappings]
        arn_to_tags = {m.resource_arn: m.tags for m in tag_mappings}
        replication_group_ids = extract_resource_ids(arns)
        id_to_arn = dict(zip(replication_group_ids, arns))
        logger.debug(f"Extracted replication group IDs: {replication_group_ids}")

        result: List[Resource] = []
        for replication_group_id in replication_group_ids:
            groups = describe_replication_group(elasticache_client, replication_group_id)
            if not groups:
                logger.warning(f"No replication group details found for {replication_group_id}")
                continue

            cluster_tags = arn_to_tags[id_to_arn[replication_group_id]]
            nodes = extract_nodes(groups, replication_group_id, cluster_tags)
            logger.debug(f"Extracted {len(nodes)} node(s) from replication group {replication_group_id}")
            result.extend(self._apply_tag_mapping(node, config) for node in nodes)

        logger.info(f"ElastiCache Redis discovery completed (total_nodes={len(result)})")
        return result

    @staticmethod
    def _apply_tag_mapping(node: Resource, config: ProviderConfig) -> Resource:
        if not config.tag_mapping and not config.static_tags:
            return node
        return dataclasses.replace(
            node,
            tags=map_tags(node.tags, config.tag_mapping or {}, config.static_tags),
        )
