# SPDX-License-Identifier: MIT

"""Classifiers for resources scraped from cloud providers rather than Kubernetes."""

from resource_health.cloud.aws import get_aws_health, get_aws_resource_health
from resource_health.cloud.azure import get_azure_health
from resource_health.cloud.ecs import ecs_task_health
from resource_health.cloud.gcp import get_gcp_health
from resource_health.cloud.mongo import get_mongo_health

__all__ = [
    "ecs_task_health",
    "get_aws_health",
    "get_aws_resource_health",
    "get_azure_health",
    "get_gcp_health",
    "get_mongo_health",
]
