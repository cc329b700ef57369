"""Derived resource names and labels.

Every name embeds the fleet's application name, the parent resource name and
the instance identity, so names are unique across the instances of one fleet
and across fleets sharing a namespace.
"""

import hashlib
import re
from typing import Dict

from ..core.enums import DaemonRole
from ..core.value_objects import FleetRef

STORAGE_APP_NAME = "flotilla-storage"
GATEWAY_APP_NAME = "flotilla-nfs"
PREPARE_APP_NAME = f"{STORAGE_APP_NAME}-prepare"

MAX_RESOURCE_NAME_LENGTH = 63
_HASH_LENGTH = 8

_ROLE_LABEL_KEYS = {
    DaemonRole.STORAGE_NODE: "flotilla_storage",
    DaemonRole.EXPORT_GATEWAY: "flotilla_nfs",
}

_INVALID_VOLUME_CHARS = re.compile(r"[^a-z0-9]+")


def app_name_for(role: DaemonRole) -> str:
    """Application name of the fleet a role belongs to."""
    if role == DaemonRole.EXPORT_GATEWAY:
        return GATEWAY_APP_NAME
    return STORAGE_APP_NAME


def instance_name(app_name: str, parent_name: str, identity: str) -> str:
    """Resource name of one instance: <app>-<parent>-<identity>."""
    return f"{app_name}-{parent_name}-{identity}"


def instance_labels(role: DaemonRole, fleet: FleetRef, identity: str) -> Dict[str, str]:
    """Labels shared by every descriptor of one instance."""
    return {
        "app": app_name_for(role),
        "cluster": fleet.namespace,
        _ROLE_LABEL_KEYS[role]: fleet.name,
        "instance": identity,
    }


def truncate_name(name: str, limit: int = MAX_RESOURCE_NAME_LENGTH) -> str:
    """Shorten a name to the substrate limit, keeping it unique.

    Names that fit are returned unchanged. Longer names keep a prefix and get
    a short hash of the full name appended, so two long names that share a
    prefix still map to different results.
    """
    if len(name) <= limit:
        return name
    digest = hashlib.sha256(name.encode("utf-8")).hexdigest()[:_HASH_LENGTH]
    prefix = name[: limit - _HASH_LENGTH - 1].rstrip("-.")
    return f"{prefix}-{digest}"


def prepare_job_name(node_name: str) -> str:
    """Name of the provisioning job for one node."""
    return truncate_name(f"{PREPARE_APP_NAME}-{node_name}")


def path_to_volume_name(path: str) -> str:
    """Convert a host path into a valid volume name.

    >>> path_to_volume_name("/mnt/data")
    'mnt-data'
    """
    sanitized = _INVALID_VOLUME_CHARS.sub("-", path.lower()).strip("-")
    return truncate_name(sanitized or "root")
