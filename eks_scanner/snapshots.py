# eks_scanner/snapshots.py
"""
Build ResourceSnapshots from AWS Config configuration items.

Accepted input shapes (dummy mode):
- a change notification: {"messageType": "ConfigurationItemChangeNotification", "configurationItem": {...}}
- a Config API style document: {"configurationItems": [ {...}, ... ]}
- a batch of notifications: {"notifications": [ {...}, ... ]}
- a bare list of configuration items or notifications
"""

import json
from typing import Any, Dict, List, Mapping

from eks_scanner.exceptions import SnapshotError
from eks_scanner.models import LifecycleStatus, ResourceSnapshot


def _decode_object(value: Any, field_name: str, resource_id: str) -> Dict[str, Any]:
    """
    Return value as a dict. The Config API delivers `configuration` as a JSON string.
    """
    if value is None:
        return {}
    if isinstance(value, str):
        if not value.strip():
            return {}
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise SnapshotError(f"{field_name} of '{resource_id}' is not valid JSON: {e.msg}") from e
    if not isinstance(value, Mapping):
        raise SnapshotError(f"{field_name} of '{resource_id}' must be an object, got {type(value).__name__}")
    return dict(value)


def snapshot_from_configuration_item(item: Mapping[str, Any]) -> ResourceSnapshot:
    if not isinstance(item, Mapping):
        raise SnapshotError(f"configuration item must be an object, got {type(item).__name__}")
    resource_id = item.get("resourceId") or item.get("resourceName") or ""
    return ResourceSnapshot(
        resource_type=item.get("resourceType", ""),
        resource_id=resource_id,
        status=LifecycleStatus.parse(item.get("configurationItemStatus")),
        configuration=_decode_object(item.get("configuration"), "configuration", resource_id),
        tags=_decode_object(item.get("tags"), "tags", resource_id),
        resource_name=item.get("resourceName"),
        arn=item.get("ARN") or item.get("arn"),
        region=item.get("awsRegion"),
        capture_time=None if item.get("configurationItemCaptureTime") is None
        else str(item["configurationItemCaptureTime"]),
    )


def _items(data: Any) -> List[Mapping[str, Any]]:
    if isinstance(data, list):
        items: List[Mapping[str, Any]] = []
        for entry in data:
            items.extend(_items(entry))
        return items
    if not isinstance(data, Mapping):
        raise SnapshotError(f"expected a configuration item or notification, got {type(data).__name__}")
    if "configurationItem" in data:
        return [data["configurationItem"]]
    if "configurationItems" in data:
        return _items(data["configurationItems"])
    if "notifications" in data:
        return _items(data["notifications"])
    return [data]


def snapshots_from_json(data: Any) -> List[ResourceSnapshot]:
    """
    Turn a loaded JSON document into snapshots, one per configuration item, in document order.
    """
    return [snapshot_from_configuration_item(item) for item in _items(data)]
