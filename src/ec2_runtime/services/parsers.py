"""Response parsers for the EC2 query actions the runtime consumes.

EC2 answers with namespaced XML whose namespace changes with the API
version, so lookups here match on local element names only.
"""

import xml.etree.ElementTree as ET
from typing import Dict, Iterator, List, Optional

from ..models import AvailabilityZoneInfo, InstanceState, RunningInstance


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if _local(child.tag) == name:
            yield child


def _child(element: ET.Element, name: str) -> Optional[ET.Element]:
    return next(_children(element, name), None)


def _text(element: ET.Element, *path: str) -> Optional[str]:
    node: Optional[ET.Element] = element
    for name in path:
        if node is None:
            return None
        node = _child(node, name)
    if node is None or node.text is None:
        return None
    return node.text.strip() or None


def _items(element: ET.Element, set_name: str) -> Iterator[ET.Element]:
    container = _child(element, set_name)
    if container is None:
        return iter(())
    return _children(container, "item")


def _as_uri(endpoint: str) -> str:
    if "://" in endpoint:
        return endpoint.rstrip("/")
    return f"https://{endpoint.rstrip('/')}"


def parse_regions(content: bytes, region: Optional[str] = None) -> Dict[str, str]:
    """Parse a DescribeRegions response into a region to endpoint mapping.

    Bare host names are turned into ``https://`` URIs.
    """
    root = ET.fromstring(content)
    regions: Dict[str, str] = {}
    for item in _items(root, "regionInfo"):
        name = _text(item, "regionName")
        endpoint = _text(item, "regionEndpoint")
        if name and endpoint:
            regions[name] = _as_uri(endpoint)
    return regions


def parse_availability_zones(
    content: bytes, region: Optional[str] = None
) -> List[AvailabilityZoneInfo]:
    """Parse a DescribeAvailabilityZones response.

    Zones that do not report their region are attributed to ``region``,
    the region whose endpoint was queried.
    """
    root = ET.fromstring(content)
    zones: List[AvailabilityZoneInfo] = []
    for item in _items(root, "availabilityZoneInfo"):
        name = _text(item, "zoneName")
        if not name:
            continue
        zones.append(
            AvailabilityZoneInfo(
                zone=name,
                region=_text(item, "regionName") or region or "",
                state=_text(item, "zoneState") or "available",
            )
        )
    return zones


def parse_instances(content: bytes, region: Optional[str] = None) -> List[RunningInstance]:
    """Parse a DescribeInstances response, flattening reservations."""
    root = ET.fromstring(content)
    instances: List[RunningInstance] = []
    for reservation in _items(root, "reservationSet"):
        for item in _items(reservation, "instancesSet"):
            instance_id = _text(item, "instanceId")
            state = _text(item, "instanceState", "name")
            if not instance_id or not state:
                continue
            instances.append(
                RunningInstance(
                    instance_id=instance_id,
                    region=region or "",
                    state=InstanceState(state),
                    availability_zone=_text(item, "placement", "availabilityZone"),
                    image_id=_text(item, "imageId"),
                    instance_type=_text(item, "instanceType"),
                    ip_address=_text(item, "ipAddress"),
                    private_ip_address=_text(item, "privateIpAddress"),
                )
            )
    return instances
