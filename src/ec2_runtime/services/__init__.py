"""Remote operations consumed by the runtime and the loaders built on them."""

from .availability_zones import AvailabilityZoneAndRegionClient
from .instances import InstanceClient
from .regions import RegionLoader
from .routes import ROUTES, Route, invoke

__all__ = [
    "AvailabilityZoneAndRegionClient",
    "InstanceClient",
    "RegionLoader",
    "ROUTES",
    "Route",
    "invoke",
]
