"""Region list and availability zone map, each fetched once per context.

The region list is the authoritative answer to "which regions exist and
where are their endpoints". Several independent consumers build on it,
so it is computed behind a ``OnceCell``: the first caller fetches, every
later caller gets the cached mapping, and a failed fetch is remembered
and replayed instead of retried.

The zone map is derived from the region list by asking every region for
its zones. It is built eagerly and completely on first use.
"""

import logging
from types import MappingProxyType
from typing import Dict, List, Mapping, Protocol

from ..exceptions import ConfigurationError, EC2RuntimeError, RegionLookupError
from ..models import AvailabilityZoneInfo
from ..utils.once import OnceCell

logger = logging.getLogger(__name__)


class RegionSource(Protocol):
    """Remote operations the loader depends on."""

    def describe_regions(self) -> Mapping[str, str]: ...

    def describe_availability_zones_in_region(
        self, region: str
    ) -> List[AvailabilityZoneInfo]: ...


class RegionLoader:
    """Failure-memoizing loader for regions and the zone to region map.

    :param client: Source of the region list and per-region zones
    :type client: RegionSource
    """

    def __init__(self, client: RegionSource):
        self.client = client
        self._regions: OnceCell[Mapping[str, str]] = OnceCell(
            self._fetch_regions, name="region list"
        )
        self._zones: OnceCell[Mapping[str, str]] = OnceCell(
            self._build_zone_map, name="availability zone map"
        )

    def regions(self) -> Mapping[str, str]:
        """Region to endpoint mapping, fetched on the first call only.

        :return: Read-only region to endpoint mapping
        :raises EC2RuntimeError: The cached error of the first failed fetch;
            transport failures arrive wrapped in ``RegionLookupError``
        """
        return self._regions.get()

    def zone_to_region(self) -> Mapping[str, str]:
        """Availability zone to owning region mapping.

        :return: Read-only zone to region mapping
        :raises EC2RuntimeError: If the region list or a zone query failed
        :raises ConfigurationError: If two regions report the same zone
        """
        return self._zones.get()

    def _fetch_regions(self) -> Mapping[str, str]:
        try:
            regions = self.client.describe_regions()
        except EC2RuntimeError:
            raise
        except Exception as e:
            raise RegionLookupError(f"describe regions failed: {e}", original_error=e) from e
        logger.info(f"Fetched {len(regions)} regions: {sorted(regions)}")
        return MappingProxyType(dict(regions))

    def _build_zone_map(self) -> Mapping[str, str]:
        zones: Dict[str, str] = {}
        for region in self.regions():
            for info in self.client.describe_availability_zones_in_region(region):
                owner = zones.setdefault(info.zone, region)
                if owner != region:
                    raise ConfigurationError(
                        f"availability zone {info.zone} reported by both {owner} and {region}",
                        setting="ec2_endpoint",
                    )
        logger.info(
            f"Mapped {len(zones)} availability zones across {len(self.regions())} regions"
        )
        return MappingProxyType(zones)
