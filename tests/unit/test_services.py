"""Unit tests for response parsers, the route table and the service clients."""

from urllib.parse import parse_qs

import httpx
import pytest

from ec2_runtime.models import InstanceState
from ec2_runtime.services import (
    ROUTES,
    AvailabilityZoneAndRegionClient,
    InstanceClient,
    invoke,
)
from ec2_runtime.services.parsers import (
    parse_availability_zones,
    parse_instances,
    parse_regions,
)
from ec2_runtime.services.routes import EC2_API_VERSION, indexed


@pytest.mark.unit
class TestParsers:
    """Test the namespace-agnostic XML parsers."""

    def test_parse_regions_builds_uris(self, regions_body):
        assert parse_regions(regions_body) == {
            "us-east-1": "https://ec2.us-east-1.amazonaws.com",
            "eu-west-1": "https://ec2.eu-west-1.amazonaws.com",
        }

    def test_parse_regions_keeps_scheme(self):
        body = (
            b"<DescribeRegionsResponse><regionInfo><item>"
            b"<regionName>local</regionName>"
            b"<regionEndpoint>http://localhost:8773/</regionEndpoint>"
            b"</item></regionInfo></DescribeRegionsResponse>"
        )
        assert parse_regions(body) == {"local": "http://localhost:8773"}

    def test_parse_availability_zones(self, make_zones_body):
        zones = parse_availability_zones(
            make_zones_body("eu-west-1", "eu-west-1a", "eu-west-1b"), "eu-west-1"
        )
        assert [(z.zone, z.region, z.state) for z in zones] == [
            ("eu-west-1a", "eu-west-1", "available"),
            ("eu-west-1b", "eu-west-1", "available"),
        ]

    def test_zone_without_region_attributed_to_queried_region(self):
        body = (
            b"<R><availabilityZoneInfo><item><zoneName>us-west-1a</zoneName></item>"
            b"</availabilityZoneInfo></R>"
        )
        (zone,) = parse_availability_zones(body, "us-west-1")
        assert zone.region == "us-west-1"

    def test_parse_instances(self, make_instances_body):
        instances = parse_instances(
            make_instances_body(("i-1", "pending"), ("i-2", "terminated")), "us-east-1"
        )

        assert [(i.instance_id, i.state) for i in instances] == [
            ("i-1", InstanceState.PENDING),
            ("i-2", InstanceState.TERMINATED),
        ]
        assert instances[0].region == "us-east-1"
        assert instances[0].availability_zone == "us-east-1a"

    def test_parse_empty_instances(self):
        assert parse_instances(b"<DescribeInstancesResponse/>", "us-east-1") == []


@pytest.mark.unit
class TestRoutes:
    """Test the route table and dispatch."""

    def test_known_routes(self):
        assert {name: route.action for name, route in ROUTES.items()} == {
            "describe_regions": "DescribeRegions",
            "describe_availability_zones": "DescribeAvailabilityZones",
            "describe_instances": "DescribeInstances",
        }
        assert all(route.verb == "POST" for route in ROUTES.values())

    def test_form_puts_action_and_version_first(self):
        form = ROUTES["describe_instances"].form({"InstanceId.1": "i-1"})
        assert form == {
            "Action": "DescribeInstances",
            "Version": EC2_API_VERSION,
            "InstanceId.1": "i-1",
        }

    def test_indexed(self):
        assert indexed("ZoneName", ["a", "b"]) == {"ZoneName.1": "a", "ZoneName.2": "b"}
        assert indexed("ZoneName", []) == {}

    def test_invoke_unknown_route(self):
        with httpx.Client() as client, pytest.raises(KeyError):
            invoke(client, "https://ec2.us-east-1.amazonaws.com", "run_instances")

    def test_invoke_posts_form_and_parses(self, regions_body):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=regions_body)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            result = invoke(
                client,
                "https://ec2.us-east-1.amazonaws.com/",
                "describe_regions",
                {"RegionName.1": "us-east-1"},
            )

        assert "us-east-1" in result
        assert seen[0].method == "POST"
        assert str(seen[0].url) == "https://ec2.us-east-1.amazonaws.com/"
        form = parse_qs(seen[0].content.decode())
        assert form == {
            "Action": ["DescribeRegions"],
            "Version": [EC2_API_VERSION],
            "RegionName.1": ["us-east-1"],
        }


def routing_transport(bodies, seen):
    """Answer by host name, recording the action of every request."""

    def handler(request):
        action = parse_qs(request.content.decode())["Action"][0]
        seen.append((request.url.host, action))
        return httpx.Response(200, content=bodies[request.url.host])

    return httpx.MockTransport(handler)


@pytest.mark.unit
class TestServiceClients:
    """Test region-aware dispatch of the service clients."""

    def test_zone_client_uses_regional_endpoint(self, regions_body, make_zones_body):
        seen = []
        bodies = {
            "ec2.us-east-1.amazonaws.com": regions_body,
            "ec2.eu-west-1.amazonaws.com": make_zones_body("eu-west-1", "eu-west-1a"),
        }
        endpoints = {"eu-west-1": "https://ec2.eu-west-1.amazonaws.com"}

        with httpx.Client(transport=routing_transport(bodies, seen)) as http_client:
            client = AvailabilityZoneAndRegionClient(
                http_client, "https://ec2.us-east-1.amazonaws.com", endpoints.__getitem__
            )
            regions = client.describe_regions()
            zones = client.describe_availability_zones_in_region("eu-west-1")

        assert set(regions) == {"us-east-1", "eu-west-1"}
        assert [z.zone for z in zones] == ["eu-west-1a"]
        assert seen == [
            ("ec2.us-east-1.amazonaws.com", "DescribeRegions"),
            ("ec2.eu-west-1.amazonaws.com", "DescribeAvailabilityZones"),
        ]

    def test_instance_client(self, make_instances_body):
        seen = []
        bodies = {"ec2.eu-west-1.amazonaws.com": make_instances_body(("i-9", "running"))}

        with httpx.Client(transport=routing_transport(bodies, seen)) as http_client:
            client = InstanceClient(
                http_client, lambda region: f"https://ec2.{region}.amazonaws.com"
            )
            (instance,) = client.describe_instances_in_region("eu-west-1", "i-9")

        assert instance.instance_id == "i-9"
        assert instance.state is InstanceState.RUNNING
        assert instance.region == "eu-west-1"
        assert seen == [("ec2.eu-west-1.amazonaws.com", "DescribeInstances")]
