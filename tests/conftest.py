import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))


EC2_NS = "http://ec2.amazonaws.com/doc/2009-11-30/"

DESCRIBE_REGIONS_XML = f"""<?xml version="1.0" encoding="UTF-8"?>
<DescribeRegionsResponse xmlns="{EC2_NS}">
  <requestId>59dbff89-35bd-4eac-99ed-be587EXAMPLE</requestId>
  <regionInfo>
    <item>
      <regionName>us-east-1</regionName>
      <regionEndpoint>ec2.us-east-1.amazonaws.com</regionEndpoint>
    </item>
    <item>
      <regionName>eu-west-1</regionName>
      <regionEndpoint>ec2.eu-west-1.amazonaws.com</regionEndpoint>
    </item>
  </regionInfo>
</DescribeRegionsResponse>
""".encode()


def zones_xml(region, *zones):
    items = "".join(
        f"<item><zoneName>{zone}</zoneName><zoneState>available</zoneState>"
        f"<regionName>{region}</regionName></item>"
        for zone in zones
    )
    return (
        f'<DescribeAvailabilityZonesResponse xmlns="{EC2_NS}">'
        f"<availabilityZoneInfo>{items}</availabilityZoneInfo>"
        f"</DescribeAvailabilityZonesResponse>"
    ).encode()


def instances_xml(*instances):
    """Build a DescribeInstances body from (instance_id, state) pairs."""
    items = "".join(
        f"<item><instanceId>{instance_id}</instanceId>"
        f"<instanceState><code>0</code><name>{state}</name></instanceState>"
        f"<placement><availabilityZone>us-east-1a</availabilityZone></placement>"
        f"</item>"
        for instance_id, state in instances
    )
    return (
        f'<DescribeInstancesResponse xmlns="{EC2_NS}">'
        f"<reservationSet><item><reservationId>r-1</reservationId>"
        f"<instancesSet>{items}</instancesSet></item></reservationSet>"
        f"</DescribeInstancesResponse>"
    ).encode()


def error_xml(code, message="", endpoint=None):
    extra = f"<Endpoint>{endpoint}</Endpoint>" if endpoint else ""
    return (
        f"<Response><Errors><Error><Code>{code}</Code><Message>{message}</Message>"
        f"{extra}</Error></Errors><RequestID>req-1</RequestID></Response>"
    ).encode()


def pytest_configure(config):
    # Add custom markers for test organization
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )


@pytest.fixture(autouse=True)
def mock_env_vars(monkeypatch):
    """Set the environment the Settings class reads during tests.

    Retry budgets are kept small so exhaustion tests stay short.
    """
    monkeypatch.setenv("EC2_ENDPOINT", "https://ec2.us-east-1.amazonaws.com")
    monkeypatch.setenv(
        "ELB_ENDPOINT", "https://elasticloadbalancing.us-east-1.amazonaws.com"
    )
    monkeypatch.setenv("AWS_EXPIRE_INTERVAL", "30")
    monkeypatch.setenv("REDIRECT_RETRY_LIMIT", "2")
    monkeypatch.setenv("CLIENT_ERROR_RETRY_LIMIT", "2")
    monkeypatch.setenv("CLIENT_ERROR_BACKOFF_SECONDS", "0.5")

    # Logging
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    yield


@pytest.fixture
def test_settings():
    """Fresh settings read from the patched environment."""
    from ec2_runtime.config.settings import Settings

    return Settings(_env_file=None)


@pytest.fixture
def sleeps():
    """Records requested sleeps instead of blocking."""
    recorded = []
    return recorded


@pytest.fixture
def fake_sleep(sleeps):
    return sleeps.append


@pytest.fixture
def regions_body():
    return DESCRIBE_REGIONS_XML


@pytest.fixture
def make_zones_body():
    return zones_xml


@pytest.fixture
def make_instances_body():
    return instances_xml


@pytest.fixture
def make_error_body():
    return error_xml
