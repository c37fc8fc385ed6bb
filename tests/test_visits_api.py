import pytest

from schemas.visit import GeoLocation
from services import geo_service

LOCATIONS = {
    "203.0.113.1": GeoLocation(country="India", region="Maharashtra", city="Mumbai", isp="Example Telecom"),
    "203.0.113.2": GeoLocation(country="India", region="Maharashtra", city="Pune", isp="Example Telecom"),
    "203.0.113.3": GeoLocation(country="Germany", region="Berlin", city="Berlin", isp="Example GmbH"),
}


@pytest.fixture(autouse=True)
def fake_geo(monkeypatch):
    calls = []

    def resolve(address, client=None):
        calls.append(address)
        return LOCATIONS.get(address, GeoLocation.unknown())

    monkeypatch.setattr(geo_service, "resolve", resolve)
    return calls


def track(client, ip, header_origin="https://guddu.example.com", **body):
    return client.post(
        "/api/visits/track",
        json=body or None,
        headers={"X-Forwarded-For": ip, "Origin": header_origin, "User-Agent": "pytest-agent"},
    )


def test_track_visit_creates_and_increments(client, fake_geo):
    first = track(client, "203.0.113.1")
    second = track(client, "::ffff:203.0.113.1")

    assert first.status_code == 200
    assert first.json()["visit_count"] == 1
    assert second.json() == {
        "address": "203.0.113.1",
        "visit_count": 2,
        "origin": "https://guddu.example.com",
        "geo": {"country": "India", "city": "Mumbai", "region": "Maharashtra", "isp": "Example Telecom"},
    }
    assert fake_geo == ["203.0.113.1"]


def test_track_visit_prefers_body_values(client):
    response = track(
        client,
        "10.0.0.1",
        real_client_ip="203.0.113.3, 10.0.0.1",
        origin="https://body.example.com",
        user_agent="body-agent",
    )

    data = response.json()
    assert data["address"] == "203.0.113.3"
    assert data["origin"] == "https://body.example.com"
    assert data["geo"]["country"] == "Germany"


def test_track_visit_geo_failure_reports_unknown(client):
    response = track(client, "198.51.100.99")

    assert response.status_code == 200
    assert response.json()["geo"] == {"country": "Unknown", "city": "Unknown", "region": "Unknown", "isp": "Unknown"}


def test_visit_report_requires_admin(client, user_headers):
    assert client.get("/api/visits/report").status_code == 401
    assert client.get("/api/visits/report", headers=user_headers).status_code == 403


def test_visit_report_rolls_up_known_visitors(client, admin_headers):
    track(client, "203.0.113.1", header_origin="https://o1.example.com")
    track(client, "203.0.113.1", header_origin="https://o1.example.com")
    track(client, "203.0.113.2", header_origin="https://o1.example.com")
    track(client, "203.0.113.3", header_origin="https://o2.example.com")
    track(client, "198.51.100.99", header_origin="https://o3.example.com")

    response = client.get("/api/visits/report", headers=admin_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["origins"] == ["https://o1.example.com", "https://o2.example.com"]
    assert len(data["visits"]) == 3
    assert data["countries"] == [
        {
            "country": "India",
            "count": 2,
            "regions": [{
                "region": "Maharashtra",
                "count": 2,
                "cities": [{"city": "Mumbai", "count": 1}, {"city": "Pune", "count": 1}],
            }],
        },
        {
            "country": "Germany",
            "count": 1,
            "regions": [{"region": "Berlin", "count": 1, "cities": [{"city": "Berlin", "count": 1}]}],
        },
    ]
