"""
Best-effort geolocation for visitor addresses.

One lookup attempt per call against an ip-api.com style endpoint. Any failure
is turned into the "Unknown" location, so callers never see an exception.
"""
import os
from typing import Optional

import httpx

from schemas.visit import GeoLocation
from models.visit import UNKNOWN
from utils.client_address import normalize_address
from utils.logger_factory import new_logger

log = new_logger("geo_service")

GEO_LOOKUP_URL = os.getenv("GEO_LOOKUP_URL", "http://ip-api.com/json/{ip}")
GEO_LOOKUP_TIMEOUT = float(os.getenv("GEO_LOOKUP_TIMEOUT", "5.0"))

# Provider field -> GeoLocation field
FIELD_MAP = {
    "country": "country",
    "city": "city",
    "regionName": "region",
    "isp": "isp",
}


def _field(data: dict, name: str) -> str:
    value = data.get(name)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return UNKNOWN


def parse_lookup_payload(data) -> Optional[GeoLocation]:
    """Map a provider payload to a GeoLocation, or None when the payload is unusable."""
    if not isinstance(data, dict):
        return None
    if data.get("status") != "success":
        return None
    return GeoLocation(**{ours: _field(data, theirs) for theirs, ours in FIELD_MAP.items()})


def resolve(raw_address: str, client: Optional[httpx.Client] = None) -> GeoLocation:
    """
    Resolve an address to country, city, region and isp.

    Makes a single request bounded by GEO_LOOKUP_TIMEOUT. Network errors,
    non-200 responses and malformed payloads all yield GeoLocation.unknown().
    """
    address = normalize_address(raw_address)
    if not address:
        log.warning("No address to resolve")
        return GeoLocation.unknown()

    owns_client = client is None
    if owns_client:
        client = httpx.Client(timeout=GEO_LOOKUP_TIMEOUT)

    try:
        response = client.get(GEO_LOOKUP_URL.format(ip=address))
        if response.status_code != 200:
            log.warning(f"IP geolocation API returned {response.status_code} for {address}")
            return GeoLocation.unknown()

        location = parse_lookup_payload(response.json())
        if location is None:
            log.warning(f"IP geolocation API returned an unusable payload for {address}")
            return GeoLocation.unknown()

        log.info(f"Resolved {address} to {location.city}, {location.region}, {location.country}")
        return location

    except Exception as e:
        log.warning(f"Failed to get visitor location for {address}: {str(e)}")
        return GeoLocation.unknown()
    finally:
        if owns_client:
            client.close()
