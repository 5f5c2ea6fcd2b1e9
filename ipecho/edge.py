"""Read the edge platform's per-request metadata into a RequestContext.

The service runs behind a Cloudflare-style proxy which records the visitor's
address and coarse location in request headers. Header values are trusted as
given and only checked for presence.
"""

from collections.abc import Mapping

from fastapi import Request

from ipecho.models.request_models import PlatformMetadata, RequestContext, unwrap_mapped_address

PEER_ADDRESS_HEADER = "cf-connecting-ip"
FORWARDED_FOR_HEADER = "x-forwarded-for"
RAY_HEADER = "cf-ray"

GEO_HEADERS: Mapping[str, str] = {
    "city": "cf-ipcity",
    "country": "cf-ipcountry",
    "continent": "cf-ipcontinent",
    "region": "cf-region",
    "latitude": "cf-iplatitude",
    "longitude": "cf-iplongitude",
    "timezone": "cf-timezone",
}

# Cloudflare reports these instead of a country when it has no answer.
PSEUDO_COUNTRY_CODES = frozenset({"XX", "T1"})


def _header(headers: Mapping[str, str], name: str) -> str | None:
    value = headers.get(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _peer_address(headers: Mapping[str, str], client_host: str | None, trust_forwarded_for: bool) -> str | None:
    address = _header(headers, PEER_ADDRESS_HEADER)
    if address is None and trust_forwarded_for:
        forwarded = _header(headers, FORWARDED_FOR_HEADER)
        if forwarded:
            address = forwarded.split(",")[0].strip() or None
    if address is None:
        address = client_host or None
    if address is None:
        return None
    return unwrap_mapped_address(address)


def _colo(headers: Mapping[str, str]) -> str | None:
    """Data center code is the suffix of the ray id, e.g. `8a1f2b3c4d5e6f70-FRA`."""
    ray = _header(headers, RAY_HEADER)
    if not ray or "-" not in ray:
        return None
    return ray.rsplit("-", 1)[1] or None


def metadata_from_headers(
    headers: Mapping[str, str],
    client_host: str | None = None,
    trust_forwarded_for: bool = True,
) -> PlatformMetadata:
    """Build PlatformMetadata from lowercase header names."""
    geo = {field: _header(headers, header) for field, header in GEO_HEADERS.items()}
    country = geo.get("country")
    if country and country.upper() in PSEUDO_COUNTRY_CODES:
        geo["country"] = None

    return PlatformMetadata(
        peer_address=_peer_address(headers, client_host, trust_forwarded_for),
        colo=_colo(headers),
        **geo,
    )


def build_request_context(request: Request, trust_forwarded_for: bool = True) -> RequestContext:
    """Capture everything the resolver and composer need from the inbound request."""
    headers = {key.lower(): value for key, value in request.headers.items()}
    client_host = request.client.host if request.client else None
    return RequestContext(
        hostname=(request.url.hostname or "").lower(),
        path=request.url.path or "/",
        method=request.method,
        headers=headers,
        metadata=metadata_from_headers(headers, client_host, trust_forwarded_for),
    )
