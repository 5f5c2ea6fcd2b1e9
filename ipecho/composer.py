import json
from types import MappingProxyType
from typing import Any

from fastapi import Response, status
from fastapi.responses import JSONResponse, PlainTextResponse

from ipecho.classifier import display_domain
from ipecho.config import ResponseShape, Settings, UnknownHostPolicy
from ipecho.geo import geo_summary
from ipecho.messages import help_text
from ipecho.models.common import GeoRecord, ResolutionOutcome
from ipecho.models.response_models import GeoIPResponse, SummaryIPResponse

CORS_HEADERS = MappingProxyType(
    {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "GET, HEAD, OPTIONS",
        "Access-Control-Allow-Headers": "*",
    }
)

GEO_PATH = "/geo"


class PrettyJSONResponse(JSONResponse):
    """Indented JSON, keeping non-ASCII text readable."""

    media_type = "application/json; charset=utf-8"

    def render(self, content: Any) -> bytes:
        return json.dumps(content, ensure_ascii=False, indent=2).encode("utf-8")


def preflight_response() -> Response:
    return Response(status_code=status.HTTP_200_OK, headers=dict(CORS_HEADERS))


def select_shape(path: str, settings: Settings) -> ResponseShape:
    """`/geo` asks for the full geolocation JSON; other paths get the deployment default."""
    if settings.geo_path_enabled and (path == GEO_PATH or path.startswith(GEO_PATH + "/")):
        return ResponseShape.geo
    return settings.default_shape


def compose_response(outcome: ResolutionOutcome, geo: GeoRecord, shape: ResponseShape) -> Response:
    """Render the caller's address in the requested shape.

    Resolution failures are still a 200: the explanation takes the place of the address.
    """
    ip = outcome.ip_field

    if shape is ResponseShape.text:
        return PlainTextResponse(ip)

    if shape is ResponseShape.summary:
        payload = SummaryIPResponse(ip=ip, geo=geo_summary(geo))
    else:
        payload = GeoIPResponse(ip=ip, **geo.model_dump())

    # Fields the omit policy left as None are dropped from the body.
    return PrettyJSONResponse(payload.model_dump(exclude_none=True))


def compose_unknown_host_response(hostname: str, settings: Settings) -> Response:
    """Usage text or a bare 404 for hosts that name no address family."""
    if settings.unknown_host_policy is UnknownHostPolicy.not_found:
        return Response(status_code=status.HTTP_404_NOT_FOUND)

    text = help_text(display_domain(hostname), settings.language, settings.geo_path_enabled)
    return PlainTextResponse(text, status_code=status.HTTP_200_OK)
