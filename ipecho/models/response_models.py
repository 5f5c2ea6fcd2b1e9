from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response model for the health check endpoint."""

    status: str


class GeoIPResponse(BaseModel):
    """Caller address with the flat set of geolocation fields."""

    ip: str = Field(min_length=1)
    city: str | None = None
    country: str | None = None
    continent: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    timezone: str | None = None
    region: str | None = None
    colo: str | None = Field(default=None, description="Code of the edge data center that served the request.")


class SummaryIPResponse(BaseModel):
    """Caller address with a one-line "<country>, <city>" location summary."""

    ip: str = Field(min_length=1)
    geo: str
