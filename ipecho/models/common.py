from ipaddress import ip_address
from typing import Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from ipecho.models.request_models import AddressFamily

ResolutionSource = Literal["probe", "peer"]


class ServiceTarget(BaseModel):
    """Echo endpoint used to probe one address family.

    `next_hop` is an optional literal IP the outbound connection is pinned to
    instead of resolving the URL's hostname. The original hostname is still sent
    as the Host header and TLS server name.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    next_hop: str | None = None

    @field_validator("next_hop", mode="before")
    @classmethod
    def _validate_next_hop(cls, value: str | None) -> str | None:
        """Blank means "no pinning"; anything else must be an IP literal."""
        if value is None:
            return None

        value_str = str(value).strip().strip("[]")
        if not value_str:
            return None

        try:
            ip_address(value_str)
        except ValueError as exc:
            raise ValueError("next_hop must be a literal IPv4 or IPv6 address") from exc

        return value_str


class ResolutionOutcome(BaseModel):
    """Result of resolving the caller's address for one requested family.

    Produced fresh for every request. When `succeeded` is False the address is
    None and `failure_reason` carries the message shown to the caller instead.
    """

    model_config = ConfigDict(frozen=True)

    family: AddressFamily
    succeeded: bool
    address: str | None = None
    failure_reason: str | None = None
    source: ResolutionSource = "probe"

    @model_validator(mode="after")
    def _check_consistency(self) -> "ResolutionOutcome":
        if self.succeeded and not self.address:
            raise ValueError("a successful outcome needs an address")
        if not self.succeeded and not self.failure_reason:
            raise ValueError("a failed outcome needs a failure reason")
        return self

    @classmethod
    def success(cls, family: AddressFamily, address: str, source: ResolutionSource) -> "ResolutionOutcome":
        return cls(family=family, succeeded=True, address=address, source=source)

    @classmethod
    def failure(cls, family: AddressFamily, reason: str, source: ResolutionSource) -> "ResolutionOutcome":
        return cls(family=family, succeeded=False, failure_reason=reason, source=source)

    @property
    def ip_field(self) -> str:
        """Value placed in the payload's `ip` field: the address, or the failure explanation."""
        if self.succeeded and self.address:
            return self.address
        return self.failure_reason or ""


class GeoRecord(BaseModel):
    """Coarse location of the caller as reported by the edge platform.

    Field order here is the serialization order of the JSON payload.
    """

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    country: str | None = None
    continent: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    timezone: str | None = None
    region: str | None = None
    colo: str | None = None
