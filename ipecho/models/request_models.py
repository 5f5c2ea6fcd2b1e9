from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class AddressFamily(str, Enum):
    """Address family requested by the caller, derived from the hostname prefix."""

    ipv4 = "ipv4"
    ipv6 = "ipv6"
    unspecified = "unspecified"

    @property
    def label(self) -> str:
        """Human-readable name used in messages, e.g. "IPv6"."""
        return {"ipv4": "IPv4", "ipv6": "IPv6"}.get(self.value, "IP")

    @property
    def version(self) -> int | None:
        """Matching `ipaddress` version number, or None for unspecified."""
        return {"ipv4": 4, "ipv6": 6}.get(self.value)


IPV4_MAPPED_PREFIX = "::ffff:"


def unwrap_mapped_address(address: str) -> str:
    """Strip the IPv4-mapped IPv6 prefix that dual-stack sockets report, e.g. ::ffff:127.0.0.1."""
    if address.lower().startswith(IPV4_MAPPED_PREFIX) and "." in address:
        return address[len(IPV4_MAPPED_PREFIX) :]
    return address


def family_of_address(address: str) -> AddressFamily:
    """Classify a literal address by its textual form: anything with a colon is IPv6."""
    return AddressFamily.ipv6 if ":" in address else AddressFamily.ipv4


class PlatformMetadata(BaseModel):
    """Connection metadata recorded by the hosting platform for the inbound request.

    Every field is optional: the edge only injects geolocation when it computed it,
    and the peer address may be missing when the service is reached directly.
    """

    model_config = ConfigDict(frozen=True)

    peer_address: str | None = None
    city: str | None = None
    country: str | None = None
    continent: str | None = None
    region: str | None = None
    latitude: str | None = None
    longitude: str | None = None
    timezone: str | None = None
    colo: str | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def peer_family(self) -> AddressFamily:
        if not self.peer_address:
            return AddressFamily.unspecified
        return family_of_address(self.peer_address)


class RequestContext(BaseModel):
    """Immutable view of a single inbound request, discarded once the response is sent."""

    model_config = ConfigDict(frozen=True)

    hostname: str = ""
    path: str = "/"
    method: str = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    metadata: PlatformMetadata = Field(default_factory=PlatformMetadata)
