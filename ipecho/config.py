from enum import Enum
from ipaddress import ip_address

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ipecho.models.common import ServiceTarget
from ipecho.models.request_models import AddressFamily


class ResolutionStrategy(str, Enum):
    """How the caller's address is obtained for the requested family."""

    active_probe = "active_probe"
    passive = "passive"


class UnknownHostPolicy(str, Enum):
    """Response for hostnames without an ipv4./ipv6. prefix."""

    help = "help"
    not_found = "not_found"


class ResponseShape(str, Enum):
    geo = "geo"
    summary = "summary"
    text = "text"


class MissingGeoPolicy(str, Enum):
    sentinel = "sentinel"
    omit = "omit"


class CountryNames(str, Enum):
    code = "code"
    localized = "localized"


class Language(str, Enum):
    en = "en"
    zh = "zh"


class Settings(BaseSettings):
    """Deployment configuration, read once from IPECHO_* environment variables or `.env`."""

    model_config = SettingsConfigDict(env_prefix="IPECHO_", env_file=".env", extra="ignore", frozen=True)

    resolution_strategy: ResolutionStrategy = ResolutionStrategy.active_probe
    # Retry with the inbound connection's family when the probe fails.
    probe_fallback_to_passive: bool = False
    # Probe before reporting a family mismatch on the passive strategy.
    passive_mismatch_probe: bool = False

    unknown_host_policy: UnknownHostPolicy = UnknownHostPolicy.help
    default_shape: ResponseShape = ResponseShape.geo
    geo_path_enabled: bool = True
    missing_geo: MissingGeoPolicy = MissingGeoPolicy.sentinel
    country_names: CountryNames = CountryNames.code
    language: Language = Language.en

    probe_timeout_seconds: float = Field(default=5.0, gt=0)
    user_agent: str = "ipecho-address-probe/0.1.0"
    ipv4_echo_url: str = "https://ipv4.icanhazip.com"
    ipv4_next_hop: str | None = None
    ipv6_echo_url: str = "https://ipv6.icanhazip.com"
    ipv6_next_hop: str | None = None

    trust_forwarded_for: bool = True

    @model_validator(mode="after")
    def _validate_service_targets(self) -> "Settings":
        """Reject a pinned next hop that belongs to the other family."""
        for family, target in self.service_targets.items():
            if target.next_hop and ip_address(target.next_hop).version != family.version:
                raise ValueError(f"{family.value} next hop {target.next_hop} is not an {family.label} address")
        return self

    @property
    def service_targets(self) -> dict[AddressFamily, ServiceTarget]:
        return {
            AddressFamily.ipv4: ServiceTarget(url=self.ipv4_echo_url, next_hop=self.ipv4_next_hop),
            AddressFamily.ipv6: ServiceTarget(url=self.ipv6_echo_url, next_hop=self.ipv6_next_hop),
        }

    def service_target(self, family: AddressFamily) -> ServiceTarget:
        return self.service_targets[family]


settings = Settings()


def get_settings() -> Settings:
    """Dependency returning the process-wide settings loaded at startup."""
    return settings
