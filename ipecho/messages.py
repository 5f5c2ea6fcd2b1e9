"""Caller-facing text in each supported language.

Resolution failures are reported inside the `ip` field with HTTP 200, so these
strings are the only signal a caller gets about protocol support.
"""

from types import MappingProxyType

from pydantic import BaseModel, ConfigDict

from ipecho.config import Language
from ipecho.models.request_models import AddressFamily


class MessageCatalog(BaseModel):
    model_config = ConfigDict(frozen=True)

    probe_failed_ipv4: str
    probe_failed_ipv6: str
    peer_unavailable: str
    family_mismatch: str
    unknown_country: str
    help_title: str
    help_usage: str
    help_ipv4: str
    help_ipv6: str
    help_geo: str

    def probe_failed(self, family: AddressFamily) -> str:
        if family is AddressFamily.ipv6:
            return self.probe_failed_ipv6
        return self.probe_failed_ipv4

    def mismatch(self, requested: AddressFamily, connected: AddressFamily, address: str) -> str:
        return self.family_mismatch.format(requested=requested.label, connected=connected.label, address=address)


MESSAGES: MappingProxyType[Language, MessageCatalog] = MappingProxyType(
    {
        Language.en: MessageCatalog(
            probe_failed_ipv4="Could not determine your IPv4 address. Please try again later.",
            probe_failed_ipv6="Could not determine your IPv6 address. Your network may not support IPv6.",
            peer_unavailable="Could not determine the address of your connection.",
            family_mismatch="You are connected over {connected} ({address}); {requested} is not available on this path.",
            unknown_country="Unknown",
            help_title="Welcome to the IP address and geolocation API!",
            help_usage="Usage:",
            help_ipv4="Your public IPv4 address:",
            help_ipv6="Your public IPv6 address:",
            help_geo="Address with geolocation (JSON):",
        ),
        Language.zh: MessageCatalog(
            probe_failed_ipv4="无法查询到您的 IPv4 地址，请稍后重试。",
            probe_failed_ipv6="无法查询到您的 IPv6 地址。您的网络当前可能不支持 IPv6 协议。",
            peer_unavailable="无法确定您当前连接的地址。",
            family_mismatch="您当前通过 {connected} ({address}) 连接，此路径上无法使用 {requested}。",
            unknown_country="未知",
            help_title="欢迎使用 IP 及地理位置查询 API!",
            help_usage="使用方法:",
            help_ipv4="查询您的公网 IPv4 地址:",
            help_ipv6="查询您的公网 IPv6 地址:",
            help_geo="查询地址及地理位置 (JSON):",
        ),
    }
)


def get_messages(language: Language) -> MessageCatalog:
    return MESSAGES[language]


def help_text(domain: str, language: Language, geo_path_enabled: bool) -> str:
    """Usage document listing the ipv4./ipv6. URLs for `domain`."""
    catalog = get_messages(language)
    lines = [
        catalog.help_title,
        "",
        catalog.help_usage,
        f"- {catalog.help_ipv4}",
        f"  https://ipv4.{domain}",
        "",
        f"- {catalog.help_ipv6}",
        f"  https://ipv6.{domain}",
    ]
    if geo_path_enabled:
        lines += [
            "",
            f"- {catalog.help_geo}",
            f"  https://ipv4.{domain}/geo",
            f"  https://ipv6.{domain}/geo",
        ]
    return "\n".join(lines) + "\n"
