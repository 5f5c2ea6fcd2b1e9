from ipecho.models.request_models import AddressFamily

HOST_PREFIXES: tuple[tuple[str, AddressFamily], ...] = (
    ("ipv4.", AddressFamily.ipv4),
    ("ipv6.", AddressFamily.ipv6),
)


def classify_host(hostname: str | None) -> AddressFamily:
    """Map a request hostname to the address family it asks for.

    Matching is on the lowercased hostname, so `IPv6.Example.com` selects IPv6.
    Hostnames without a known prefix (including the bare domain) are unspecified.
    """
    normalized = (hostname or "").strip().lower()
    for prefix, family in HOST_PREFIXES:
        if normalized.startswith(prefix):
            return family
    return AddressFamily.unspecified


def display_domain(hostname: str) -> str:
    """Domain advertised in the usage text: the hostname without a leading `www.`."""
    normalized = hostname.strip().lower()
    if normalized.startswith("www."):
        return normalized[len("www.") :]
    return normalized
