from collections.abc import Mapping
from ipaddress import IPv6Address, ip_address

from ipecho.clients.base import BaseEchoClient
from ipecho.errors import EchoServiceError, EchoTimeoutError, PeerAddressUnavailableError
from ipecho.logger import logger
from ipecho.messages import MessageCatalog
from ipecho.models.common import ResolutionOutcome, ServiceTarget
from ipecho.models.request_models import AddressFamily, RequestContext
from ipecho.resolvers.base import BaseAddressResolver
from ipecho.resolvers.passive import PassiveResolver

TRACE_IP_PREFIX = "ip="


def parse_echo_body(body: str, family: AddressFamily) -> str:
    """Extract the caller's address from an echo service response.

    Plain services answer with the bare address. Diagnostic (trace) responses are
    `key=value` lines, in which case the value of the `ip=` line is used:

        fl=123f45
        h=ipv6.example.com
        ip=2001:db8::7
        ts=1700000000.123

    Raises EchoServiceError when the body holds no address, or an address of
    the other family.
    """
    text = body.strip()
    candidate = text
    for line in text.splitlines():
        line = line.strip()
        if line.startswith(TRACE_IP_PREFIX):
            candidate = line[len(TRACE_IP_PREFIX) :].strip()
            break

    if not candidate:
        raise EchoServiceError("Echo service returned an empty body")

    try:
        parsed = ip_address(candidate)
    except ValueError as exc:
        raise EchoServiceError(f"Echo service returned an unparsable address: {candidate[:64]!r}") from exc

    if isinstance(parsed, IPv6Address) and parsed.ipv4_mapped is not None:
        parsed = parsed.ipv4_mapped

    if parsed.version != family.version:
        raise EchoServiceError(f"Echo service returned IPv{parsed.version} address {parsed} for a {family.label} probe")

    return str(parsed)


class ActiveProbeResolver(BaseAddressResolver):
    """Ask an external echo service which address the connection came from.

    The echo client forces the outbound connection over the requested family,
    so a successful answer is the caller's address in that family. A failed
    probe is never replaced by an address of the other family.
    """

    def __init__(
        self,
        echo_client: BaseEchoClient,
        targets: Mapping[AddressFamily, ServiceTarget],
        messages: MessageCatalog,
        fallback: PassiveResolver | None = None,
    ) -> None:
        self._echo_client = echo_client
        self._targets = targets
        self._messages = messages
        self._fallback = fallback

    async def resolve(self, family: AddressFamily, context: RequestContext) -> ResolutionOutcome:
        target = self._targets[family]
        logger.info(f"Probing echo service path={context.path} family={family.value} url={target.url}")

        try:
            body = await self._echo_client.fetch(target, family)
            address = parse_echo_body(body, family)
        except EchoTimeoutError as exc:
            logger.warning(f"Echo probe timed out path={context.path} family={family.value} error={exc}")
        except EchoServiceError as exc:
            logger.error(f"Echo probe failed path={context.path} family={family.value} error={exc}")
        else:
            return ResolutionOutcome.success(family, address, source="probe")

        failure = ResolutionOutcome.failure(family, self._messages.probe_failed(family), source="probe")
        if self._fallback is None:
            return failure
        return self._fall_back_to_peer(self._fallback, family, context, failure)

    def _fall_back_to_peer(
        self, fallback: PassiveResolver, family: AddressFamily, context: RequestContext, failure: ResolutionOutcome
    ) -> ResolutionOutcome:
        """Use the inbound connection's address; keep the probe failure if there is none."""
        try:
            outcome = fallback.classify(family, context)
        except PeerAddressUnavailableError as exc:
            logger.warning(f"Passive fallback unavailable path={context.path} family={family.value} error={exc}")
            return failure

        logger.info(
            "Passive fallback after failed probe "
            f"path={context.path} family={family.value} succeeded={outcome.succeeded}"
        )
        return outcome
