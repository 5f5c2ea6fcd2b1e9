from ipecho.errors import PeerAddressUnavailableError
from ipecho.logger import logger
from ipecho.messages import MessageCatalog
from ipecho.models.common import ResolutionOutcome
from ipecho.models.request_models import AddressFamily, RequestContext
from ipecho.resolvers.base import BaseAddressResolver


class PassiveResolver(BaseAddressResolver):
    """Report the address the inbound connection actually arrived from.

    No outbound request is made. This can only tell which family the client
    used to connect; it cannot prove that the other family is unreachable.
    """

    def __init__(self, messages: MessageCatalog, mismatch_fallback: BaseAddressResolver | None = None) -> None:
        self._messages = messages
        # Optional second opinion when the connection used the other family.
        self._mismatch_fallback = mismatch_fallback

    def classify(self, family: AddressFamily, context: RequestContext) -> ResolutionOutcome:
        """Compare the peer address family with the requested one.

        Raises PeerAddressUnavailableError when the platform recorded no peer address.
        """
        metadata = context.metadata
        if not metadata.peer_address:
            raise PeerAddressUnavailableError(f"No peer address recorded for host={context.hostname}")

        connected = metadata.peer_family
        if connected is family:
            return ResolutionOutcome.success(family, metadata.peer_address, source="peer")

        reason = self._messages.mismatch(requested=family, connected=connected, address=metadata.peer_address)
        return ResolutionOutcome.failure(family, reason, source="peer")

    async def resolve(self, family: AddressFamily, context: RequestContext) -> ResolutionOutcome:
        try:
            outcome = self.classify(family, context)
        except PeerAddressUnavailableError as exc:
            logger.warning(f"Peer address unavailable path={context.path} family={family.value} error={exc}")
            return ResolutionOutcome.failure(family, self._messages.peer_unavailable, source="peer")

        if outcome.succeeded or self._mismatch_fallback is None:
            return outcome

        logger.info(
            "Connection family mismatch, probing "
            f"path={context.path} requested={family.value} connected={context.metadata.peer_family.value}"
        )
        probed = await self._mismatch_fallback.resolve(family, context)
        return probed if probed.succeeded else outcome
