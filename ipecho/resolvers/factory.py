from collections.abc import Callable

from ipecho.clients.base import BaseEchoClient
from ipecho.config import ResolutionStrategy, Settings
from ipecho.messages import get_messages
from ipecho.resolvers.active_probe import ActiveProbeResolver
from ipecho.resolvers.base import BaseAddressResolver
from ipecho.resolvers.passive import PassiveResolver


def _build_active_probe(settings: Settings, echo_client: BaseEchoClient) -> BaseAddressResolver:
    messages = get_messages(settings.language)
    fallback = PassiveResolver(messages) if settings.probe_fallback_to_passive else None
    return ActiveProbeResolver(echo_client, settings.service_targets, messages, fallback=fallback)


def _build_passive(settings: Settings, echo_client: BaseEchoClient) -> BaseAddressResolver:
    messages = get_messages(settings.language)
    mismatch_fallback = (
        ActiveProbeResolver(echo_client, settings.service_targets, messages)
        if settings.passive_mismatch_probe
        else None
    )
    return PassiveResolver(messages, mismatch_fallback=mismatch_fallback)


class ResolverFactory:
    """Factory for the address resolution strategy of a deployment.

    The strategy is a configuration choice: every request of a process is
    resolved the same way.
    """

    STRATEGIES_MAP: dict[ResolutionStrategy, Callable[[Settings, BaseEchoClient], BaseAddressResolver]] = {
        ResolutionStrategy.active_probe: _build_active_probe,
        ResolutionStrategy.passive: _build_passive,
    }

    def __call__(self, settings: Settings, echo_client: BaseEchoClient) -> BaseAddressResolver:
        builder = self.STRATEGIES_MAP[settings.resolution_strategy]
        return builder(settings, echo_client)
