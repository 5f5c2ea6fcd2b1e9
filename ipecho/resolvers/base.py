from abc import ABC, abstractmethod

from ipecho.models.common import ResolutionOutcome
from ipecho.models.request_models import AddressFamily, RequestContext


class BaseAddressResolver(ABC):
    """Abstract base for the strategies that determine the caller's address.

    Implementations never raise for network or metadata problems: every failure
    is reported through a failed ResolutionOutcome carrying a caller-facing reason.
    """

    @abstractmethod
    async def resolve(self, family: AddressFamily, context: RequestContext) -> ResolutionOutcome:
        """Determine the caller's address in `family` (IPv4 or IPv6)."""
        raise NotImplementedError
