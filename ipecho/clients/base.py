from abc import ABC, abstractmethod

from ipecho.models.common import ServiceTarget
from ipecho.models.request_models import AddressFamily


class BaseEchoClient(ABC):
    """Abstract base for clients of an address echo service.

    An echo service reports back the address it saw the connection arrive from.
    Implementations make exactly one outbound request, forced over `family`,
    and return the raw response body.
    """

    @abstractmethod
    async def fetch(self, target: ServiceTarget, family: AddressFamily) -> str:
        """Return the echo service's response body for a connection made over `family`.

        Raises EchoServiceError (or EchoTimeoutError) when no usable response is received.
        """
        raise NotImplementedError
