from typing import Annotated

import anyio
from fastapi import Depends, FastAPI, Request, Response, status

from ipecho.classifier import classify_host
from ipecho.clients.base import BaseEchoClient
from ipecho.clients.echo_client import EchoClient
from ipecho.composer import (
    CORS_HEADERS,
    compose_response,
    compose_unknown_host_response,
    preflight_response,
    select_shape,
)
from ipecho.config import Settings, get_settings
from ipecho.edge import build_request_context
from ipecho.exception_handlers import unhandled_exception_handler
from ipecho.geo import build_geo_record
from ipecho.logger import logger
from ipecho.models.common import ResolutionOutcome
from ipecho.models.request_models import AddressFamily, RequestContext
from ipecho.models.response_models import HealthResponse
from ipecho.resolvers.base import BaseAddressResolver
from ipecho.resolvers.factory import ResolverFactory

DISCONNECT_POLL_SECONDS = 0.1
# nginx convention for "client closed request"; the client never reads it.
HTTP_CLIENT_CLOSED_REQUEST = 499

app = FastAPI(
    title="IP Echo Service",
    version="0.1.0",
    description="Reports the caller's public IPv4 or IPv6 address, selected by the ipv4./ipv6. subdomain.",
)
logger.info("Started IP Echo Service")


def get_echo_client(settings: Annotated[Settings, Depends(get_settings)]) -> BaseEchoClient:
    """Dependency providing the outbound echo service client."""
    return EchoClient(timeout_seconds=settings.probe_timeout_seconds, user_agent=settings.user_agent)


def get_resolver_factory() -> ResolverFactory:
    """Dependency to provide a ResolverFactory instance."""
    return ResolverFactory()


def get_resolver(
    settings: Annotated[Settings, Depends(get_settings)],
    echo_client: Annotated[BaseEchoClient, Depends(get_echo_client)],
    factory: Annotated[ResolverFactory, Depends(get_resolver_factory)],
) -> BaseAddressResolver:
    """Dependency returning the resolver for the configured strategy."""
    return factory(settings, echo_client)


async def _cancel_on_disconnect(request: Request, cancel_scope: anyio.CancelScope) -> None:
    while not await request.is_disconnected():
        await anyio.sleep(DISCONNECT_POLL_SECONDS)
    logger.info(f"Client disconnected, cancelling resolution path={request.url.path}")
    cancel_scope.cancel()


async def resolve_until_disconnected(
    request: Request, resolver: BaseAddressResolver, family: AddressFamily, context: RequestContext
) -> ResolutionOutcome | None:
    """Resolve the caller's address, giving up as soon as the client goes away.

    Returns None when the client disconnected first; the outbound call is
    cancelled and its connection closed.
    """
    outcome: ResolutionOutcome | None = None
    error: Exception | None = None
    async with anyio.create_task_group() as task_group:
        task_group.start_soon(_cancel_on_disconnect, request, task_group.cancel_scope)
        # Errors are re-raised outside the group so exception handlers see them unwrapped.
        try:
            outcome = await resolver.resolve(family, context)
        except Exception as exc:
            error = exc
        task_group.cancel_scope.cancel()

    if error is not None:
        raise error
    return outcome


app.add_exception_handler(Exception, unhandled_exception_handler)


@app.middleware("http")
async def cors_middleware(request: Request, call_next) -> Response:
    """Answer pre-flight requests immediately and add CORS headers to everything else."""
    if request.method == "OPTIONS":
        return preflight_response()

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.get(
    "/health",
    tags=["health"],
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
)
async def health() -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(status="ok")


@app.api_route(
    "/{path:path}",
    methods=["GET", "HEAD"],
    tags=["ip"],
    summary="Report the caller's address in the family named by the hostname.",
)
async def echo_address(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
    resolver: Annotated[BaseAddressResolver, Depends(get_resolver)],
) -> Response:
    """Return the caller's IPv4 or IPv6 address.

    - `ipv4.<domain>` and `ipv6.<domain>` select the address family.
    - `/geo` selects the JSON body with geolocation, when enabled.
    - Any other hostname gets the usage text or a 404, depending on the deployment.
    """
    context = build_request_context(request, trust_forwarded_for=settings.trust_forwarded_for)
    family = classify_host(context.hostname)

    if family is AddressFamily.unspecified:
        logger.info(
            "Request for unknown host "
            f"host={context.hostname} path={context.path} policy={settings.unknown_host_policy.value}"
        )
        return compose_unknown_host_response(context.hostname, settings)

    logger.info(
        "Resolving caller address "
        f"host={context.hostname} path={context.path} method={context.method} "
        f"family={family.value} peer={context.metadata.peer_address} strategy={settings.resolution_strategy.value}"
    )
    outcome = await resolve_until_disconnected(request, resolver, family, context)
    if outcome is None:
        return Response(status_code=HTTP_CLIENT_CLOSED_REQUEST)
    if not outcome.succeeded:
        logger.warning(
            "Could not resolve caller address "
            f"host={context.hostname} family={family.value} source={outcome.source} reason={outcome.failure_reason}"
        )

    geo = build_geo_record(context.metadata, settings)
    shape = select_shape(context.path, settings)
    return compose_response(outcome, geo, shape)
