"""
Shared instances for request handlers.
"""
from fastapi import Request

from .services.gateway import RosettaGateway
from .utils.errors import NodeUnavailable


def get_gateway(request: Request) -> RosettaGateway:
    """The gateway created by the application lifespan."""
    gateway = getattr(request.app.state, "gateway", None)
    if gateway is None:
        raise NodeUnavailable("Server is still starting")
    return gateway
