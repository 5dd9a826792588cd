"""Authentication middleware for the HTTP endpoints."""

import hmac
import logging
from typing import Callable, Optional

from aiohttp import web

logger = logging.getLogger(__name__)

ANONYMOUS_ATTRIBUTE = 'allow_anonymous'


def allow_anonymous(handler: Callable) -> Callable:
    """
    Mark a route handler as reachable without authentication.

    Args:
        handler: aiohttp request handler

    Returns:
        The same handler, marked
    """
    setattr(handler, ANONYMOUS_ATTRIBUTE, True)
    return handler


def is_anonymous(handler: Optional[Callable]) -> bool:
    return bool(getattr(handler, ANONYMOUS_ATTRIBUTE, False))


def check_token(expected: str, provided: Optional[str]) -> bool:
    """
    Check if a provided token matches the configured token.

    Args:
        expected: Configured token
        provided: Token sent by the client

    Returns:
        True if tokens match, False otherwise
    """
    if not expected or not provided:
        return False
    return hmac.compare_digest(expected.encode('utf-8'), provided.encode('utf-8'))


def _bearer_token(request: web.Request) -> Optional[str]:
    header = request.headers.get('Authorization', '')
    scheme, _, token = header.partition(' ')
    if scheme.lower() != 'bearer' or not token:
        return None
    return token.strip()


def create_auth_middleware(token: Optional[str]):
    """
    Create middleware requiring a bearer token on every non-anonymous route.

    With no token configured, every request passes.

    Args:
        token: Expected bearer token, or None/empty to disable authentication

    Returns:
        aiohttp middleware
    """
    if token:
        logger.info("Authentication initialized")
    else:
        logger.info("No auth token configured - authentication disabled")

    @web.middleware
    async def auth_middleware(request: web.Request, handler):
        if not token:
            return await handler(request)

        route_handler = request.match_info.route.handler if request.match_info.route else None
        if is_anonymous(route_handler) or is_anonymous(handler):
            return await handler(request)

        if not check_token(token, _bearer_token(request)):
            logger.info(f"Rejected unauthenticated request to {request.path}")
            return web.json_response(
                {'success': False, 'error': 'Authentication required'},
                status=401,
            )

        return await handler(request)

    return auth_middleware
