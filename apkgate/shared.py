"""Helpers shared by the routes and controllers."""

from typing import Optional

from flask import Request


def client_origin(request: Request) -> str:
    """
    Get the network origin of the caller.

    Behind a platform load balancer the socket peer is the proxy, so the first
    ``X-Forwarded-For`` entry is preferred when present.
    """
    forwarded = request.headers.get('X-Forwarded-For', '')
    if forwarded:
        return forwarded.split(',')[0].strip()
    return request.remote_addr or 'unknown'


def log_context(operation: str, origin: str, device_id: Optional[str] = None) -> dict:
    """Build the ``extra`` fields attached to gate log records."""
    extra = {'operation': operation, 'origin': origin}
    if device_id:
        extra['device_id'] = device_id
    return extra
