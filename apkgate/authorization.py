"""Shared-secret authorization for the admin API."""

import hmac
import logging
from functools import wraps
from http import HTTPStatus
from typing import Any, Callable, Optional

from flask import current_app, jsonify, request

from .shared import client_origin, log_context

logger = logging.getLogger(__name__)

UNAUTHORIZED = {'error': 'Unauthorized'}


def admin_key_matches(supplied: Optional[str], expected: Optional[str]) -> bool:
    """
    Compare a supplied admin key with the configured one in constant time.

    An empty configured key never matches, so a blank ``ADMIN_KEY`` cannot
    open the admin API.
    """
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode('utf-8'),
                               expected.encode('utf-8'))


def admin_required(func: Callable[..., Any]) -> Callable[..., Any]:
    """Reject the request with 401 unless ``admin_key`` is correct."""
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Check the admin key before executing the view."""
        supplied = request.values.get('admin_key')
        if not admin_key_matches(supplied, current_app.config.get('ADMIN_KEY')):
            logger.warning('Admin request rejected: invalid admin key',
                           extra=log_context(func.__name__,
                                             client_origin(request)))
            return jsonify(UNAUTHORIZED), HTTPStatus.UNAUTHORIZED
        return func(*args, **kwargs)
    return wrapper
