"""Handles device-facing requests: authorization checks and downloads."""

import logging
from http import HTTPStatus
from typing import Optional, Union

from flask import Response

from apkgate.services import delivery, registry
from apkgate.services.exceptions import ArtifactNotFound, DeliveryFailure
from apkgate.shared import log_context
from . import PLAIN_TEXT, ResponseData

logger = logging.getLogger(__name__)

DEVICE_ID_REQUIRED = 'Device ID required'
NOT_AUTHORIZED = 'Device not authorized'
APK_NOT_FOUND = 'APK file not found'
DOWNLOAD_FAILED = 'Download failed'


def check_device(device_id: Optional[str], origin: str) -> ResponseData:
    """
    Tell a device whether it is allowed to install the application.

    Parameters
    ----------
    device_id : str or None
        Identifier supplied by the device.
    origin : str
        Network origin of the caller, for logging.

    Returns
    -------
    dict
        ``authorized`` and a human-readable ``message``, or an ``error``.
    int
        200 if authorized, 403 if not, 400 if ``device_id`` is missing.
    dict
        Extra headers to add to the response.

    """
    if not device_id:
        logger.warning('Check failed: no device ID provided',
                       extra=log_context('check_device', origin))
        return {'error': DEVICE_ID_REQUIRED}, HTTPStatus.BAD_REQUEST, {}

    authorized = registry.is_authorized(device_id)
    logger.info('Authorization check: %s',
                'authorized' if authorized else 'denied',
                extra=log_context('check_device', origin, device_id))
    if authorized:
        return {'authorized': True, 'message': 'Device authorized'}, \
            HTTPStatus.OK, {}
    return {'authorized': False, 'message': NOT_AUTHORIZED}, \
        HTTPStatus.FORBIDDEN, {}


def download_app(device_id: Optional[str], origin: str) \
        -> Union[Response, ResponseData]:
    """
    Hand the APK to an authorized device.

    The active delivery strategy decides whether this is a redirect, a local
    file stream or a proxied upstream download. Failures are reported as plain
    text: 400 (missing id), 403 (not authorized), 404 (no APK file) or 500
    (delivery failed).
    """
    if not device_id:
        logger.warning('Download failed: no device ID provided',
                       extra=log_context('download_app', origin))
        return DEVICE_ID_REQUIRED, HTTPStatus.BAD_REQUEST, PLAIN_TEXT

    context = log_context('download_app', origin, device_id)
    if not registry.is_authorized(device_id):
        logger.warning('Download denied: unauthorized device', extra=context)
        return NOT_AUTHORIZED, HTTPStatus.FORBIDDEN, PLAIN_TEXT

    strategy = delivery.current_delivery()
    logger.info('Download request, delivering by %s', strategy.mode,
                extra=context)
    try:
        return strategy.deliver(context)
    except ArtifactNotFound as e:
        logger.error('Download failed: %s', e, extra=context)
        return APK_NOT_FOUND, HTTPStatus.NOT_FOUND, PLAIN_TEXT
    except DeliveryFailure as e:
        logger.error('Download failed: %s', e, extra=context)
        return DOWNLOAD_FAILED, HTTPStatus.INTERNAL_SERVER_ERROR, PLAIN_TEXT
