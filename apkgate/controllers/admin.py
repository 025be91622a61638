"""Handles admin requests that maintain the device registry."""

import logging
from http import HTTPStatus
from typing import Optional

from apkgate.services import registry
from apkgate.shared import log_context
from . import ResponseData

logger = logging.getLogger(__name__)

DEVICE_ID_REQUIRED = {'error': 'Device ID required'}


def authorize_device(device_id: Optional[str], origin: str) -> ResponseData:
    """
    Add a device to the registry.

    Authorizing a device that is already registered succeeds without changing
    the registry size.

    Returns
    -------
    dict
        ``success``, a ``message`` and ``total_devices``.
    int
        200, or 400 if ``device_id`` is missing.
    dict
        Extra headers to add to the response.

    """
    if not device_id:
        logger.warning('Authorize failed: no device ID provided',
                       extra=log_context('authorize_device', origin))
        return DEVICE_ID_REQUIRED, HTTPStatus.BAD_REQUEST, {}
    total = registry.authorize(device_id)
    logger.info('Device authorized', extra=log_context('authorize_device',
                                                       origin, device_id))
    return {
        'success': True,
        'message': f'Device {device_id} has been authorized',
        'total_devices': total
    }, HTTPStatus.OK, {}


def revoke_device(device_id: Optional[str], origin: str) -> ResponseData:
    """
    Remove a device from the registry.

    Revoking a device that is not registered still succeeds; the response
    reports whether it had been authorized.
    """
    if not device_id:
        logger.warning('Revoke failed: no device ID provided',
                       extra=log_context('revoke_device', origin))
        return DEVICE_ID_REQUIRED, HTTPStatus.BAD_REQUEST, {}
    result = registry.revoke(device_id)
    logger.info('Device revoked (was authorized: %s)', result.was_authorized,
                extra=log_context('revoke_device', origin, device_id))
    return {
        'success': True,
        'message': f'Device {device_id} authorization revoked',
        'was_authorized': result.was_authorized,
        'total_devices': result.total_devices
    }, HTTPStatus.OK, {}


def list_devices(origin: str) -> ResponseData:
    """List every registered device."""
    devices = registry.list_devices()
    logger.debug('Listed %i devices', len(devices),
                 extra=log_context('list_devices', origin))
    return {'total': len(devices), 'devices': devices}, HTTPStatus.OK, {}
