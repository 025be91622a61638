"""Provides the shared-secret-protected admin routes."""

from flask import Blueprint, jsonify, request

from apkgate.authorization import admin_required
from apkgate.controllers import admin
from apkgate.shared import client_origin

blueprint = Blueprint('admin', __name__, url_prefix='/api')


@blueprint.route('/authorize-device', methods=['POST'])
@admin_required
def authorize_device() -> tuple:
    """Add a device to the registry."""
    data, status_code, headers = admin.authorize_device(
        request.values.get('device_id'), client_origin(request)
    )
    return jsonify(data), status_code, headers


@blueprint.route('/revoke-device', methods=['POST'])
@admin_required
def revoke_device() -> tuple:
    """Remove a device from the registry."""
    data, status_code, headers = admin.revoke_device(
        request.values.get('device_id'), client_origin(request)
    )
    return jsonify(data), status_code, headers


@blueprint.route('/list-devices', methods=['GET'])
@admin_required
def list_devices() -> tuple:
    """List the registered devices."""
    data, status_code, headers = admin.list_devices(client_origin(request))
    return jsonify(data), status_code, headers
