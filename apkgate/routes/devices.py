"""Provides device-facing routes and the liveness check."""

from http import HTTPStatus

from flask import Blueprint, current_app, jsonify, request
from flask.typing import ResponseReturnValue

from apkgate.controllers import PLAIN_TEXT, devices
from apkgate.shared import client_origin

blueprint = Blueprint('devices', __name__, url_prefix='')


@blueprint.route('/', methods=['GET'])
def liveness() -> tuple:
    """Report that the service is running."""
    name = current_app.config['SERVICE_NAME']
    return f'{name} - Running', HTTPStatus.OK, PLAIN_TEXT


@blueprint.route('/api/check-device', methods=['GET'])
def check_device() -> tuple:
    """Check whether a device is authorized."""
    data, status_code, headers = devices.check_device(
        request.args.get('device_id'), client_origin(request)
    )
    return jsonify(data), status_code, headers


@blueprint.route('/api/download-app', methods=['GET'])
def download_app() -> ResponseReturnValue:
    """Deliver the APK to an authorized device."""
    return devices.download_app(request.args.get('device_id'),
                                client_origin(request))
