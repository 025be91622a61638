"""Provides an app factory for the device gate."""

import logging

from flask import Flask, jsonify
from werkzeug.exceptions import BadRequest, HTTPException, \
    InternalServerError, MethodNotAllowed, NotFound

from . import app_logging
from .routes import admin, devices
from .services import delivery, registry

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException):
    exc_resp = error.get_response()
    response = jsonify(reason=error.description)
    response.status_code = exc_resp.status_code
    return response


def create_web_app() -> Flask:
    """Initialize and configure the device gate."""
    app = Flask('apkgate')
    app.config.from_pyfile('config.py')
    app_logging.setup_logger(app.config['LOGLEVEL'])

    registry.init_app(app)
    delivery.init_app(app)

    app.register_blueprint(devices.blueprint)
    app.register_blueprint(admin.blueprint)
    app.errorhandler(NotFound)(jsonify_exception)
    app.errorhandler(BadRequest)(jsonify_exception)
    app.errorhandler(MethodNotAllowed)(jsonify_exception)
    app.errorhandler(InternalServerError)(jsonify_exception)

    _log_startup(app)
    return app


def _log_startup(app: Flask) -> None:
    strategy = delivery.current_delivery(app)
    logger.info('%s started', app.config['SERVICE_NAME'], extra={
        'port': app.config['PORT'],
        'delivery_mode': strategy.mode,
        'delivery_target': strategy.describe(),
        'authorized_devices': len(app.extensions[registry.EXTENSION_KEY])
    })
    if not app.config.get('ADMIN_KEY_CONFIGURED'):
        logger.warning('ADMIN_KEY is not set; the admin API will reject all'
                       ' requests until it is configured')
