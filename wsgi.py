"""Web Server Gateway Interface entry-point."""

import os

from apkgate.factory import create_web_app

__flask_app__ = None


def application(environ, start_response):
    """WSGI application."""
    for key, value in environ.items():
        # uWSGI passes the container hostname as ``SERVER_NAME``; keep the
        # configured value instead.
        if key == 'SERVER_NAME':
            continue
        os.environ[key] = str(value)

    global __flask_app__
    if __flask_app__ is None:
        __flask_app__ = create_web_app()
    return __flask_app__(environ, start_response)
