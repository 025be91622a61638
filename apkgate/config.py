"""Flask configuration for the device gate."""

import os
import secrets

VERSION = '0.1.0'

PORT = int(os.environ.get('PORT', '10000'))
"""Port bound by the development runner (``app.py``)."""

SERVICE_NAME = os.environ.get('SERVICE_NAME', 'APK Installation Server')

ADMIN_KEY_CONFIGURED = bool(os.environ.get('ADMIN_KEY'))
ADMIN_KEY = os.environ.get('ADMIN_KEY') or secrets.token_urlsafe(32)
"""Shared secret for the admin API.

If unset, a random key is generated for this process and never logged, which
leaves the admin API unusable until ``ADMIN_KEY`` is configured."""

SEED_DEVICES = os.environ.get('SEED_DEVICES',
                              '9d389cebf6a08dbd,459e6d0b4391170f')
"""Comma-separated device ids loaded into the registry at startup."""

DELIVERY_MODE = os.environ.get('DELIVERY_MODE', 'redirect')
"""One of ``redirect``, ``file`` or ``proxy``."""

APK_DOWNLOAD_URL = os.environ.get(
    'APK_DOWNLOAD_URL',
    'https://github.com/example/app/releases/download/v1.0/app-release.apk'
)
"""Redirect target (``redirect``) or upstream URL (``proxy``)."""

APK_DIRECTORY = os.environ.get('APK_DIRECTORY', os.path.join(os.getcwd(),
                                                             'apk'))
APK_FILENAME = os.environ.get('APK_FILENAME', 'app-release.apk')
"""File served in ``file`` mode; also the name offered to the device."""

PROXY_USER_AGENT = os.environ.get('PROXY_USER_AGENT',
                                  f'apkgate-proxy/{VERSION}')
UPSTREAM_CONNECT_TIMEOUT = os.environ.get('UPSTREAM_CONNECT_TIMEOUT', '10')
UPSTREAM_READ_TIMEOUT = os.environ.get('UPSTREAM_READ_TIMEOUT', '60')
STREAM_CHUNK_SIZE = int(os.environ.get('STREAM_CHUNK_SIZE', '65536'))

LOGLEVEL = os.environ.get('LOGLEVEL', 'INFO')
