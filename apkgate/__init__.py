"""
Device-authorization gate in front of an APK download.

apkgate is a Flask application that decides whether a device may install the
application. Devices identify themselves with an opaque ``device_id``; the
gate answers authorization checks against an in-memory allow-list (see
:mod:`apkgate.services.registry`) and, for authorized devices, hands out the
APK using one of three delivery strategies (see
:mod:`apkgate.services.delivery`):

- ``redirect``: send the device to a statically configured download URL.
- ``file``: stream a file from the local disk.
- ``proxy``: fetch a remote URL server-side, following at most one redirect,
  and forward the bytes as they arrive.

Administrators maintain the allow-list through a small API protected by a
shared secret (``ADMIN_KEY``). The allow-list is not persisted; it is rebuilt
from ``SEED_DEVICES`` each time the process starts.
"""
