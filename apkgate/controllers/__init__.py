"""
Request controllers for the device gate.

Controllers take plain request parameters (never the request object) and
return a ``(body, status code, headers)`` tuple, or a ready-made
:class:`flask.Response` for downloads.
"""

from typing import Any, Dict, Tuple

ResponseData = Tuple[Any, int, Dict[str, str]]

PLAIN_TEXT = {'Content-Type': 'text/plain; charset=utf-8'}
