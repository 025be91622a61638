"""
Delivery strategies for handing the APK to an authorized device.

Exactly one strategy is active per process. :func:`init_app` selects it from
the ``DELIVERY_MODE`` configuration:

``redirect``
    :class:`RedirectDelivery` answers with a redirect to ``APK_DOWNLOAD_URL``.
``file``
    :class:`LocalFileDelivery` streams ``APK_FILENAME`` from
    ``APK_DIRECTORY``.
``proxy``
    :class:`ProxyDelivery` fetches ``APK_DOWNLOAD_URL`` server-side, follows
    at most one redirect, and forwards the body chunk by chunk.

Strategies raise :class:`.ArtifactNotFound` or :class:`.DeliveryFailure` when
the APK cannot be handed out. Once a streaming response has started, errors
can no longer change the status code; they are logged and end the transfer.
"""

import logging
import os
from enum import Enum
from typing import IO, Callable, Iterator, Optional, Tuple, Union
from urllib.parse import urljoin

import requests
from flask import Flask, Response, current_app, redirect

from .exceptions import ArtifactNotFound, ConfigurationError, DeliveryFailure

logger = logging.getLogger(__name__)

EXTENSION_KEY = 'apk_delivery'

APK_CONTENT_TYPE = 'application/vnd.android.package-archive'
REDIRECT_STATUSES = (301, 302, 303, 307, 308)


def apk_headers(filename: str, length: Union[int, str, None] = None) -> dict:
    """Build the fixed download headers for the APK."""
    headers = {
        'Content-Type': APK_CONTENT_TYPE,
        'Content-Disposition': f'attachment; filename={filename}'
    }
    if length is not None:
        headers['Content-Length'] = str(length)
    return headers


class ClosingStream(object):
    """
    A response body that releases its resources exactly once.

    The resources are released when iteration ends or fails, or when the
    server calls :meth:`close`. The server may close the body without ever
    iterating it (``HEAD``, or a client that hangs up before the first
    chunk).
    """

    def __init__(self, chunks: Iterator[bytes],
                 *closers: Callable[[], None]) -> None:
        self._chunks = chunks
        self._closers = closers
        self._closed = False

    def __iter__(self) -> Iterator[bytes]:
        try:
            for chunk in self._chunks:
                yield chunk
        finally:
            self.close()

    def close(self) -> None:
        """Release the underlying resources, if not done already."""
        if self._closed:
            return
        self._closed = True
        for closer in self._closers:
            closer()


class DeliveryStrategy(object):
    """Base class for the ways the APK can reach a device."""

    mode = ''

    def deliver(self, context: Optional[dict] = None) -> Response:
        """
        Build the response that hands the APK to the caller.

        ``context`` holds the ``extra`` fields (operation, origin, device id)
        attached to any log record written while delivering.
        """
        raise NotImplementedError('Implemented in a subclass')

    def describe(self) -> str:
        """Describe the delivery target, for logging."""
        raise NotImplementedError('Implemented in a subclass')


class RedirectDelivery(DeliveryStrategy):
    """Redirect the device to a statically configured download URL."""

    mode = 'redirect'

    def __init__(self, url: str) -> None:
        self.url = url

    def deliver(self, context: Optional[dict] = None) -> Response:
        logger.info('Redirecting to %s', self.url, extra=context)
        return redirect(self.url)

    def describe(self) -> str:
        return self.url


class LocalFileDelivery(DeliveryStrategy):
    """Stream the APK from a file on the local disk."""

    mode = 'file'

    def __init__(self, directory: str, filename: str,
                 chunk_size: int = 65536) -> None:
        self.directory = directory
        self.filename = filename
        self.chunk_size = chunk_size

    @property
    def path(self) -> str:
        """Absolute path of the APK file."""
        return os.path.abspath(os.path.join(self.directory, self.filename))

    def deliver(self, context: Optional[dict] = None) -> Response:
        """
        Stream the APK file to the caller as an attachment.

        Raises
        ------
        :class:`.ArtifactNotFound`
            If the file does not exist.
        :class:`.DeliveryFailure`
            If the file exists but cannot be opened.

        """
        path = self.path
        if not os.path.isfile(path):
            raise ArtifactNotFound(f'APK file not found: {path}')
        try:
            handle = open(path, 'rb')
        except OSError as e:
            raise DeliveryFailure(f'Could not open {path}: {e}') from e
        try:
            size = os.fstat(handle.fileno()).st_size
        except OSError as e:
            handle.close()
            raise DeliveryFailure(f'Could not stat {path}: {e}') from e
        logger.info('Streaming %s (%i bytes)', path, size, extra=context)
        body = ClosingStream(
            _read_file(handle, self.chunk_size, path, context), handle.close
        )
        return Response(body, headers=apk_headers(self.filename, size))

    def describe(self) -> str:
        return self.path


def _read_file(handle: IO[bytes], chunk_size: int, path: str,
               context: Optional[dict] = None) -> Iterator[bytes]:
    try:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            yield chunk
    except OSError as e:
        logger.error('Transfer of %s failed: %s', path, e, extra=context)


class HopState(Enum):
    """Progress of the proxy through the upstream redirect chain."""

    INITIAL = 'initial'
    """No request has been made yet."""

    FOLLOWED_ONCE = 'followed_once'
    """The first response was a redirect and its target is being fetched."""

    TERMINAL = 'terminal'
    """The response to forward has been obtained."""


def _is_redirect(response: requests.Response) -> bool:
    return response.status_code in REDIRECT_STATUSES \
        and bool(response.headers.get('Location'))


class ProxyDelivery(DeliveryStrategy):
    """
    Fetch the APK from a remote URL and forward it to the caller.

    If the upstream answers with a redirect, exactly one more request is made
    to its ``Location``; a redirect in the second response is not followed.
    The body is never buffered in full: chunks are forwarded as they arrive.
    """

    mode = 'proxy'

    def __init__(self, url: str, filename: str, user_agent: str,
                 connect_timeout: float = 10.0, read_timeout: float = 60.0,
                 chunk_size: int = 65536) -> None:
        self.url = url
        self.filename = filename
        self.user_agent = user_agent
        self.timeout = (connect_timeout, read_timeout)
        self.chunk_size = chunk_size

    def describe(self) -> str:
        return self.url

    def _get(self, session: requests.Session, url: str) -> requests.Response:
        try:
            return session.get(url, headers={'User-Agent': self.user_agent},
                               stream=True, allow_redirects=False,
                               timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise DeliveryFailure(f'Request to {url} failed: {e}') from e

    def fetch(self, session: requests.Session) -> requests.Response:
        """
        Get the upstream response whose body should be forwarded.

        Parameters
        ----------
        session : :class:`requests.Session`

        Returns
        -------
        :class:`requests.Response`
            An open, streaming response. The caller is responsible for
            closing it.

        Raises
        ------
        :class:`.DeliveryFailure`
            If either request fails, or the final response is an error.

        """
        state, url = HopState.INITIAL, self.url
        while state is not HopState.TERMINAL:
            response = self._get(session, url)
            if state is HopState.INITIAL and _is_redirect(response):
                location = urljoin(url, response.headers['Location'])
                response.close()
                logger.info('Upstream %s redirected to %s', url, location)
                state, url = HopState.FOLLOWED_ONCE, location
            else:
                if _is_redirect(response):
                    logger.warning('Not following second redirect from %s'
                                   ' to %s', url, response.headers['Location'])
                state = HopState.TERMINAL
        logger.debug('Upstream %s responded with status %i',
                     url, response.status_code)

        if response.status_code >= 400:
            response.close()
            raise DeliveryFailure(f'Upstream {url} responded with status'
                                  f' {response.status_code}')
        return response

    def deliver(self, context: Optional[dict] = None) -> Response:
        """
        Fetch the APK upstream and stream it back with the APK headers.

        Raises
        ------
        :class:`.DeliveryFailure`
            If the upstream cannot be reached or responds with an error.

        """
        session = requests.Session()
        try:
            upstream = self.fetch(session)
        except DeliveryFailure:
            session.close()
            raise
        length = None
        if 'Content-Encoding' not in upstream.headers:
            length = upstream.headers.get('Content-Length')
        body = ClosingStream(self._relay(upstream, context),
                             upstream.close, session.close)
        return Response(body, headers=apk_headers(self.filename, length))

    def _relay(self, upstream: requests.Response,
               context: Optional[dict] = None) -> Iterator[bytes]:
        forwarded = 0
        try:
            for chunk in upstream.iter_content(chunk_size=self.chunk_size):
                if chunk:
                    forwarded += len(chunk)
                    yield chunk
        except (requests.exceptions.RequestException, OSError) as e:
            logger.error('Proxy transfer from %s failed after %i bytes: %s',
                         upstream.url, forwarded, e, extra=context)
        else:
            logger.info('Proxied %i bytes from %s', forwarded, upstream.url,
                        extra=context)


def _timeouts(config: dict) -> Tuple[float, float]:
    try:
        return (float(config['UPSTREAM_CONNECT_TIMEOUT']),
                float(config['UPSTREAM_READ_TIMEOUT']))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f'Invalid upstream timeout: {e}') from e


def create_strategy(config: dict) -> DeliveryStrategy:
    """
    Build the delivery strategy selected by ``DELIVERY_MODE``.

    Raises
    ------
    :class:`.ConfigurationError`
        If the mode is unknown or a parameter is invalid.

    """
    mode = str(config.get('DELIVERY_MODE', 'redirect')).lower()
    chunk_size = int(config.get('STREAM_CHUNK_SIZE', 65536))
    if mode == RedirectDelivery.mode:
        return RedirectDelivery(config['APK_DOWNLOAD_URL'])
    if mode == LocalFileDelivery.mode:
        return LocalFileDelivery(config['APK_DIRECTORY'],
                                 config['APK_FILENAME'], chunk_size)
    if mode == ProxyDelivery.mode:
        connect_timeout, read_timeout = _timeouts(config)
        return ProxyDelivery(config['APK_DOWNLOAD_URL'],
                             config['APK_FILENAME'],
                             config['PROXY_USER_AGENT'],
                             connect_timeout, read_timeout, chunk_size)
    raise ConfigurationError(f'Unknown DELIVERY_MODE: {mode}')


def init_app(app: Flask) -> None:
    """Select the delivery strategy for ``app`` from its configuration."""
    app.config.setdefault('DELIVERY_MODE', 'redirect')
    app.config.setdefault('STREAM_CHUNK_SIZE', 65536)
    app.config.setdefault('UPSTREAM_CONNECT_TIMEOUT', 10)
    app.config.setdefault('UPSTREAM_READ_TIMEOUT', 60)
    app.extensions[EXTENSION_KEY] = create_strategy(app.config)


def current_delivery(app: Optional[Flask] = None) -> DeliveryStrategy:
    """Get the delivery strategy of ``app``, or of the current app."""
    if app is None:
        app = current_app
    try:
        return app.extensions[EXTENSION_KEY]
    except KeyError as e:
        raise ConfigurationError('Delivery is not initialized') from e
