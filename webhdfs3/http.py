# -*- coding: utf-8 -*-
"""
HTTP exchange layer: one request at a time over a single ``requests.Session``

Response bodies are streamed chunk by chunk through a :class:`ReplyHandler`,
which captures the status, keeps the body of unexpected replies for error
decoding and forwards everything else to the caller's sink.
"""
import logging
import threading
from urllib.parse import urljoin

import requests

from .exceptions import (WebHDFSError, TransportError, ClientSideError,
                         RemoteError, UnexpectedStatusError)
from .utils import try_parse_json, MyNone

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 2 ** 16
USER_AGENT = None

GET, PUT, POST, DELETE = 'GET', 'PUT', 'POST', 'DELETE'

# ``None`` drops a header requests would otherwise send
_NO_BODY_HEADERS = {'Expect': None, 'Transfer-Encoding': None}
_METHOD_HEADERS = {
    GET: {'Expect': None},
    DELETE: _NO_BODY_HEADERS,
}

_init_lock = threading.Lock()
_initialized = False


def init_transport():
    """ Process-wide transport setup; runs exactly once

    Safe to call concurrently from several clients being constructed at the
    same time.
    """
    global _initialized, USER_AGENT
    if _initialized:
        return
    with _init_lock:
        if _initialized:
            return
        USER_AGENT = 'webhdfs3 (%s)' % requests.utils.default_user_agent()
        logger.debug("Transport initialized, user agent %s", USER_AGENT)
        _initialized = True


class Request(object):
    """ One outgoing HTTP call

    Parameters
    ----------
    method: str
        One of 'GET', 'PUT', 'DELETE'
    url: str
        Fully qualified target
    expected_status: int
        The only status code counting as success for this call
    follow_redirect: bool (False)
        Whether the transport follows 3xx replies itself
    source: readable binary file-like or None
        Request body, streamed with chunked transfer encoding
    sink: writable binary file-like or None
        Receives the body of the expected reply
    """

    def __init__(self, method, url, expected_status, follow_redirect=False,
                 source=None, sink=None):
        self.method = method
        self.url = url
        self.expected_status = expected_status
        self.follow_redirect = follow_redirect
        self.source = source
        self.sink = sink

    def __repr__(self):
        return '<Request %s %s>' % (self.method, self.url)


class Reply(object):
    """ Outcome of one :class:`Request` """

    def __init__(self):
        self.status = 0
        self.body = bytearray()
        self.client_error = None
        self.redirect_url = None

    def __repr__(self):
        return '<Reply %s>' % self.status


class ReplyHandler(object):
    """ Receives response chunks for one request

    ``feed`` returns False when the transfer must stop; the reason is then
    recorded as ``reply.client_error``.
    """

    def __init__(self, reply, expected_status, sink, response):
        self.reply = reply
        self.expected_status = expected_status
        self.sink = sink
        self.response = response

    def capture_status(self):
        try:
            self.reply.status = int(self.response.status_code)
        except (TypeError, ValueError) as e:
            self.reply.client_error = "can't read response status: %s" % e
            return False
        return True

    def feed(self, chunk):
        reply = self.reply
        if not reply.status and not self.capture_status():
            return False
        if reply.status != self.expected_status:
            reply.body.extend(chunk)
        elif self.sink is not None:
            try:
                self.sink.write(chunk)
            except (IOError, OSError, ValueError, TypeError) as e:
                reply.client_error = "can't write to data sink: %s" % e
                return False
        return True


def iter_source(source, chunk_size=DEFAULT_CHUNK_SIZE, reply=None):
    """ Pull a stream in chunks; a read giving no bytes ends the body

    A failing read is recorded as ``reply.client_error`` before it
    propagates, so the executor can report it as a local fault.
    """
    while True:
        try:
            chunk = source.read(chunk_size)
        except (IOError, OSError, ValueError, TypeError) as e:
            if reply is not None:
                reply.client_error = "can't read from data source: %s" % e
            raise
        if not chunk:
            return
        yield chunk


def parse_remote_error(body):
    """ Decode a ``RemoteException`` envelope, or return ``None``

    >>> e = parse_remote_error(b'{"RemoteException": {"message": "gone"}}')
    >>> e.exception, e.remote_message
    ('Unknown', 'gone')
    """
    value = try_parse_json(body)
    if value is MyNone or not isinstance(value, dict):
        return None
    if 'RemoteException' not in value:
        return None
    envelope = value['RemoteException']
    if not isinstance(envelope, dict):
        envelope = {}
    return RemoteError(str(envelope.get('message', '')),
                       exception=str(envelope.get('exception', 'Unknown')))


class HttpClient(object):
    """ Executes :class:`Request` objects over one ``requests.Session``

    Not safe for concurrent use: the session is shared by every call made
    through this instance.

    Parameters
    ----------
    connect_timeout: int or None
        Seconds to wait for a connection; 0/None means transport default
    transfer_timeout: int or None
        Seconds to wait on each socket read; 0/None means transport
        default. It bounds a stall, not the whole transfer.
    session: requests.Session or None
        Transport handle to own; a new one is created if not given
    """

    def __init__(self, connect_timeout=None, transfer_timeout=None,
                 session=None):
        init_transport()
        self.session = session or requests.Session()
        self.session.headers['User-Agent'] = USER_AGENT
        self.connect_timeout = connect_timeout or None
        self.transfer_timeout = transfer_timeout or None

    @property
    def timeout(self):
        return (self.connect_timeout, self.transfer_timeout)

    def close(self):
        self.session.close()

    def _prepare(self, req, reply):
        if req.method == PUT:
            if req.source is None:
                return _NO_BODY_HEADERS, None
            return {'Expect': None}, iter_source(req.source, reply=reply)
        if req.method in _METHOD_HEADERS:
            return _METHOD_HEADERS[req.method], None
        raise WebHDFSError('%s requests not implemented' % req.method)

    def make(self, req):
        """ Perform ``req``, returning the :class:`Reply` on expected status

        Raises
        ------
        TransportError, ClientSideError, RemoteError, UnexpectedStatusError
        """
        reply = Reply()
        headers, data = self._prepare(req, reply)
        logger.debug("%s %s", req.method, req.url)
        try:
            with self.session.request(req.method, req.url, headers=headers,
                                      data=data, stream=True,
                                      allow_redirects=req.follow_redirect,
                                      timeout=self.timeout) as response:
                handler = ReplyHandler(reply, req.expected_status, req.sink,
                                       response)
                for chunk in response.iter_content(DEFAULT_CHUNK_SIZE):
                    if not handler.feed(chunk):
                        break
                if reply.client_error is not None:
                    raise ClientSideError(reply.client_error)
                if not reply.status and not handler.capture_status():
                    raise ClientSideError(reply.client_error)
                if not req.follow_redirect and response.is_redirect:
                    reply.redirect_url = urljoin(response.url,
                                                 response.headers['location'])
        except requests.exceptions.RequestException as e:
            if reply.client_error is not None:
                raise ClientSideError(reply.client_error)
            raise TransportError(str(e) or type(e).__name__)
        except WebHDFSError:
            raise
        except (IOError, OSError, ValueError, TypeError):
            if reply.client_error is None:
                raise
            raise ClientSideError(reply.client_error)
        logger.debug("%s %s -> %s", req.method, req.url, reply.status)

        if reply.status != req.expected_status:
            error = parse_remote_error(reply.body)
            if error is not None:
                raise error
            raise UnexpectedStatusError(reply.status, reply.body)
        return reply
