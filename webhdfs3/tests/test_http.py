import io
import threading

import pytest
import requests
import responses

from webhdfs3 import http
from webhdfs3.http import (HttpClient, Request, Reply, ReplyHandler,
                           iter_source, parse_remote_error, init_transport)
from webhdfs3.exceptions import (WebHDFSError, TransportError,
                                 ClientSideError, RemoteError,
                                 UnexpectedStatusError)

URL = 'http://nn:50070/webhdfs/v1/tmp/f?op=OPEN'
ENVELOPE = (b'{"RemoteException": {"exception": "FileNotFoundException",'
            b' "javaClassName": "java.io.FileNotFoundException",'
            b' "message": "File does not exist: /tmp/f"}}')


def receiver(received, status=201):
    """ Callback draining the streamed body while the exchange is open """
    def callback(request):
        received.append(b''.join(request.body))
        return status, {}, b''
    return callback


@pytest.fixture
def client(rsps):
    c = HttpClient()
    yield c
    c.close()


class BrokenSink(object):
    def write(self, data):
        raise IOError('No space left on device')


def test_init_transport_runs_once(monkeypatch):
    monkeypatch.setattr(http, '_initialized', False)
    monkeypatch.setattr(http, 'USER_AGENT', None)
    calls = []
    original = requests.utils.default_user_agent

    def counting():
        calls.append(1)
        return original()

    monkeypatch.setattr(requests.utils, 'default_user_agent', counting)
    threads = [threading.Thread(target=init_transport) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    init_transport()
    assert len(calls) == 1
    assert http.USER_AGENT.startswith('webhdfs3')


def test_get_to_sink(client, rsps):
    rsps.add(responses.GET, URL, body=b'hello world', status=200)
    sink = io.BytesIO()
    reply = client.make(Request('GET', URL, 200, sink=sink))
    assert isinstance(reply, Reply)
    assert reply.status == 200
    assert sink.getvalue() == b'hello world'
    assert reply.body == b''
    assert reply.client_error is None
    assert 'Expect' not in rsps.calls[0].request.headers


def test_put_without_body(client, rsps):
    url = 'http://nn:50070/webhdfs/v1/d?op=MKDIRS'
    rsps.add(responses.PUT, url, body=b'{"boolean":true}', status=200)
    client.make(Request('PUT', url, 200))
    sent = rsps.calls[0].request
    assert sent.method == 'PUT'
    assert sent.headers['Content-Length'] == '0'
    assert 'Transfer-Encoding' not in sent.headers
    assert 'Expect' not in sent.headers


def test_put_streams_source_chunked(client, rsps):
    url = 'http://dn:50075/webhdfs/v1/tmp/f?op=CREATE'
    received = []
    rsps.add_callback(responses.PUT, url, callback=receiver(received))
    data = b'x' * (3 * http.DEFAULT_CHUNK_SIZE + 5)
    with io.BytesIO(data) as source:
        client.make(Request('PUT', url, 201, source=source))
    assert received == [data]
    sent = rsps.calls[0].request
    assert sent.headers['Transfer-Encoding'] == 'chunked'


class BrokenSource(object):
    def read(self, size):
        raise IOError('disk read failed')


def test_broken_source(client, rsps):
    url = 'http://dn:50075/webhdfs/v1/tmp/f?op=CREATE'
    rsps.add_callback(responses.PUT, url, callback=receiver([]))
    with pytest.raises(ClientSideError) as ctx:
        client.make(Request('PUT', url, 201, source=BrokenSource()))
    assert "can't read from data source: disk read failed" in str(ctx.value)


def test_broken_source_wrapped_by_transport(client, rsps):
    url = 'http://dn:50075/webhdfs/v1/tmp/f?op=CREATE'

    def callback(request):
        try:
            b''.join(request.body)
        except IOError as e:
            raise requests.exceptions.ConnectionError(
                ('Connection aborted.', e))
        return 201, {}, b''

    rsps.add_callback(responses.PUT, url, callback=callback)
    with pytest.raises(ClientSideError) as ctx:
        client.make(Request('PUT', url, 201, source=BrokenSource()))
    assert "can't read from data source" in str(ctx.value)


def test_text_sink(client, rsps):
    rsps.add(responses.GET, URL, body=b'hello', status=200)
    with pytest.raises(ClientSideError) as ctx:
        client.make(Request('GET', URL, 200, sink=io.StringIO()))
    assert "can't write to data sink" in str(ctx.value)


def test_delete(client, rsps):
    url = 'http://nn:50070/webhdfs/v1/tmp/f?op=DELETE'
    rsps.add(responses.DELETE, url, body=b'{"boolean":true}')
    client.make(Request('DELETE', url, 200))
    assert rsps.calls[0].request.method == 'DELETE'
    assert 'Transfer-Encoding' not in rsps.calls[0].request.headers


def test_post_unsupported(client, rsps):
    with pytest.raises(WebHDFSError) as ctx:
        client.make(Request('POST', URL, 200))
    assert 'POST requests not implemented' in str(ctx.value)
    assert len(rsps.calls) == 0


def test_redirect_not_followed(client, rsps):
    create = 'http://nn:50070/webhdfs/v1/tmp/f?op=CREATE'
    target = ('http://dn:50075/webhdfs/v1/tmp/f'
              '?op=CREATE&namenoderpcaddress=nn:8020')
    rsps.add(responses.PUT, create, status=307,
             headers={'Location': target})
    reply = client.make(Request('PUT', create, 307))
    assert reply.status == 307
    assert reply.redirect_url == target
    assert len(rsps.calls) == 1


def test_relative_redirect_is_resolved(client, rsps):
    create = 'http://nn:50070/webhdfs/v1/tmp/f?op=CREATE'
    rsps.add(responses.PUT, create, status=307,
             headers={'Location': '/elsewhere?op=CREATE'})
    reply = client.make(Request('PUT', create, 307))
    assert reply.redirect_url == 'http://nn:50070/elsewhere?op=CREATE'


def test_redirect_followed(client, rsps):
    target = 'http://dn:50075/webhdfs/v1/tmp/f?op=OPEN&offset=0'
    rsps.add(responses.GET, URL, status=307, headers={'Location': target})
    rsps.add(responses.GET, target, body=b'data', status=200)
    sink = io.BytesIO()
    reply = client.make(Request('GET', URL, 200, follow_redirect=True,
                                sink=sink))
    assert reply.status == 200
    assert reply.redirect_url is None
    assert sink.getvalue() == b'data'
    assert [c.request.url for c in rsps.calls] == [URL, target]


def test_remote_error(client, rsps):
    rsps.add(responses.GET, URL, body=ENVELOPE, status=404)
    sink = io.BytesIO()
    with pytest.raises(RemoteError) as ctx:
        client.make(Request('GET', URL, 200, sink=sink))
    assert ctx.value.exception == 'FileNotFoundException'
    assert str(ctx.value) == ('WebHDFS client error: remote error: '
                              'File does not exist: /tmp/f')
    # unexpected bodies never reach the caller's sink
    assert sink.getvalue() == b''


def test_unexpected_status_with_body(client, rsps):
    rsps.add(responses.GET, URL, body=b'Internal failure', status=500)
    with pytest.raises(UnexpectedStatusError) as ctx:
        client.make(Request('GET', URL, 200))
    assert ctx.value.status == 500
    assert ctx.value.body == b'Internal failure'
    assert str(ctx.value).endswith(
        'unexpected server response code: 500 (Internal failure)')


def test_unexpected_status_without_body(client, rsps):
    rsps.add(responses.PUT, URL, status=200)
    with pytest.raises(UnexpectedStatusError) as ctx:
        client.make(Request('PUT', URL, 307))
    assert str(ctx.value).endswith('unexpected server response code: 200')


def test_transport_error(client, rsps):
    rsps.add(responses.GET, URL,
             body=requests.exceptions.ConnectionError('Connection refused'))
    with pytest.raises(TransportError) as ctx:
        client.make(Request('GET', URL, 200))
    assert 'Connection refused' in str(ctx.value)


def test_sink_failure_is_client_side(client, rsps):
    rsps.add(responses.GET, URL, body=b'some data', status=200)
    with pytest.raises(ClientSideError) as ctx:
        client.make(Request('GET', URL, 200, sink=BrokenSink()))
    assert "can't write to data sink" in str(ctx.value)
    assert 'No space left on device' in str(ctx.value)
    assert not isinstance(ctx.value, TransportError)


def test_timeouts(rsps):
    assert HttpClient().timeout == (None, None)
    assert HttpClient(0, 0).timeout == (None, None)
    assert HttpClient(10, 6000).timeout == (10, 6000)


def test_status_capture_failure():
    class Response(object):
        status_code = None

    reply = Reply()
    handler = ReplyHandler(reply, 200, io.BytesIO(), Response())
    assert handler.feed(b'abc') is False
    assert reply.client_error.startswith("can't read response status")


def test_handler_routes_chunks():
    class Response(object):
        status_code = 404

    reply = Reply()
    sink = io.BytesIO()
    handler = ReplyHandler(reply, 200, sink, Response())
    assert handler.feed(b'ab')
    assert handler.feed(b'cd')
    assert reply.status == 404
    assert reply.body == b'abcd'
    assert sink.getvalue() == b''


def test_iter_source_stops_on_empty_read():
    class Source(object):
        def __init__(self):
            self.reads = [b'ab', b'c', b'', b'never']

        def read(self, n):
            return self.reads.pop(0)

    assert list(iter_source(Source(), 10)) == [b'ab', b'c']


@pytest.mark.parametrize('body', [
    b'', b'not json', b'{"boolean": false}', b'[1, 2]',
])
def test_parse_remote_error_rejects(body):
    assert parse_remote_error(body) is None


def test_parse_remote_error_defaults():
    e = parse_remote_error(b'{"RemoteException": {}}')
    assert e.exception == 'Unknown'
    assert e.remote_message == ''
