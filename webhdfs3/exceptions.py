"""Exception classes for webhdfs3.

Every failure of a public operation is raised as one of these; nothing is
retried or swallowed inside the client.
"""


class WebHDFSError(IOError):
    """Base exception for client operations."""

    prefix = 'WebHDFS client error: '

    def __init__(self, message):
        super(WebHDFSError, self).__init__(self.prefix + message)
        self.message = message


class TransportError(WebHDFSError):
    """The connection or transfer failed below the HTTP level."""


class ClientSideError(WebHDFSError):
    """A fault inside the client's own data handling, e.g. a broken sink."""


class ProtocolError(WebHDFSError):
    """The server stepped outside the expected exchange for an operation."""


class RemoteError(WebHDFSError):
    """The server reported an application error in its JSON envelope."""

    def __init__(self, message, exception='Unknown'):
        super(RemoteError, self).__init__('remote error: ' + message)
        self.exception = exception
        self.remote_message = message


class UnexpectedStatusError(WebHDFSError):
    """Unexpected HTTP status with a body that is not an error envelope."""

    def __init__(self, status, body=b''):
        message = 'unexpected server response code: %s' % status
        if body:
            message += ' (%s)' % body.decode('utf-8', 'replace')
        super(UnexpectedStatusError, self).__init__(message)
        self.status = status
        self.body = bytes(body)


class VerificationError(WebHDFSError):
    """The exchange succeeded but the reply body did not verify."""
