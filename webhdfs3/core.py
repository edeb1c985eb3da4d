# -*- coding: utf-8 -*-
"Main module defining the filesystem client and listing records"
import io
import logging
from collections import namedtuple

from .conf import conf, ClientConfig, DEFAULT_PORT
from .exceptions import ProtocolError, VerificationError
from .http import HttpClient, Request, GET, PUT, DELETE
from .options import WriteOptions
from .urls import UrlBuilder
from .utils import MyNone, try_parse_json, ensure_string

logger = logging.getLogger(__name__)

FILE = 'FILE'
DIRECTORY = 'DIRECTORY'

TRUE_REPLY = b'{"boolean":true}'

_FIELDS = [('accessTime', 'access_time', int),
           ('blockSize', 'block_size', int),
           ('group', 'group', str),
           ('length', 'length', int),
           ('modificationTime', 'modification_time', int),
           ('owner', 'owner', str),
           ('pathSuffix', 'path_suffix', str),
           ('permission', 'permission', str),
           ('replication', 'replication', int)]


class FileStatus(namedtuple('FileStatus', [f[1] for f in _FIELDS] + ['type'])):
    """ Metadata of one directory entry, as returned by ``LISTSTATUS`` """
    __slots__ = ()

    @classmethod
    def from_json(cls, value):
        """ Map a JSON ``FileStatus`` object field by field

        Missing or mistyped fields take the zero value of their type.
        """
        kwargs = {}
        for key, name, typ in _FIELDS:
            raw = value.get(key)
            if raw is None:
                kwargs[name] = typ()
                continue
            try:
                kwargs[name] = typ(raw)
            except (TypeError, ValueError):
                kwargs[name] = typ()
        kwargs['type'] = FILE if value.get('type') == FILE else DIRECTORY
        return cls(**kwargs)

    @property
    def kind(self):
        return 'file' if self.type == FILE else 'directory'

    def to_dict(self):
        """ Dict of file properties, as listed by ``ls(path, detail=True)`` """
        return {'name': self.path_suffix,
                'kind': self.kind,
                'size': self.length,
                'owner': self.owner,
                'group': self.group,
                'permissions': self.permission,
                'replication': self.replication,
                'block_size': self.block_size,
                'last_mod': self.modification_time,
                'last_access': self.access_time}


def verify_boolean_reply(body):
    """ Whether a reply body is exactly ``{"boolean":true}`` """
    return bytes(body) == TRUE_REPLY


def decode_listing(body):
    """ Decode a ``LISTSTATUS`` reply into a list of :class:`FileStatus`

    Raises VerificationError if the body is not JSON at all; JSON without the
    expected ``FileStatuses.FileStatus`` array gives an empty list.
    """
    value = try_parse_json(body)
    if value is MyNone:
        raise VerificationError("can't parse directory listing")
    try:
        items = value['FileStatuses']['FileStatus']
    except (KeyError, TypeError):
        return []
    if not isinstance(items, list):
        return []
    return [FileStatus.from_json(item) for item in items
            if isinstance(item, dict)]


class WebHDFileSystem(object):
    """ Connection to a WebHDFS endpoint

    >>> hdfs = WebHDFileSystem(host='namenode', port=50070, user='alice')  # doctest: +SKIP
    >>> hdfs.ls('/tmp')  # doctest: +SKIP
    ['a.txt', 'data']

    Not safe for concurrent use from several threads; create one instance
    per thread instead.
    """

    def __init__(self, host=MyNone, port=MyNone, user=MyNone, autoconf=True,
                 session=None, **kwargs):
        """
        Parameters
        ----------
        host: str; port: int; user: str
            Overrides which take precedence over information in conf files
            and other passed parameters
        autoconf: bool (True)
            Whether to use the configuration found in the conf module as
            the set of defaults
        session: requests.Session or None
            Transport handle to take ownership of; mostly useful for tests
        kwargs: key/value
            Further override parameters, applied after the default conf;
            the most typical things to set are:
            connect_timeout : int (0)
                seconds to wait for a connection, 0 for transport default
            transfer_timeout : int (0)
                seconds to wait on each read of the response or write of the
                body, 0 for transport default; this bounds stalls between
                chunks, not the duration of the whole transfer
        """
        self.conf = conf.copy() if autoconf else {}
        self.conf.update(kwargs)
        if host is not MyNone:
            self.conf['host'] = host
        if port is not MyNone:
            self.conf['port'] = port
        if user is not MyNone:
            self.conf['user'] = user
        if not self.conf.get('host'):
            raise ValueError('No WebHDFS host given')
        self.conf.setdefault('port', DEFAULT_PORT)

        self.config = ClientConfig.from_conf(self.conf)
        self._urls = UrlBuilder(self.host, self.port, self.config.user)
        self._http = HttpClient(self.config.connect_timeout,
                                self.config.transfer_timeout, session=session)
        logger.debug("Client for %s", self._urls.prefix)

    @property
    def host(self):
        return self.conf.get('host', '')

    @property
    def port(self):
        return self.conf.get('port', '')

    @property
    def user(self):
        return self.config.user

    def __repr__(self):
        return 'webhdfs://%s:%s' % (self.host, self.port)

    def close(self):
        """ Release the underlying HTTP session """
        self._http.close()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    def write_file(self, source, path, options=None):
        """ Write the contents of ``source`` to a file at ``path``

        Parameters
        ----------
        source: binary file-like
            Read sequentially until a read returns no bytes
        path: str
            Remote file path
        options: WriteOptions or None
            e.g. ``WriteOptions().set_overwrite(True)``
        """
        reply = self._http.make(Request(
            PUT, self._urls.build_url(path, 'CREATE', options), 307))
        if not reply.redirect_url:
            raise ProtocolError("protocol error: no redirection to data node")
        logger.debug("Writing %s via %s", path, reply.redirect_url)
        self._http.make(Request(PUT, reply.redirect_url, 201, source=source))

    def read_file(self, path, sink, options=None):
        """ Stream the file at ``path`` into the writable binary ``sink``

        Parameters
        ----------
        path: str
            Remote file path
        sink: binary file-like
            Receives the bytes as they arrive
        options: ReadOptions or None
            e.g. ``ReadOptions().set_offset(100).set_length(10)``
        """
        url = self._urls.build_url(path, 'OPEN', options)
        self._http.make(Request(GET, url, 200, follow_redirect=True,
                                sink=sink))

    def make_dir(self, path, options=None):
        """ Make directory at path, including missing parents """
        url = self._urls.build_url(path, 'MKDIRS', options)
        body = self._verified(PUT, url)
        if not verify_boolean_reply(body):
            raise VerificationError("can't create dir %s, reply: %s"
                                    % (path, ensure_string(body)))

    def list_dir(self, path):
        """ List directory at path as a list of :class:`FileStatus` """
        body = self._verified(GET, self._urls.build_url(path, 'LISTSTATUS'),
                              follow_redirect=True)
        return decode_listing(body)

    def remove(self, path, options=None):
        """ Remove path; use ``RemoveOptions().set_recursive(True)`` for
        non-empty directories """
        body = self._verified(DELETE, self._urls.build_url(path, 'DELETE',
                                                           options))
        if not verify_boolean_reply(body):
            raise VerificationError("can't delete %s" % path)

    def rename(self, path, new_path):
        """ Move path to new_path

        ``new_path`` goes into the query unescaped, so it must be safe for
        direct inclusion in a URL.
        """
        url = self._urls.build_url(path, 'RENAME') + '&destination=' + new_path
        body = self._verified(PUT, url)
        if not verify_boolean_reply(body):
            raise VerificationError("can't rename %s" % path)

    def _verified(self, method, url, follow_redirect=False):
        sink = io.BytesIO()
        self._http.make(Request(method, url, 200,
                                follow_redirect=follow_redirect, sink=sink))
        return sink.getvalue()

    def ls(self, path, detail=False):
        """ List files at path

        Parameters
        ----------
        path : string
            location at which to list files
        detail : bool (=False)
            if True, each list item is a dict of file properties;
            otherwise, returns list of entry names
        """
        out = self.list_dir(path)
        if detail:
            return [o.to_dict() for o in out]
        return [o.path_suffix for o in out]

    def cat(self, path):
        """ Return contents of file """
        out = io.BytesIO()
        self.read_file(path, out)
        return out.getvalue()

    def get(self, hdfs_path, local_path, options=None):
        """ Copy HDFS file to local """
        with open(local_path, 'wb') as f:
            self.read_file(hdfs_path, f, options)

    def put(self, filename, path, overwrite=True, replication=0, block_size=0):
        """ Copy local file to path in HDFS """
        options = WriteOptions().set_overwrite(overwrite)
        if replication:
            options.set_replication(replication)
        if block_size:
            options.set_block_size(block_size)
        with open(filename, 'rb') as source:
            self.write_file(source, path, options)
