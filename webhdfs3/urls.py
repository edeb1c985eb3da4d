"Building WebHDFS operation URLs"

from urllib.parse import quote

from .options import to_query_string

WEBHDFS_PREFIX = '/webhdfs/v1'


def quote_path(path):
    """ Percent-encode a remote path, leaving ``/`` separators intact

    Alphanumerics and ``-_.~/`` pass through; every other byte of the UTF-8
    encoded path becomes ``%XX`` with uppercase hex.

    >>> quote_path('/tmp/my file.txt')
    '/tmp/my%20file.txt'
    """
    return quote(path, safe='/')


class UrlBuilder(object):
    """ Operation URLs for one WebHDFS endpoint

    >>> UrlBuilder('nn', 50070, 'alice').build_url('/tmp', 'LISTSTATUS')
    'http://nn:50070/webhdfs/v1/tmp?user.name=alice&op=LISTSTATUS'
    """

    def __init__(self, host, port, user=None):
        self.host = host
        self.port = port
        self.user = user or None
        self.prefix = 'http://%s:%s%s' % (host, port, WEBHDFS_PREFIX)

    def build_url(self, path, operation, options=None):
        url = self.prefix + quote_path(path) + '?'
        if self.user:
            url += 'user.name=%s&' % self.user
        url += 'op=' + operation
        # options always follow ``op=``, which supplies the query's first pair
        return url + to_query_string(options)

    def __repr__(self):
        return 'UrlBuilder(%r)' % self.prefix
