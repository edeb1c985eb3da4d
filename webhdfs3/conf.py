import os
import re
import warnings
from collections import namedtuple

# standard defaults
DEFAULT_HOST = 'localhost'
DEFAULT_PORT = 50070
conf_defaults = {'host': DEFAULT_HOST, 'port': DEFAULT_PORT}
conf = conf_defaults.copy()


class ClientConfig(namedtuple('ClientConfig', ['connect_timeout',
                                               'transfer_timeout', 'user'])):
    """ Per-client settings, fixed at construction

    A timeout of 0 or None means "use the transport default".
    """
    __slots__ = ()

    def __new__(cls, connect_timeout=0, transfer_timeout=0, user=None):
        return super(ClientConfig, cls).__new__(cls, connect_timeout,
                                                transfer_timeout, user)

    @classmethod
    def from_conf(cls, c):
        return cls(connect_timeout=int(c.get('connect_timeout') or 0),
                   transfer_timeout=int(c.get('transfer_timeout') or 0),
                   user=c.get('user') or None)


def _split_address(text):
    host, _, port = text.partition(':')
    return host, (int(port) if port else None)


def hdfs_conf(confd, more_files=None):
    """ Load HDFS config from default locations.

    Parameters
    ----------
    confd: str
        Directory location to search in
    more_files: list of str or None
        If given, additional filenames to query
    """
    files = ['core-site.xml', 'hdfs-site.xml']
    if more_files:
        files.extend(more_files)
    c = {}
    for afile in files:
        try:
            c.update(conf_to_dict(os.sep.join([confd, afile])))
        except FileNotFoundError:
            pass
    if not c:
        # no config files here
        return
    if 'fs.defaultFS' in c and c['fs.defaultFS'].startswith('hdfs://'):
        # only the host is useful: this port is the RPC one
        host = c['fs.defaultFS'][7:].split('/', 1)[0]
        host, _ = _split_address(host)
        if host:
            c['host'] = host
    if 'dfs.namenode.http-address' in c:
        # name node web address
        host, port = _split_address(c['dfs.namenode.http-address'])
        if host and host != '0.0.0.0':
            c['host'] = host
        if port:
            c['port'] = port
    if 'host' not in c:
        # no host found at all, fall back to defaults
        warnings.warn('No host found in HDFS config')
        c['host'] = conf_defaults['host']
    c.setdefault('port', conf_defaults['port'])
    conf.clear()
    conf.update(c)


def reset_to_defaults():
    conf.clear()
    conf.update(conf_defaults)


def conf_to_dict(fname):
    """ Read a hdfs-site.xml style conf file, produces dictionary """
    name_match = re.compile("<name>(.*?)</name>")
    val_match = re.compile("<value>(.*?)</value>")
    conf = {}
    key = None
    with open(fname) as f:
        for line in f:
            name = name_match.search(line)
            if name:
                key = name.groups()[0]
            val = val_match.search(line)
            if val and key is not None:
                conf[key] = val.groups()[0]
    return conf


def guess_config():
    """ Look for config files in common places """
    d = None
    if 'WEBHDFS_CONF' in os.environ:
        if os.path.exists(os.environ['WEBHDFS_CONF']):
            fdir, fn = os.path.split(os.environ['WEBHDFS_CONF'])
            hdfs_conf(fdir, more_files=[fn])
            _user_from_env()
            return
        os.environ.pop('WEBHDFS_CONF', None)
    if 'HADOOP_CONF_DIR' in os.environ:
        d = os.environ['HADOOP_CONF_DIR']
    elif 'HADOOP_INSTALL' in os.environ:
        d = os.environ['HADOOP_INSTALL'] + '/hadoop/conf'
    if d is None:
        # list of potential typical system locations
        for loc in ['/etc/hadoop/conf']:
            if os.path.exists(loc):
                fns = os.listdir(loc)
                if 'hdfs-site.xml' in fns:
                    d = loc
                    break
    if d is None:
        # fallback: local dir
        d = os.getcwd()
    hdfs_conf(d)
    _user_from_env()


def _user_from_env():
    if os.environ.get('HADOOP_USER_NAME'):
        conf['user'] = os.environ['HADOOP_USER_NAME']


guess_config()
