import pytest
import responses

from webhdfs3 import WebHDFileSystem
from webhdfs3.conf import reset_to_defaults

BASE = 'http://nn:50070/webhdfs/v1'
DATANODE = 'http://dn:50075/webhdfs/v1'


@pytest.fixture
def rsps():
    with responses.RequestsMock() as r:
        yield r


@pytest.fixture
def hdfs(rsps):
    hdfs = WebHDFileSystem(host='nn', port=50070, user='alice',
                           autoconf=False)
    yield hdfs
    hdfs.close()


@pytest.fixture
def anonymous(rsps):
    hdfs = WebHDFileSystem(host='nn', port=50070, autoconf=False)
    yield hdfs
    hdfs.close()


@pytest.fixture
def default_conf():
    reset_to_defaults()
    yield
    reset_to_defaults()
