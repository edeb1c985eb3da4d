from .conf import conf, ClientConfig
from .core import WebHDFileSystem, FileStatus, FILE, DIRECTORY
from .exceptions import (WebHDFSError, TransportError, ClientSideError,
                         ProtocolError, RemoteError, UnexpectedStatusError,
                         VerificationError)
from .options import (WriteOptions, AppendOptions, ReadOptions,
                      MakeDirOptions, RemoveOptions)

__version__ = '0.1.0'
# flake8: noqa
