"Small helpers shared across the package"

import json
import os
import shutil
import tempfile
from contextlib import contextmanager


class MyNone(object):
    """ Sentinel for "argument not given" / "could not decode"

    Distinct from ``None``, which is a legitimate value for some parameters
    (e.g., ``port=None``) and a legitimate JSON document (``null``).
    """
    def __repr__(self):
        return '<MyNone>'


MyNone = MyNone()


def ensure_string(s):
    """ Give str for str or bytes input, pass ``None`` through """
    if isinstance(s, (bytes, bytearray)):
        return bytes(s).decode('utf-8', 'replace')
    return s


def try_parse_json(text):
    """ Parse JSON text, returning ``MyNone`` on any failure

    >>> try_parse_json(b'{"boolean": true}')
    {'boolean': True}
    >>> try_parse_json(b'not json') is MyNone
    True
    """
    try:
        return json.loads(ensure_string(text))
    except (TypeError, ValueError):
        return MyNone


@contextmanager
def tmpfile(extension=''):
    """ Path to a fresh temporary file, removed on exit """
    extension = '.' + extension.lstrip('.') if extension else ''
    handle, filename = tempfile.mkstemp(extension)
    os.close(handle)
    os.remove(filename)

    try:
        yield filename
    finally:
        if os.path.exists(filename):
            if os.path.isdir(filename):
                shutil.rmtree(filename)
            else:
                os.remove(filename)
