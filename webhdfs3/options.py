# -*- coding: utf-8 -*-
"""
Per-operation query options

Each option set accumulates named parameters through chained setters and is
encoded once, right after ``op=...`` in the request URL.

>>> WriteOptions().set_overwrite(True).set_replication(2).to_query_string()
'&overwrite=true&replication=2'
"""


def encode_options(options):
    """ Query-string suffix ``&name=value...`` for a name -> value mapping

    Values are emitted verbatim, so they must already be safe for direct
    inclusion in a URL. The leading ``&`` relies on ``op=`` preceding the
    options in the query.
    """
    return ''.join('&%s=%s' % (name, value) for name, value in options.items())


def _stringify(value):
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)


def _octal(value):
    if isinstance(value, int) and not isinstance(value, bool):
        return '%o' % value
    return str(value)


class OptionSet(object):
    """ Ordered set of query options; a later ``set`` of a name wins """

    def __init__(self, **kwargs):
        self.options = {}
        for name, value in kwargs.items():
            self.set(name, value)

    def set(self, name, value):
        self.options[name] = _stringify(value)
        return self

    def to_query_string(self):
        return encode_options(self.options)

    def __iter__(self):
        return iter(self.options.items())

    def __len__(self):
        return len(self.options)

    def __eq__(self, other):
        return (type(self) is type(other) and
                list(self.options.items()) == list(other.options.items()))

    def __ne__(self, other):
        return not self == other

    def __repr__(self):
        return '%s(%s)' % (type(self).__name__,
                           ', '.join('%s=%r' % kv for kv in self))


class WriteOptions(OptionSet):
    """ Options for ``CREATE``

    Examples
    --------
    >>> WriteOptions().set_overwrite(True).set_permission(0o644)
    WriteOptions(overwrite='true', permission='644')
    """

    def set_overwrite(self, overwrite):
        return self.set('overwrite', bool(overwrite))

    def set_block_size(self, block_size):
        return self.set('blocksize', int(block_size))

    def set_replication(self, replication):
        return self.set('replication', int(replication))

    def set_permission(self, permission):
        """ Permission as an int mode (``0o755``) or octal digit string """
        return self.set('permission', _octal(permission))

    def set_buffer_size(self, buffer_size):
        return self.set('buffersize', int(buffer_size))


class AppendOptions(OptionSet):
    """ Options for ``APPEND`` """

    def set_buffer_size(self, buffer_size):
        return self.set('buffersize', int(buffer_size))


class ReadOptions(OptionSet):
    """ Options for ``OPEN``; ``offset`` and ``length`` select a byte range """

    def set_offset(self, offset):
        return self.set('offset', int(offset))

    def set_length(self, length):
        return self.set('length', int(length))

    def set_buffer_size(self, buffer_size):
        return self.set('buffersize', int(buffer_size))


class MakeDirOptions(OptionSet):

    def set_permission(self, permission):
        return self.set('permission', _octal(permission))


class RemoveOptions(OptionSet):

    def set_recursive(self, recursive):
        return self.set('recursive', bool(recursive))


def to_query_string(options):
    """ Encode an option set, a plain mapping, or ``None`` """
    if options is None:
        return ''
    if isinstance(options, OptionSet):
        return options.to_query_string()
    return encode_options(dict((name, _stringify(value))
                               for name, value in options.items()))
