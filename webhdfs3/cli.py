#! /usr/bin/env python
# -*- coding: utf-8 -*-
"""
Command line access to a WebHDFS service

Usage example: webhdfs3 cat hdfs://namenode/tmp/webhdfs-test.txt
"""
import argparse
import datetime
import logging
import re
import sys

from .conf import DEFAULT_PORT
from .core import WebHDFileSystem, FILE
from .exceptions import WebHDFSError
from .options import WriteOptions

logger = logging.getLogger('webhdfs3')

REMOTE_PATH_PATTERN = re.compile(r'^hdfs://(.*?)(/.*?)$')

USAGE = """Usage: %(prog)s COMMAND OPTIONS
\t%(prog)s cat <hdfs path>
\t%(prog)s cp <local file> <hdfs file path>
\t%(prog)s cp <hdfs file path> <local file>
\t%(prog)s rm <hdfs path>
\t%(prog)s ls <hdfs dir path>
\t%(prog)s mkdir <hdfs dir path>
\t%(prog)s rename <hdfs path> <new path>
\t  <new path> is a bare path or hdfs://host/path; only its path is used
Example:
\t%(prog)s cat hdfs://namenode/tmp/webhdfs-test.txt
"""

commands = {'cat': 1, 'cp': 2, 'rm': 1, 'ls': 1, 'mkdir': 1, 'rename': 2}


class UsageError(Exception):
    """Command line arguments could not be interpreted."""


def parse_remote_path(path):
    """ Split ``hdfs://<host><path>`` into ``(host, path)``, or ``None`` """
    match = REMOTE_PATH_PATTERN.match(path)
    if match:
        return match.group(1), match.group(2)
    return None


def remote_path(command, path):
    parsed = parse_remote_path(path)
    if parsed is None:
        raise UsageError('%s command remote path argument has wrong format'
                         % command)
    return parsed


def format_entry(status):
    """ One ``ls`` output line: name, kind, owner, modification time """
    name = status.path_suffix
    if len(name) > 16:
        name = name[:16] + '...'
    kind = 'file' if status.type == FILE else 'dir'
    mtime = datetime.datetime.fromtimestamp(status.modification_time // 1000,
                                            tz=datetime.timezone.utc)
    return '%-20s%-10s%-20s%-20s' % (name, kind, status.owner,
                                     mtime.strftime('%Y-%b-%d %H:%M:%S'))


def make_parser():
    parser = argparse.ArgumentParser(
        prog='webhdfs3', description='WebHDFS commands', usage=USAGE)
    parser.add_argument("command", help="filesystem command to run")
    parser.add_argument("par1", help="", nargs="?", default=None)
    parser.add_argument("par2", help="", nargs="?", default=None)
    parser.add_argument('--port', type=int, default=DEFAULT_PORT,
                        help='WebHDFS service port')
    parser.add_argument('--user', type=str, default='webhdfs-client',
                        help='User name for authentication')
    parser.add_argument('--connect-timeout', type=int, default=10,
                        help='Connection timeout, seconds')
    parser.add_argument('--transfer-timeout', type=int, default=6000,
                        help='Data transfer timeout, seconds')
    parser.add_argument('--verbose', action='store_true',
                        help='Log every HTTP exchange')
    return parser


def run(args, stdout):
    """ Execute one parsed command """
    def client(address):
        host, _, port = address.partition(':')
        return WebHDFileSystem(host=host, port=int(port or args.port),
                               user=args.user, autoconf=False,
                               connect_timeout=args.connect_timeout,
                               transfer_timeout=args.transfer_timeout)

    cmd, par1, par2 = args.command, args.par1, args.par2
    if cmd not in commands or [par1, par2][:commands[cmd]].count(None):
        raise UsageError('Available commands: %s' % sorted(commands))

    if cmd == 'cat':
        host, path = remote_path(cmd, par1)
        logger.info("Printing %s ...", par1)
        with client(host) as fs:
            fs.read_file(path, stdout)
    elif cmd == 'cp':
        src, dest = parse_remote_path(par1), parse_remote_path(par2)
        if src is not None:
            logger.info("Copying %s to %s ...", par1, par2)
            with client(src[0]) as fs:
                fs.get(src[1], par2)
        elif dest is not None:
            logger.info("Copying %s to %s ...", par1, par2)
            with open(par1, 'rb') as source:
                with client(dest[0]) as fs:
                    fs.write_file(source, dest[1],
                                  WriteOptions().set_overwrite(True))
        else:
            remote_path(cmd, par1)
    elif cmd == 'rm':
        host, path = remote_path(cmd, par1)
        logger.info("Removing %s ...", par1)
        with client(host) as fs:
            fs.remove(path)
    elif cmd == 'ls':
        host, path = remote_path(cmd, par1)
        logger.info("%s directory listing:", par1)
        with client(host) as fs:
            for item in fs.list_dir(path):
                stdout.write((format_entry(item) + '\n').encode('utf-8'))
    elif cmd == 'mkdir':
        host, path = remote_path(cmd, par1)
        logger.info("Creating %s directory ...", par1)
        with client(host) as fs:
            fs.make_dir(path)
    elif cmd == 'rename':
        host, path = remote_path(cmd, par1)
        # the target may be given either as a bare path or in hdfs:// form
        new_path = parse_remote_path(par2)
        new_path = new_path[1] if new_path else par2
        logger.info("Renaming %s to %s ...", par1, par2)
        with client(host) as fs:
            fs.rename(path, new_path)


def main(argv=None, stdout=None):
    parser = make_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='[%(asctime)s] %(levelname)s %(message)s')
    if stdout is None:
        stdout = sys.stdout.buffer

    try:
        run(args, stdout)
    except UsageError as e:
        parser.print_usage(sys.stderr)
        logger.error("%s", e)
        return 1
    except (WebHDFSError, OSError, ValueError) as e:
        logger.error("Exception: %s", e)
        return 1
    logger.info("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
