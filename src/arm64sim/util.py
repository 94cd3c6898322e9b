#
#  arm64sim | arm64sim
#  util.py
#
#  This file contains miscellaneous utilities used around arm64sim
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
import json
import sys
from collections import namedtuple
from importlib import metadata

from pygments import highlight
from pygments.formatters.terminal import TerminalFormatter
from pygments.lexers.data import JsonLexer

from simlib.log import log, LogLevel, print_err

try:
    ARM64SIM_VERSION = metadata.version('arm64sim')
except metadata.PackageNotFoundError:
    ARM64SIM_VERSION = '1.0.0'

OUT_IS_TTY = sys.stdout.isatty()

os_version = namedtuple("os_version", ["x", "y", "z"])


class opts:
    DISABLE_COLOR = False


def version_output():
    print(f'arm64sim v{ARM64SIM_VERSION}')


def encode_version(x: int, y: int = 0, z: int = 0) -> int:
    """
    Pack a version into the xxxx.yy.zz nibble layout used by LC_BUILD_VERSION / LC_VERSION_MIN_*

    :param x: major
    :param y: minor
    :param z: patch
    :return: encoded 32 bit version
    """
    return x << 16 | y << 8 | z


def decode_version(value: int) -> os_version:
    return os_version(x=(value >> 16) & 0xFFFF, y=(value >> 8) & 0xFF, z=value & 0xFF)


def version_str(value: int) -> str:
    version = decode_version(value)
    return f'{version.x}.{version.y}.{version.z}'


def highlight_json(input):
    if opts.DISABLE_COLOR or not OUT_IS_TTY:
        return input
    formatter = TerminalFormatter()
    return highlight(input, JsonLexer(), formatter)


def dump_json(data) -> str:
    return highlight_json(json.dumps(data, indent=4))
