#
#  arm64sim | arm64sim
#  arm64sim_script.py
#
#  Command line entry point
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

import sys
from argparse import ArgumentParser

from sim_macho import PlatformType
from arm64sim.arm64sim import patch_file, describe_image, load_image, DEFAULT_MINOS, DEFAULT_SDK
from arm64sim.exceptions import Arm64SimException
from arm64sim.util import log, LogLevel, opts, dump_json, version_output, print_err

PLATFORMS = {
    'iossim': PlatformType.IOS_SIMULATOR,
    'tvossim': PlatformType.TVOS_SIMULATOR,
    'watchossim': PlatformType.WATCHOS_SIMULATOR
}


def parse_major_version(value, default, name):
    """
    Major versions come in as free text. Anything that isn't a non-negative int fitting the 16 bit major field
        falls back to the default.
    """
    if value is None:
        return default
    try:
        version = int(value)
    except ValueError:
        log.warn(f'{name} "{value}" is not a number, using {default}')
        return default
    if not 0 <= version <= 0xFFFF:
        log.warn(f'{name} {version} is out of range, using {default}')
        return default
    return version


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog='arm64sim',
                            description='Rewrite an arm64 Mach-O so it loads on the simulator: replaces '
                                        'LC_VERSION_MIN_IPHONEOS (or LC_BUILD_VERSION) with a new LC_BUILD_VERSION '
                                        'and shifts every file offset to match.')
    parser.add_argument('path', nargs='?', default=None, help='thin arm64 Mach-O to patch, modified in place')
    parser.add_argument('minos', nargs='?', default=None, help=f'major minimum OS version (default {DEFAULT_MINOS})')
    parser.add_argument('sdk', nargs='?', default=None, help=f'major SDK version (default {DEFAULT_SDK})')
    parser.add_argument('-o', '--output', dest='output', default=None,
                        help='write the result here instead of overwriting path')
    parser.add_argument('--platform', dest='platform', choices=list(PLATFORMS.keys()), default='iossim',
                        help='platform written into LC_BUILD_VERSION (default iossim)')
    parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
                        help='rewrite and verify in memory, write nothing')
    parser.add_argument('--info', dest='info', action='store_true',
                        help='print the load commands before and after as JSON')
    parser.add_argument('--no-color', dest='no_color', action='store_true', help='disable highlighted output')
    parser.add_argument('-v', dest='logging_level', type=int, choices=range(-1, 6), default=None,
                        help='log level, 0 (errors) through 5')
    parser.add_argument('--version', dest='get_vers', action='store_true', help='print the version and exit')
    return parser


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.get_vers:
        version_output()
        return 0

    if args.path is None:
        parser.error('the following arguments are required: path')

    if args.logging_level is not None:
        log.LOG_LEVEL = LogLevel(args.logging_level)
    opts.DISABLE_COLOR = args.no_color

    minos = parse_major_version(args.minos, DEFAULT_MINOS, 'minos')
    sdk = parse_major_version(args.sdk, DEFAULT_SDK, 'sdk')

    try:
        result = patch_file(args.path, minos, sdk, PLATFORMS[args.platform], output=args.output,
                            dry_run=args.dry_run)
    except Arm64SimException as ex:
        print_err(f'ERROR - {ex}')
        return 1

    if args.info:
        print(dump_json({
            'result': result.serialize(),
            'before': describe_image(result.original),
            'after': describe_image(load_image(result.data))
        }))

    return 0


if __name__ == '__main__':
    sys.exit(main())
