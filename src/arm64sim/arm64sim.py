#
#  arm64sim | arm64sim
#  arm64sim.py
#
#  Outward facing API
#
#  Some of these functions are only a few lines long, but the point is to standardize an outward facing API that
#   allows things to be refactored internally without breaking others' scripts.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

from typing import Union
from os import PathLike

from sim_macho import LOAD_COMMAND, PlatformType
from .assembler import ImageAssembler
from .exceptions import MalformedCommand, WriteFailure
from .macho import ImageReader, MachOImage
from .planner import DeltaPlanner, RewritePlan
from .rewriter import CommandRewriter
from .util import log

DEFAULT_MINOS = 13
DEFAULT_SDK = 13


class RewriteResult:
    """
    :ivar data: the rewritten image
    :ivar plan: what was replaced and by how much everything moved
    :ivar original: the image as read
    """

    def __init__(self, data: bytes, plan: RewritePlan, original: MachOImage):
        self.data = data
        self.plan = plan
        self.original = original

    def serialize(self):
        return {
            'plan': self.plan.serialize(),
            'original_size': len(self.original.raw_bytes()),
            'new_size': len(self.data)
        }


def load_image(data: bytes) -> MachOImage:
    """
    Decode an in-memory image

    :param data: raw thin arm64 Mach-O
    :return: MachOImage
    """
    return ImageReader.read_bytes(data)


def transform_image(image: MachOImage, minos=DEFAULT_MINOS, sdk=DEFAULT_SDK,
                    platform=PlatformType.IOS_SIMULATOR) -> RewriteResult:
    """
    Run plan -> rewrite -> assemble over an already decoded image.

    :param image: decoded image
    :param minos: major minimum OS version for the new LC_BUILD_VERSION
    :param sdk: major SDK version for the new LC_BUILD_VERSION
    :param platform: platform for the new LC_BUILD_VERSION
    :return: RewriteResult
    """
    plan = DeltaPlanner.plan(image.load_commands)
    load_commands = CommandRewriter.rewrite(image.load_commands, plan, minos, sdk, platform)
    data = ImageAssembler.assemble(image.header, load_commands, image.payload)
    return RewriteResult(data, plan, image)


def transform(data: bytes, minos=DEFAULT_MINOS, sdk=DEFAULT_SDK, platform=PlatformType.IOS_SIMULATOR) -> RewriteResult:
    """
    Take a raw image and return it with its version command replaced and every file offset shifted to match.

    :param data: raw thin arm64 Mach-O
    :param minos: major minimum OS version for the new LC_BUILD_VERSION
    :param sdk: major SDK version for the new LC_BUILD_VERSION
    :param platform: platform for the new LC_BUILD_VERSION
    :return: RewriteResult
    """
    return transform_image(load_image(data), minos, sdk, platform)


def verify_image(data: bytes) -> MachOImage:
    """
    Re-read a rewritten image and check it is self consistent.

    This can be used to verify patch code did not damage or improperly modify a MachO.

    :param data: rewritten image
    :return: the decoded image
    :raises: MalformedCommand
    """
    log.info("Verifying MachO Integrity")
    image = load_image(data)

    if image.header.ncmds != len(image.load_commands):
        raise MalformedCommand(f'ncmds is {image.header.ncmds}, {len(image.load_commands)} commands were read')

    if image.header.sizeofcmds != image.load_commands_size:
        raise MalformedCommand(f'sizeofcmds is {image.header.sizeofcmds}, load commands occupy '
                               f'{image.load_commands_size} bytes')

    if image.commands_of_kind(LOAD_COMMAND.VERSION_MIN_IPHONEOS):
        raise MalformedCommand('LC_VERSION_MIN_IPHONEOS is still present')

    if len(image.commands_of_kind(LOAD_COMMAND.BUILD_VERSION)) != 1:
        raise MalformedCommand(f'Expected one LC_BUILD_VERSION, found '
                               f'{len(image.commands_of_kind(LOAD_COMMAND.BUILD_VERSION))}')

    return image


def describe_image(image: MachOImage) -> dict:
    return image.serialize()


def write_image(path: Union[str, PathLike], data: bytes) -> None:
    try:
        with open(path, 'wb') as fp:
            fp.write(data)
    except OSError as ex:
        log.error(f'Writing {path} failed: {ex}')
        raise WriteFailure(f'Cannot write the rewritten image to {path}: {ex.strerror}') from ex


def patch_file(path: Union[str, PathLike], minos=DEFAULT_MINOS, sdk=DEFAULT_SDK, platform=PlatformType.IOS_SIMULATOR,
               output: Union[str, PathLike, None] = None, dry_run=False) -> RewriteResult:
    """
    Rewrite the image at path.

    The full image is assembled and verified in memory before anything is written, so a failure anywhere before the
        write leaves the file on disk untouched.

    :param path: thin arm64 Mach-O to patch
    :param minos: major minimum OS version for the new LC_BUILD_VERSION
    :param sdk: major SDK version for the new LC_BUILD_VERSION
    :param platform: platform for the new LC_BUILD_VERSION
    :param output: write here instead of back to path
    :param dry_run: plan, rewrite and verify, but don't write anything
    :return: RewriteResult
    """
    image = ImageReader.read_path(path)
    log.info(str(image))

    result = transform_image(image, minos, sdk, platform)
    verify_image(result.data)

    if dry_run:
        log.info('Dry run, nothing written')
        return result

    target = output if output is not None else path
    write_image(target, result.data)
    log.info(f'Wrote {len(result.data)} bytes to {target}')

    return result
