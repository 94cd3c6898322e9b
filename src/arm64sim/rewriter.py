#
#  arm64sim | arm64sim
#  rewriter.py
#
#  Shifting every file offset the load commands hold, and swapping the version command for a fresh
#    LC_BUILD_VERSION.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

from typing import List

from sim_macho import LOAD_COMMAND, PlatformType
from sim_macho.load_commands import (LoadCommand, SegmentLoadCommand, BuildVersionLoadCommand,
                                     load_command_from_bytes)
from arm64sim.exceptions import OffsetOverflow
from arm64sim.planner import RewritePlan
from arm64sim.util import log, encode_version, version_str


def apply_offset(value: int, delta: int) -> int:
    """
    Move an unsigned file offset/size by delta.

    A shrinking delta larger than the value clamps to 0 rather than wrapping.

    :param value: current (unsigned) field value
    :param delta: signed shift
    :return: new field value, never negative
    """
    if delta < 0:
        magnitude = -delta
        return 0 if magnitude > value else value - magnitude
    return value + delta


def shift_field(struct, field: str, delta: int) -> None:
    """
    apply_offset() on one field of a decoded struct, in place.

    :raises OffsetOverflow: the shifted value doesn't fit the field's width
    """
    old = getattr(struct, field)
    value = apply_offset(old, delta)
    width = struct.field_size(field)
    if value >= 1 << (width * 8):
        log.error(f'{struct.type_name}.{field} {hex(old)} {delta:+} overflows {width} bytes')
        raise OffsetOverflow(f'{field} {hex(old)} moved by {delta:+} does not fit in {width} bytes')
    setattr(struct, field, value)


class CommandRewriter:
    """
    Per-kind rewrite policy:

    * SEGMENT_64: fileoff, filesize, vmsize move. Sections move their offset, and their reloff when it is
        non-zero. Zerofill sections are left alone.
    * SYMTAB: symoff and stroff move.
    * DATA_IN_CODE, LINKER_OPTIMIZATION_HINT: dataoff moves.
    * VERSION_MIN_IPHONEOS, BUILD_VERSION: the first is replaced by a new tool-less LC_BUILD_VERSION, any later
        ones are dropped.
    * anything else: passed through byte-for-byte.

    Input commands are never modified; adjusted commands are re-decoded copies.
    """

    OFFSET_FIELDS = {
        LOAD_COMMAND.SYMTAB: ['symoff', 'stroff'],
        LOAD_COMMAND.DATA_IN_CODE: ['dataoff'],
        LOAD_COMMAND.LINKER_OPTIMIZATION_HINT: ['dataoff']
    }

    SEGMENT_FIELDS = ['fileoff', 'filesize', 'vmsize']

    @classmethod
    def rewrite(cls, load_commands: List[LoadCommand], plan: RewritePlan, minos: int = 13, sdk: int = 13,
                platform: PlatformType = PlatformType.IOS_SIMULATOR) -> List[LoadCommand]:
        """
        Produce the rewritten command list, in the order of load_commands. Same length unless extra version commands
            were dropped.

        :param load_commands: decoded load commands
        :param plan: the delta to apply
        :param minos: major minimum OS version; minor and patch are always 0
        :param sdk: major SDK version; minor and patch are always 0
        :param platform: platform for the new LC_BUILD_VERSION
        :return: rewritten load commands
        """
        delta = plan.delta

        log.info(f'Rewriting {len(load_commands)} Load Commands, delta {delta:+}')

        rewritten = []
        replaced = False
        for lc in load_commands:
            kind = lc.kind

            if kind in [LOAD_COMMAND.VERSION_MIN_IPHONEOS, LOAD_COMMAND.BUILD_VERSION] and replaced:
                log.info(f'Dropped extra {kind.name} ({lc.cmdsize} bytes)')

            elif kind in [LOAD_COMMAND.VERSION_MIN_IPHONEOS, LOAD_COMMAND.BUILD_VERSION]:
                new_lc = cls.make_build_version(minos, sdk, platform)
                log.info(f'Replaced {kind.name} ({lc.cmdsize} bytes) with BUILD_VERSION ({new_lc.cmdsize} bytes) '
                         f'{platform.name} minos {version_str(new_lc.cmd.minos)} sdk {version_str(new_lc.cmd.sdk)}')
                rewritten.append(new_lc)
                replaced = True

            elif delta == 0:
                rewritten.append(lc)

            elif kind == LOAD_COMMAND.SEGMENT_64:
                rewritten.append(cls.update_segment(lc, delta))

            elif kind in cls.OFFSET_FIELDS:
                rewritten.append(cls.update_offsets(lc, cls.OFFSET_FIELDS[kind], delta))

            else:
                rewritten.append(lc)

        return rewritten

    @staticmethod
    def make_build_version(minos: int, sdk: int, platform: PlatformType = PlatformType.IOS_SIMULATOR) \
            -> BuildVersionLoadCommand:
        return BuildVersionLoadCommand.from_values(platform, encode_version(minos), encode_version(sdk))

    @classmethod
    def update_segment(cls, lc: SegmentLoadCommand, delta: int) -> SegmentLoadCommand:
        segment: SegmentLoadCommand = load_command_from_bytes(lc.raw_bytes())

        for field in cls.SEGMENT_FIELDS:
            shift_field(segment.cmd, field, delta)
        log.debug(f'Segment {segment.name}: fileoff {hex(lc.cmd.fileoff)} -> {hex(segment.cmd.fileoff)}')

        for section in segment.sections:
            if section.is_zerofill:
                log.debug_more(f'Section {section.name} is zerofill, skipping')
                continue

            sect = section.cmd
            shift_field(sect, 'offset', delta)
            # reloff 0 means "no relocations", it must stay 0
            if sect.reloff > 0:
                shift_field(sect, 'reloff', delta)
            log.debug_tm(sect)

        return segment

    @staticmethod
    def update_offsets(lc: LoadCommand, fields: List[str], delta: int) -> LoadCommand:
        updated = load_command_from_bytes(lc.raw_bytes())

        for field in fields:
            shift_field(updated.cmd, field, delta)
        log.debug(f'{updated}: {", ".join(f"{f}={hex(getattr(updated.cmd, f))}" for f in fields)}')

        return updated
