#
#  arm64sim | sim_macho
#  load_commands.py
#
#  Editable wrappers around the load command structs.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
from typing import List, Union

from sim_macho.mach_header import (LOAD_COMMAND, SectionType, S_FLAGS_MASKS, ZEROFILL_SECTION_TYPES,
                                   PlatformType, ToolType)
from sim_macho.structs import (Struct, StructDecodeError, load_command, segment_command_64, section_64, symtab_command,
                               linkedit_data_command, version_min_command, build_version_command, build_tool_version)
from sim_macho.base import Constructable


def fixed_name(data: bytes) -> str:
    """
    Display form of a 16 byte segname/sectname field. The field itself is never rewritten from this.
    """
    return data.split(b'\x00', 1)[0].decode('utf-8', errors='replace')


def command_name(cmd: int) -> str:
    try:
        return LOAD_COMMAND(cmd).name
    except ValueError:
        return hex(cmd)


class LoadCommand(Constructable):
    """
    A single load command: its fixed struct plus whatever bytes follow the struct inside cmdsize.

    Commands we don't decode are held as a bare `load_command` header with everything after it in `suffix`,
        so they re-encode byte-for-byte.
    """

    STRUCT = load_command

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'LoadCommand':
        struct_type = cls.STRUCT
        command = Struct.create_with_bytes(struct_type, raw)

        if command.cmdsize != len(raw):
            raise StructDecodeError(f'{command_name(command.cmd)} declares cmdsize {command.cmdsize} '
                                    f'but {len(raw)} bytes were read')
        if command.cmdsize < struct_type.size():
            raise StructDecodeError(f'{command_name(command.cmd)} cmdsize {command.cmdsize} is smaller than its '
                                    f'{struct_type.__name__} ({struct_type.size()} bytes)')

        lc = cls()
        lc.cmd = command
        lc.suffix = bytes(raw[struct_type.size():])
        return lc

    @classmethod
    def from_values(cls, command: Struct, suffix: bytes = b'') -> 'LoadCommand':
        lc = cls()
        lc.cmd = command
        lc.suffix = bytes(suffix)
        return lc

    def raw_bytes(self) -> bytes:
        return self.cmd.raw + self.suffix

    @property
    def kind(self) -> Union[LOAD_COMMAND, int]:
        try:
            return LOAD_COMMAND(self.cmd.cmd)
        except ValueError:
            return self.cmd.cmd

    @property
    def cmdsize(self) -> int:
        return self.cmd.cmdsize

    def serialize(self):
        data = self.cmd.serialize()
        data['type'] = command_name(self.cmd.cmd)
        if self.suffix:
            data['suffix'] = self.suffix.hex()
        return data

    def __str__(self):
        return f'{command_name(self.cmd.cmd)} ({self.cmdsize} bytes)'

    def __init__(self):
        self.cmd = None
        self.suffix = b''


class Section:

    def __init__(self, cmd: section_64):
        self.cmd = cmd
        self.name = fixed_name(cmd.sectname)
        try:
            self.type = SectionType(S_FLAGS_MASKS.SECTION_TYPE & cmd.flags)
        except ValueError:
            self.type = S_FLAGS_MASKS.SECTION_TYPE & cmd.flags

    @property
    def is_zerofill(self) -> bool:
        return self.type in ZEROFILL_SECTION_TYPES

    def serialize(self):
        data = self.cmd.serialize()
        data['sectname'] = self.name
        data['segname'] = fixed_name(self.cmd.segname)
        return data


class SegmentLoadCommand(LoadCommand):
    STRUCT = segment_command_64

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'SegmentLoadCommand':
        lc: SegmentLoadCommand = super().from_bytes(raw)
        command = lc.cmd

        expected = segment_command_64.size() + command.nsects * section_64.size()
        if command.cmdsize != expected:
            raise StructDecodeError(f'Segment {fixed_name(command.segname)} with {command.nsects} sections should be '
                                    f'{expected} bytes, cmdsize is {command.cmdsize}')

        ea = 0
        for _ in range(command.nsects):
            sect = Struct.create_with_bytes(section_64, lc.suffix[ea:ea + section_64.size()])
            lc.sections.append(Section(sect))
            ea += section_64.size()

        lc.suffix = b''
        lc.name = fixed_name(command.segname)
        return lc

    def raw_bytes(self) -> bytes:
        data = bytearray(self.cmd.raw)
        for section in self.sections:
            data += section.cmd.raw
        return bytes(data)

    def serialize(self):
        data = super().serialize()
        data['segname'] = self.name
        data['sections'] = [section.serialize() for section in self.sections]
        return data

    def __init__(self):
        super().__init__()
        self.name = ""
        self.sections: List[Section] = []


class BuildVersionLoadCommand(LoadCommand):
    STRUCT = build_version_command

    @classmethod
    def from_bytes(cls, raw: bytes) -> 'BuildVersionLoadCommand':
        lc: BuildVersionLoadCommand = super().from_bytes(raw)

        tools_size = lc.cmd.ntools * build_tool_version.size()
        if len(lc.suffix) < tools_size:
            raise StructDecodeError(f'BUILD_VERSION lists {lc.cmd.ntools} tools but cmdsize {lc.cmdsize} '
                                    f'has no room for them')

        for ea in range(0, tools_size, build_tool_version.size()):
            lc.tools.append(Struct.create_with_bytes(build_tool_version, lc.suffix[ea:]))

        lc.suffix = lc.suffix[tools_size:]
        return lc

    @classmethod
    def from_values(cls, platform: PlatformType, minos: int, sdk: int) -> 'BuildVersionLoadCommand':
        """
        Build a tool-less LC_BUILD_VERSION.

        :param platform: target platform
        :param minos: encoded (xxxx.yy.zz) minimum OS version
        :param sdk: encoded (xxxx.yy.zz) SDK version
        """
        command = Struct.create_with_values(build_version_command, [LOAD_COMMAND.BUILD_VERSION,
                                                                    build_version_command.size(), int(platform),
                                                                    minos, sdk, 0])
        lc = cls()
        lc.cmd = command
        return lc

    def raw_bytes(self) -> bytes:
        data = bytearray(self.cmd.raw)
        for tool in self.tools:
            data += tool.raw
        return bytes(data + self.suffix)

    def serialize(self):
        data = super().serialize()
        data['tools'] = []
        for tool in self.tools:
            try:
                tool_name = ToolType(tool.tool).name
            except ValueError:
                tool_name = hex(tool.tool)
            data['tools'].append({'tool': tool_name, 'version': tool.version})
        return data

    def __init__(self):
        super().__init__()
        self.tools: List[build_tool_version] = []


class SymtabLoadCommand(LoadCommand):
    STRUCT = symtab_command


class LinkeditDataLoadCommand(LoadCommand):
    STRUCT = linkedit_data_command


class VersionMinLoadCommand(LoadCommand):
    STRUCT = version_min_command


LOAD_COMMAND_TYPES = {
    LOAD_COMMAND.SEGMENT_64: SegmentLoadCommand,
    LOAD_COMMAND.SYMTAB: SymtabLoadCommand,
    LOAD_COMMAND.DATA_IN_CODE: LinkeditDataLoadCommand,
    LOAD_COMMAND.LINKER_OPTIMIZATION_HINT: LinkeditDataLoadCommand,
    LOAD_COMMAND.VERSION_MIN_IPHONEOS: VersionMinLoadCommand,
    LOAD_COMMAND.BUILD_VERSION: BuildVersionLoadCommand
}

def load_command_from_bytes(raw: bytes) -> LoadCommand:
    """
    Decode one full load command (sub-header included) into the richest wrapper we have for its kind.

    :raises: StructDecodeError if the command's declared size doesn't match its contents
    """
    header = Struct.create_with_bytes(load_command, raw)
    try:
        lc_type = LOAD_COMMAND_TYPES[LOAD_COMMAND(header.cmd)]
    except (ValueError, KeyError):
        lc_type = LoadCommand
    return lc_type.from_bytes(raw)
