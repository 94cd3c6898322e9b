#
#  arm64sim | tests
#  macho_builder.py
#
#  Builds small synthetic thin arm64 images so tests never depend on a real binary.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
import os
import sys

scriptdir = os.path.dirname(os.path.realpath(__file__))
sys.path.insert(0, f'{scriptdir}/../src')

from sim_macho import *
from sim_macho.structs import build_tool_version
from simlib.structs import Struct

PAYLOAD = bytes(range(256)) * 16

TEXT_OFFSET = 0x400
TEXT_RELOFF = 500
LINKEDIT_OFFSET = 0x1000
SYMOFF = 0x1000
STROFF = 0x1100
DATAOFF = 0x1200
LOHOFF = 0x1280


def make(struct_class, **fields):
    instance = struct_class()
    for field, value in fields.items():
        setattr(instance, field, value)
    instance.initialized = True
    return instance


def section(sectname, segname, offset, reloff=0, nreloc=0, flags=SectionType.S_REGULAR, addr=0, size=0x100):
    return make(section_64, sectname=sectname, segname=segname, addr=addr, size=size, offset=offset, align=2,
                reloff=reloff, nreloc=nreloc, flags=flags)


def segment(segname, vmaddr, vmsize, fileoff, filesize, sections=()):
    cmdsize = segment_command_64.size() + len(sections) * section_64.size()
    raw = make(segment_command_64, cmd=LOAD_COMMAND.SEGMENT_64, cmdsize=cmdsize, segname=segname, vmaddr=vmaddr,
               vmsize=vmsize, fileoff=fileoff, filesize=filesize, maxprot=5, initprot=5, nsects=len(sections),
               flags=0).raw
    for sect in sections:
        raw += sect.raw
    return raw


def symtab(symoff=SYMOFF, stroff=STROFF):
    return make(symtab_command, cmd=LOAD_COMMAND.SYMTAB, cmdsize=symtab_command.size(), symoff=symoff, nsyms=4,
                stroff=stroff, strsize=0x40).raw


def linkedit_data(kind, dataoff):
    return make(linkedit_data_command, cmd=kind, cmdsize=linkedit_data_command.size(), dataoff=dataoff,
                datasize=0x20).raw


def version_min(major=12, sdk=14):
    return make(version_min_command, cmd=LOAD_COMMAND.VERSION_MIN_IPHONEOS, cmdsize=version_min_command.size(),
                version=major << 16, sdk=sdk << 16).raw


def build_version(platform=PlatformType.IOS, minos=12, sdk=14, tools=()):
    raw = make(build_version_command, cmd=LOAD_COMMAND.BUILD_VERSION,
               cmdsize=build_version_command.size() + len(tools) * build_tool_version.size(), platform=platform,
               minos=minos << 16, sdk=sdk << 16, ntools=len(tools)).raw
    for tool, version in tools:
        raw += make(build_tool_version, tool=tool, version=version).raw
    return raw


def uuid():
    return make(load_command, cmd=LOAD_COMMAND.UUID, cmdsize=24).raw + bytes(range(16))


def header(ncmds, sizeofcmds, magic=MH_MAGIC_64, cpu_type=CPUType.ARM64):
    return make(mach_header_64, magic=magic, cpu_type=cpu_type, cpu_subtype=0, filetype=MH_FILETYPE.EXECUTE,
                ncmds=ncmds, sizeofcmds=sizeofcmds, flags=0x200085, reserved=0).raw


def image(commands, payload=PAYLOAD, **header_fields):
    commands_raw = b''.join(commands)
    return header(len(commands), len(commands_raw), **header_fields) + commands_raw + payload


def standard_commands(version_command=None):
    """
    __PAGEZERO, __TEXT (a relocated section, an unrelocated one and a zerofill one), __LINKEDIT, symtab,
        data in code, LOH, uuid, and the version command.
    """
    if version_command is None:
        version_command = version_min()
    text_sections = [
        section('__text', '__TEXT', TEXT_OFFSET, reloff=TEXT_RELOFF, nreloc=2,
                flags=SectionType.S_REGULAR | 0x80000400),
        section('__const', '__TEXT', 0x600),
        section('__bss', '__TEXT', 0, flags=SectionType.S_ZEROFILL),
        section('__thread_bss', '__TEXT', 0x700, flags=SectionType.S_THREAD_LOCAL_ZEROFILL)
    ]
    return [
        segment('__PAGEZERO', 0, 0x100000000, 0, 0),
        segment('__TEXT', 0x100000000, 0x1000, 0, 0x1000, text_sections),
        segment('__LINKEDIT', 0x100001000, 0x1000, LINKEDIT_OFFSET, 0x300),
        symtab(),
        linkedit_data(LOAD_COMMAND.DATA_IN_CODE, DATAOFF),
        linkedit_data(LOAD_COMMAND.LINKER_OPTIMIZATION_HINT, LOHOFF),
        uuid(),
        version_command
    ]


def standard_image(version_command=None, payload=PAYLOAD):
    return image(standard_commands(version_command), payload)


def struct_at(data, offset, struct_class):
    return Struct.create_with_bytes(struct_class, data[offset:offset + struct_class.size()])
