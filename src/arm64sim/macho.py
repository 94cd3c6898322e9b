#
#  arm64sim | arm64sim
#  macho.py
#
#  Reading a thin arm64 Mach-O into its header, its load commands and everything that follows them.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

from io import BytesIO
from typing import BinaryIO, List, Union

from sim_macho import *
from sim_macho.load_commands import LoadCommand, load_command_from_bytes
from arm64sim.exceptions import UnreadableSource, UnsupportedFormat, MalformedCommand
from arm64sim.util import log


class MachOImage:
    """
    One decoded image.

    :ivar header: the mach_header_64, exactly as read
    :ivar load_commands: decoded load commands, in file order
    :ivar payload: every byte after the load command area, untouched
    """

    def __init__(self, header: mach_header_64, load_commands: List[LoadCommand], payload: bytes):
        self.header = header
        self.load_commands = load_commands
        self.payload = payload

    def commands_of_kind(self, kind: LOAD_COMMAND) -> List[LoadCommand]:
        return [lc for lc in self.load_commands if lc.kind == kind]

    @property
    def load_commands_size(self) -> int:
        return sum(lc.cmdsize for lc in self.load_commands)

    def raw_bytes(self) -> bytes:
        data = bytearray(self.header.raw)
        for lc in self.load_commands:
            data += lc.raw_bytes()
        return bytes(data + self.payload)

    def serialize(self):
        try:
            filetype = MH_FILETYPE(self.header.filetype).name
        except ValueError:
            filetype = hex(self.header.filetype)
        return {
            'filetype': filetype,
            'header': self.header.serialize(),
            'load_commands': [lc.serialize() for lc in self.load_commands],
            'payload_size': len(self.payload)
        }

    def __str__(self):
        return f'MachO Image - Load Cmd Count: {len(self.load_commands)} | Load Cmd Size: {self.load_commands_size} | ' \
               f'Payload Size: {len(self.payload)}'


class ImageReader:
    """
    Splits an image into (header, load commands, payload).

    Each load command is read in two steps: the 8 byte load_command sub-header first, to learn cmdsize, then the
        remaining cmdsize - 8 bytes. Nothing is ever un-read.
    """

    @classmethod
    def read(cls, fp: Union[BinaryIO, BytesIO]) -> MachOImage:
        header = cls._read_header(fp)

        log.info(f'Reading {header.ncmds} Load Commands ({header.sizeofcmds} bytes)')

        load_commands = []
        offset = mach_header_64.size()
        for index in range(header.ncmds):
            lc = cls._read_load_command(fp, index, offset)
            log.debug(f'Load Command {index} at {hex(offset)}: {lc}')
            log.debug_tm(lc.cmd)
            load_commands.append(lc)
            offset += lc.cmdsize

        if offset - mach_header_64.size() != header.sizeofcmds:
            log.warn(f'Header declares sizeofcmds {header.sizeofcmds}, load commands occupy '
                     f'{offset - mach_header_64.size()} bytes')

        payload = fp.read()
        log.info(f'Read {len(payload)} bytes of payload after the load commands')

        return MachOImage(header, load_commands, payload)

    @classmethod
    def read_bytes(cls, data: bytes) -> MachOImage:
        return cls.read(BytesIO(data))

    @classmethod
    def read_path(cls, path) -> MachOImage:
        try:
            with open(path, 'rb') as fp:
                return cls.read(fp)
        except OSError as ex:
            log.error(f'Cannot open {path}: {ex}')
            raise UnreadableSource(f'Cannot open a handle for the file at {path}: {ex.strerror}') from ex

    @staticmethod
    def _read_header(fp) -> mach_header_64:
        raw = fp.read(mach_header_64.size())
        if len(raw) < mach_header_64.size():
            log.error(f'Only {len(raw)} bytes available for the mach header')
            raise UnreadableSource(f'File is too short to hold a mach header ({len(raw)} bytes)')

        header: mach_header_64 = Struct.create_with_bytes(mach_header_64, raw)
        log.debug_more(header)

        if header.magic in [FAT_MAGIC, FAT_CIGAM, FAT_MAGIC_64, FAT_CIGAM_64]:
            log.error(f'Fat Magic: {hex(header.magic)}')
            raise UnsupportedFormat('The file is a fat binary. Thin it to arm64 (via lipo) first.')

        if header.magic != MH_MAGIC_64:
            log.error(f'Bad Magic: {hex(header.magic)}')
            raise UnsupportedFormat(f'Bad magic {hex(header.magic)}; the file is not a 64 bit little endian Mach-O. '
                                    f'Try thinning (via lipo) or unarchiving (via ar) first.')

        if header.cpu_type != CPUType.ARM64:
            log.error(f'Bad CPU Type: {hex(header.cpu_type)}')
            raise UnsupportedFormat(f'CPU type {hex(header.cpu_type)} is not arm64.')

        return header

    @staticmethod
    def _read_load_command(fp, index: int, offset: int) -> LoadCommand:
        sub_header = fp.read(load_command.size())
        if len(sub_header) < load_command.size():
            log.error(f'Load Command {index} at {hex(offset)} is truncated')
            raise MalformedCommand(f'Load command {index} at {hex(offset)} runs past the end of the file')

        cmd: load_command = Struct.create_with_bytes(load_command, sub_header)
        if cmd.cmdsize < load_command.size():
            log.error(f'Bad Load Command at {hex(offset)} index {index}\n        {hex(cmd.cmd)} - {hex(cmd.cmdsize)}')
            raise MalformedCommand(f'Load command {index} at {hex(offset)} declares an impossible cmdsize '
                                   f'{cmd.cmdsize}')

        body = fp.read(cmd.cmdsize - load_command.size())
        if len(body) < cmd.cmdsize - load_command.size():
            log.error(f'Bad Load Command at {hex(offset)} index {index}\n        {hex(cmd.cmd)} - {hex(cmd.cmdsize)}')
            raise MalformedCommand(f'Load command {index} at {hex(offset)} declares cmdsize {cmd.cmdsize}, '
                                   f'only {len(body) + load_command.size()} bytes remain')

        try:
            return load_command_from_bytes(sub_header + body)
        except StructDecodeError as ex:
            log.error(f'Bad Load Command at {hex(offset)} index {index}: {ex}')
            raise MalformedCommand(f'Load command {index} at {hex(offset)}: {ex}') from ex
