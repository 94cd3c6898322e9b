#
#  arm64sim | arm64sim
#  assembler.py
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

from typing import List

from sim_macho import Struct, mach_header_64
from sim_macho.load_commands import LoadCommand
from arm64sim.exceptions import MalformedCommand
from arm64sim.util import log


class ImageAssembler:

    @classmethod
    def assemble(cls, header: mach_header_64, load_commands: List[LoadCommand], payload: bytes) -> bytes:
        """
        Concatenate header, load commands (in the order given) and payload into one buffer.

        ncmds and sizeofcmds are recomputed from the commands; the header passed in is not modified.

        :param header: original mach header
        :param load_commands: rewritten load commands
        :param payload: bytes that followed the original load commands
        :return: the complete image
        :raises MalformedCommand: a command encodes to a different size than its cmdsize
        """
        commands_raw = bytearray()
        for lc in load_commands:
            raw = lc.raw_bytes()
            if len(raw) != lc.cmdsize:
                log.error(f'{lc} encodes to {len(raw)} bytes')
                raise MalformedCommand(f'{lc} declares cmdsize {lc.cmdsize} but encodes to {len(raw)} bytes')
            commands_raw += raw

        new_header = cls.header_with_commands(header, len(load_commands), len(commands_raw))
        log.info(f'sizeofcmds {header.sizeofcmds} -> {new_header.sizeofcmds}, ncmds {new_header.ncmds}')

        return bytes(new_header.raw + commands_raw + payload)

    @staticmethod
    def header_with_commands(header: mach_header_64, ncmds: int, sizeofcmds: int) -> mach_header_64:
        new_header: mach_header_64 = Struct.create_with_bytes(mach_header_64, header.raw)
        new_header.ncmds = ncmds
        new_header.sizeofcmds = sizeofcmds
        return new_header
