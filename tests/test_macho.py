#
#  arm64sim | tests
#  test_macho.py
#
#
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
import os
import tempfile
import unittest
from io import BytesIO

import macho_builder as mb

from sim_macho import *
from sim_macho.load_commands import SegmentLoadCommand, BuildVersionLoadCommand, LoadCommand
from arm64sim.macho import ImageReader
from arm64sim.exceptions import *
from arm64sim.util import log, LogLevel
from simlib.log import print_err

log.LOG_LEVEL = LogLevel.WARN

error_buffer = ""


def error_remap(msg):
    global error_buffer
    error_buffer += msg + '\n'


def enable_error_capture():
    log.LOG_LEVEL = LogLevel.WARN
    log.LOG_ERR = error_remap
    global error_buffer
    error_buffer = ""


def disable_error_capture():
    log.LOG_ERR = print_err


class ImageReaderTestCase(unittest.TestCase):

    def setUp(self):
        enable_error_capture()

    def tearDown(self):
        disable_error_capture()

    def test_splits_header_commands_payload(self):
        data = mb.standard_image()
        image = ImageReader.read(BytesIO(data))

        self.assertEqual(image.header.ncmds, 8)
        self.assertEqual(len(image.load_commands), 8)
        self.assertEqual(image.header.sizeofcmds, image.load_commands_size)
        self.assertEqual(image.payload, mb.PAYLOAD)

    def test_decodes_command_kinds(self):
        image = ImageReader.read_bytes(mb.standard_image())
        kinds = [lc.kind for lc in image.load_commands]

        self.assertEqual(kinds, [LOAD_COMMAND.SEGMENT_64, LOAD_COMMAND.SEGMENT_64, LOAD_COMMAND.SEGMENT_64,
                                 LOAD_COMMAND.SYMTAB, LOAD_COMMAND.DATA_IN_CODE,
                                 LOAD_COMMAND.LINKER_OPTIMIZATION_HINT, LOAD_COMMAND.UUID,
                                 LOAD_COMMAND.VERSION_MIN_IPHONEOS])

        text = image.load_commands[1]
        self.assertIsInstance(text, SegmentLoadCommand)
        self.assertEqual(text.name, '__TEXT')
        self.assertEqual([s.name for s in text.sections], ['__text', '__const', '__bss', '__thread_bss'])
        self.assertEqual(text.sections[0].cmd.reloff, mb.TEXT_RELOFF)
        self.assertFalse(text.sections[0].is_zerofill)
        self.assertTrue(text.sections[2].is_zerofill)
        self.assertTrue(text.sections[3].is_zerofill)

        self.assertEqual(image.load_commands[3].cmd.stroff, mb.STROFF)
        self.assertEqual(type(image.load_commands[6]), LoadCommand)

    def test_reencodes_byte_for_byte(self):
        data = mb.standard_image()
        image = ImageReader.read_bytes(data)
        self.assertEqual(image.raw_bytes(), data)

    def test_build_version_tools(self):
        command = mb.build_version(tools=[(ToolType.CLANG, 0x0c0000), (ToolType.LD, 0x2610000)])
        image = ImageReader.read_bytes(mb.standard_image(command))

        lc = image.commands_of_kind(LOAD_COMMAND.BUILD_VERSION)[0]
        self.assertIsInstance(lc, BuildVersionLoadCommand)
        self.assertEqual(lc.cmdsize, 40)
        self.assertEqual([tool.tool for tool in lc.tools], [ToolType.CLANG, ToolType.LD])
        self.assertEqual(lc.raw_bytes(), command)

    def test_bad_magic(self):
        data = bytearray(mb.standard_image())
        data[0:4] = 0xDEADBEEF.to_bytes(4, 'little')

        with self.assertRaises(UnsupportedFormat):
            ImageReader.read_bytes(bytes(data))
        self.assertIn('Bad Magic: 0xdeadbeef', error_buffer)

    def test_big_endian_magic(self):
        with self.assertRaises(UnsupportedFormat):
            ImageReader.read_bytes(mb.image(mb.standard_commands(), magic=MH_CIGAM_64))

    def test_fat_magic(self):
        data = FAT_MAGIC.to_bytes(4, 'big') + bytes(60)

        with self.assertRaises(UnsupportedFormat) as context:
            ImageReader.read_bytes(data)
        self.assertIn('lipo', str(context.exception))

    def test_wrong_cpu_type(self):
        with self.assertRaises(UnsupportedFormat):
            ImageReader.read_bytes(mb.image(mb.standard_commands(), cpu_type=CPUType.X86_64))

    def test_short_header(self):
        with self.assertRaises(UnreadableSource):
            ImageReader.read_bytes(mb.standard_image()[:20])

    def test_truncated_command(self):
        data = mb.standard_image(payload=b'')
        with self.assertRaises(MalformedCommand):
            ImageReader.read_bytes(data[:-4])

    def test_truncated_sub_header(self):
        data = mb.header(2, 24) + mb.uuid() + b'\x19\x00'
        with self.assertRaises(MalformedCommand):
            ImageReader.read_bytes(data)

    def test_impossible_cmdsize(self):
        bad = mb.make(load_command, cmd=LOAD_COMMAND.UUID, cmdsize=4).raw
        with self.assertRaises(MalformedCommand):
            ImageReader.read_bytes(mb.image([bad, mb.version_min()]))

    def test_cmdsize_smaller_than_struct(self):
        bad = mb.make(load_command, cmd=LOAD_COMMAND.SYMTAB, cmdsize=16).raw + bytes(8)
        with self.assertRaises(MalformedCommand):
            ImageReader.read_bytes(mb.image([bad, mb.version_min()]))

    def test_segment_size_disagrees_with_nsects(self):
        seg = bytearray(mb.segment('__TEXT', 0, 0x1000, 0, 0x1000, [mb.section('__text', '__TEXT', 0x400)]))
        # claim two sections while cmdsize only holds one
        seg[64:68] = (2).to_bytes(4, 'little')
        with self.assertRaises(MalformedCommand):
            ImageReader.read_bytes(mb.image([bytes(seg), mb.version_min()]))

    def test_build_version_tools_past_cmdsize(self):
        command = bytearray(mb.build_version())
        command[20:24] = (3).to_bytes(4, 'little')
        with self.assertRaises(MalformedCommand):
            ImageReader.read_bytes(mb.image([bytes(command)]))

    def test_unknown_command_passthrough(self):
        unknown = mb.make(load_command, cmd=0x7777, cmdsize=16).raw + b'\xaa' * 8
        data = mb.image([unknown, mb.version_min()])
        image = ImageReader.read_bytes(data)

        self.assertEqual(image.load_commands[0].kind, 0x7777)
        self.assertEqual(image.load_commands[0].raw_bytes(), unknown)

    def test_read_path(self):
        data = mb.standard_image()
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'bin')
            with open(path, 'wb') as fp:
                fp.write(data)
            image = ImageReader.read_path(path)
        self.assertEqual(image.raw_bytes(), data)

    def test_read_missing_path(self):
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(UnreadableSource):
                ImageReader.read_path(os.path.join(tmp, 'does-not-exist'))

    def test_segment_and_section_names_kept_verbatim(self):
        segname = b'__PAGE\x00ZERO\xff\x00\x00\x00\x00'
        sectname = b'__te\xfext\x00\x00junk\x00\x00\x00'
        commands = mb.standard_commands()
        commands[0] = mb.segment(segname, 0, 0x100000000, 0, 0)
        commands[1] = mb.segment('__TEXT', 0x100000000, 0x1000, 0, 0x1000, [mb.section(sectname, '__TEXT', 0x400)])
        data = mb.image(commands)

        image = ImageReader.read_bytes(data)
        self.assertEqual(image.raw_bytes(), data)
        self.assertEqual(image.load_commands[0].cmd.segname, segname)
        self.assertEqual(image.load_commands[0].name, '__PAGE')
        self.assertEqual(image.load_commands[1].sections[0].cmd.sectname, sectname)

    def test_dump_every_struct_at_highest_level(self):
        lines = []
        log.LOG_LEVEL = LogLevel.DEBUG_TOO_MUCH
        log.LOG_FUNC = lines.append
        try:
            ImageReader.read_bytes(mb.standard_image())
        finally:
            log.LOG_FUNC = print
            log.LOG_LEVEL = LogLevel.WARN

        dumps = [line for line in lines if line.startswith('DEBUG-3')]
        self.assertEqual(len(dumps), 8)
        self.assertIn('symtab_command(', dumps[3])

    def test_serialize(self):
        image = ImageReader.read_bytes(mb.standard_image())
        data = image.serialize()

        self.assertEqual(data['filetype'], 'EXECUTE')
        self.assertEqual(data['load_commands'][1]['segname'], '__TEXT')
        self.assertEqual(len(data['load_commands'][1]['sections']), 4)
        self.assertEqual(data['load_commands'][7]['type'], 'VERSION_MIN_IPHONEOS')
        self.assertEqual(data['payload_size'], len(mb.PAYLOAD))


if __name__ == '__main__':
    unittest.main()
