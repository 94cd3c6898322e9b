#
#  arm64sim | sim_macho
#  mach_header.py
#
#  Pythonized #defines and enums from <mach-o/loader.h> that the rewriter cares about
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#


from enum import IntEnum

from .structs import *

MH_MAGIC = 0xFEEDFACE
MH_CIGAM = 0xCEFAEDFE
MH_MAGIC_64 = 0xFEEDFACF
MH_CIGAM_64 = 0xCFFAEDFE
FAT_MAGIC = 0xCAFEBABE
FAT_CIGAM = 0xBEBAFECA
FAT_MAGIC_64 = 0xCAFEBABF
FAT_CIGAM_64 = 0xBFBAFECA


class MH_FILETYPE(IntEnum):
    UNK = 0
    OBJECT = 0x1
    EXECUTE = 0x2
    FVMLIB = 0x3
    CORE = 0x4
    PRELOAD = 0x5
    DYLIB = 0x6
    DYLINKER = 0x7
    BUNDLE = 0x8
    DYLIB_STUB = 0x9
    DSYM = 0xA
    KEXT_BUNDLE = 0xB


LC_REQ_DYLD = 0x80000000


class LOAD_COMMAND(IntEnum):
    SEGMENT = 0x1
    SYMTAB = 0x2
    SYMSEG = 0x3
    THREAD = 0x4
    UNIXTHREAD = 0x5
    LOADFVMLIB = 0x6
    IDFVMLIB = 0x7
    IDENT = 0x8
    FVMFILE = 0x9
    PREPAGE = 0xA
    DYSYMTAB = 0xB
    LOAD_DYLIB = 0xC
    ID_DYLIB = 0xD
    LOAD_DYLINKER = 0xE
    ID_DYLINKER = 0xF
    PREBOUND_DYLIB = 0x10
    ROUTINES = 0x11
    SUB_FRAMEWORK = 0x12
    SUB_UMBRELLA = 0x13
    SUB_CLIENT = 0x14
    SUB_LIBRARY = 0x15
    TWOLEVEL_HINTS = 0x16
    PREBIND_CKSUM = 0x17
    LOAD_WEAK_DYLIB = 0x18 | LC_REQ_DYLD
    SEGMENT_64 = 0x19
    ROUTINES_64 = 0x1a
    UUID = 0x1b
    RPATH = 0x1C | LC_REQ_DYLD
    CODE_SIGNATURE = 0x1D
    SEGMENT_SPLIT_INFO = 0x1E
    REEXPORT_DYLIB = 0x1F | LC_REQ_DYLD
    LAZY_LOAD_DYLIB = 0x20
    ENCRYPTION_INFO = 0x21
    DYLD_INFO = 0x22
    DYLD_INFO_ONLY = 0x22 | LC_REQ_DYLD
    LOAD_UPWARD_DYLIB = 0x23 | LC_REQ_DYLD
    VERSION_MIN_MACOSX = 0x24
    VERSION_MIN_IPHONEOS = 0x25
    FUNCTION_STARTS = 0x26
    DYLD_ENVIRONMENT = 0x27
    MAIN = 0x28 | LC_REQ_DYLD
    DATA_IN_CODE = 0x29
    SOURCE_VERSION = 0x2A
    DYLIB_CODE_SIGN_DRS = 0x2B
    ENCRYPTION_INFO_64 = 0x2C
    LINKER_OPTION = 0x2D
    LINKER_OPTIMIZATION_HINT = 0x2E
    VERSION_MIN_TVOS = 0x2F
    VERSION_MIN_WATCHOS = 0x30
    NOTE = 0x31
    BUILD_VERSION = 0x32
    LC_DYLD_EXPORTS_TRIE = 0x33 | LC_REQ_DYLD
    LC_DYLD_CHAINED_FIXUPS = 0x34 | LC_REQ_DYLD


class S_FLAGS_MASKS(IntEnum):
    SECTION_TYPE = 0x000000ff
    SECTION_ATTRIBUTES = 0xffffff00
    SECTION_ATTRIBUTES_USR = 0xff000000
    SECTION_ATTRIBUTES_SYS = 0x00ffff00


class SectionType(IntEnum):
    S_REGULAR = 0x00  # Regular section
    S_ZEROFILL = 0x01  # Zero fill on demand section.
    S_CSTRING_LITERALS = 0x02  # Section with literal C strings
    S_4BYTE_LITERALS = 0x03  # Section with 4 byte literals.
    S_8BYTE_LITERALS = 0x04  # Section with 8 byte literals.
    S_LITERAL_POINTERS = 0x05  # Section with pointers to literals.
    S_NON_LAZY_SYMBOL_POINTERS = 0x06  # Section with non-lazy symbol pointers.
    S_LAZY_SYMBOL_POINTERS = 0x07  # Section with lazy symbol pointers.
    S_SYMBOL_STUBS = 0x08  # Section with symbol stubs, byte size of stub in the Reserved2 field.
    S_MOD_INIT_FUNC_POINTERS = 0x09  # Section with only function pointers for initialization.
    S_MOD_TERM_FUNC_POINTERS = 0x0A  # Section with only function pointers for termination.
    S_COALESCED = 0x0B  # Section contains symbols that are to be coalesced.
    S_GB_ZEROFILL = 0x0C  # Zero fill on demand section (that can be larger than 4 gigabytes).
    S_INTERPOSING = 0x0D  # Section with only pairs of function pointers for interposing.
    S_16BYTE_LITERALS = 0x0E  # Section with only 16 byte literals.
    S_DTRACE_DOF = 0x0F  # Section contains DTrace Object Format.
    S_LAZY_DYLIB_SYMBOL_POINTERS = 0x10  # Section with lazy symbol pointers to lazy loaded dylibs.
    S_THREAD_LOCAL_REGULAR = 0x11  # Thread local data section.
    S_THREAD_LOCAL_ZEROFILL = 0x12  # Thread local zerofill section.
    S_THREAD_LOCAL_VARIABLES = 0x13  # Section with thread local variable structure data.
    S_THREAD_LOCAL_VARIABLE_POINTERS = 0x14  # Section with pointers to thread local structures.
    S_THREAD_LOCAL_INIT_FUNCTION_POINTERS = 0x15  # Section with thread local variable initialization pointers to functions.


# Sections of these types have no bytes in the file, so their offset fields mean nothing.
ZEROFILL_SECTION_TYPES = (SectionType.S_ZEROFILL, SectionType.S_GB_ZEROFILL, SectionType.S_THREAD_LOCAL_ZEROFILL)


CPU_ARCH_MASK = 0xff000000  # Mask for architecture bits
CPU_ARCH_ABI64 = 0x01000000


class CPUType(IntEnum):
    ANY = -1
    X86 = 7
    X86_64 = X86 | CPU_ARCH_ABI64
    MC98000 = 10
    ARM = 12
    ARM64 = ARM | CPU_ARCH_ABI64
    SPARC = 14
    POWERPC = 18
    POWERPC64 = POWERPC | CPU_ARCH_ABI64


class PlatformType(IntEnum):
    MACOS = 1
    IOS = 2
    TVOS = 3
    WATCHOS = 4
    BRIDGE_OS = 5
    MAC_CATALYST = 6
    IOS_SIMULATOR = 7
    TVOS_SIMULATOR = 8
    WATCHOS_SIMULATOR = 9
    DRIVER_KIT = 10


class ToolType(IntEnum):
    CLANG = 1
    SWIFT = 2
    LD = 3
