#
#  arm64sim | arm64sim
#  exceptions.py
#
#  Everything the rewrite can fail with. All of these are fatal; the CLI is the only place they get caught.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#


class Arm64SimException(Exception):
    """
    Base for every error raised while reading, rewriting or writing an image
    """


class UnreadableSource(Arm64SimException):
    """
    The path can't be opened, or it ends before a full mach header
    """


class UnsupportedFormat(Arm64SimException):
    """
    Magic or CPU type isn't a thin little-endian arm64 Mach-O
    """


class MissingVersionInfo(Arm64SimException):
    """
    Neither LC_VERSION_MIN_IPHONEOS nor LC_BUILD_VERSION is present
    """


class AmbiguousVersionInfo(Arm64SimException):
    """
    LC_VERSION_MIN_IPHONEOS and LC_BUILD_VERSION are both present
    """


class MalformedCommand(Arm64SimException):
    """
    A load command's cmdsize disagrees with the bytes actually available for it
    """


class WriteFailure(Arm64SimException):
    """
    The rewritten image could not be written out
    """


class OffsetOverflow(Arm64SimException):
    """
    Shifting a file offset or size by the delta no longer fits the field holding it
    """
