#
#  arm64sim | arm64sim
#  planner.py
#
#  Deciding which version command gets replaced, and how far everything after the load commands moves.
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

from typing import List

from sim_macho import LOAD_COMMAND, build_version_command
from sim_macho.load_commands import LoadCommand
from arm64sim.exceptions import AmbiguousVersionInfo, MissingVersionInfo
from arm64sim.util import log


class RewritePlan:
    """
    :ivar delta: signed change in the size of the load command area. Every file offset past the load commands
        moves by exactly this much.
    :ivar source_command: the version command that will be replaced
    """

    def __init__(self, delta: int, source_command: LoadCommand):
        self.delta = delta
        self.source_command = source_command

    @property
    def source_kind(self) -> LOAD_COMMAND:
        return self.source_command.kind

    def serialize(self):
        return {
            'replaces': self.source_kind.name,
            'delta': self.delta
        }

    def __str__(self):
        return f'Replace {self.source_kind.name} ({self.source_command.cmdsize} bytes), delta {self.delta:+}'


class DeltaPlanner:

    @classmethod
    def plan(cls, load_commands: List[LoadCommand]) -> RewritePlan:
        """
        Find the single version command and compute the size delta its replacement introduces.

        The replacement is always a single tool-less build_version_command, so an existing LC_BUILD_VERSION carrying
            tool records, or a repeated version command, yields a negative delta.

        :param load_commands: decoded load commands
        :return: RewritePlan
        :raises AmbiguousVersionInfo: both LC_VERSION_MIN_IPHONEOS and LC_BUILD_VERSION are present
        :raises MissingVersionInfo: neither is present
        """
        version_min = [lc for lc in load_commands if lc.kind == LOAD_COMMAND.VERSION_MIN_IPHONEOS]
        build_version = [lc for lc in load_commands if lc.kind == LOAD_COMMAND.BUILD_VERSION]

        if version_min and build_version:
            log.error('Image has both LC_BUILD_VERSION and LC_VERSION_MIN_IPHONEOS')
            raise AmbiguousVersionInfo('The image has both LC_BUILD_VERSION and LC_VERSION_MIN_IPHONEOS')

        if not version_min and not build_version:
            log.error("Image doesn't have LC_BUILD_VERSION or LC_VERSION_MIN_IPHONEOS")
            raise MissingVersionInfo("The image doesn't have LC_BUILD_VERSION or LC_VERSION_MIN_IPHONEOS")

        sources = version_min or build_version
        if len(sources) > 1:
            log.warn(f'Image has {len(sources)} {sources[0].kind.name} commands, the first is replaced and the rest '
                     f'are dropped')

        # one replacement stands in for every source command
        delta = build_version_command.size() - sum(lc.cmdsize for lc in sources)
        source = sources[0]

        plan = RewritePlan(delta, source)
        log.info(str(plan))
        return plan
