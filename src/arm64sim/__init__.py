from arm64sim.arm64sim import (transform, transform_image, patch_file, load_image, verify_image, describe_image,
                               RewriteResult, DEFAULT_MINOS, DEFAULT_SDK)

from arm64sim.macho import ImageReader, MachOImage
from arm64sim.planner import DeltaPlanner, RewritePlan
from arm64sim.rewriter import CommandRewriter, apply_offset
from arm64sim.assembler import ImageAssembler
from arm64sim.exceptions import *
from arm64sim.util import ARM64SIM_VERSION, log, LogLevel, encode_version, decode_version
