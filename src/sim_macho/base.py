#
#  arm64sim | sim_macho
#  base.py
#
#
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

from abc import ABC, abstractmethod


class Constructable(ABC):
    """
    Standardized API for objects we load and may want to create.

    Everything we decode must be re-encodable, and everything we synthesize must be indistinguishable from
        something we decoded, so patching, creation and loading share one representation.

    """

    @classmethod
    @abstractmethod
    def from_bytes(cls, *args, **kwargs):
        """
        Decode an instance of the subclass from raw bytes

        Implementation/Args left up to implementations, but should usually follow `from_bytes(raw: bytes)`

        :return:
        """

    @classmethod
    @abstractmethod
    def from_values(cls, *args, **kwargs):
        """
        Create an instance of the subclass from the set of values required to build it.

        :return:
        """

    @abstractmethod
    def raw_bytes(self) -> bytes:
        """
        Built or stored raw byte representation of this item

        :return:
        """
