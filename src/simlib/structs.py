#
#  arm64sim | simlib
#  structs.py
#
#  Custom Struct implementation reflecting behavior of named tuples while also handling behind-the-scenes
#    packing/unpacking
#
#  This file is part of arm64sim. arm64sim is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#

# Field sizes carry their type in the upper bits so size calc stays a mask operation.
type_mask = 0xffff0000
size_mask = 0xffff

type_uint = 0
type_sint = 0x10000
type_bytes = 0x30000

uint8_t = 1
uint16_t = 2
uint32_t = 4
uint64_t = 8

int8_t = type_sint | 1
int16_t = type_sint | 2
int32_t = type_sint | 4
int64_t = type_sint | 8

# bytes_t[n] is an opaque n byte field, kept exactly as read. Text assigned to one is NUL padded on encode.
bytes_t = [type_bytes | i for i in range(65)]


class StructDecodeError(Exception):
    """
    Raised when there are fewer bytes available than a struct type needs.
    """


def _bytes_to_hex(data) -> str:
    return data.hex()


def _uint_to_int(uint, bits):
    """
    Assume an int was read from binary as an unsigned int,

    decode it as a two's compliment signed integer

    :param uint:
    :param bits:
    :return:
    """
    if (uint & (1 << (bits - 1))) != 0:
        uint = uint - (1 << bits)
    return uint


# noinspection PyUnresolvedReferences
class Struct:
    """
    Custom namedtuple-esque Struct representation. Can be unpacked from bytes or manually created with existing
        field values

    Subclasses declare a FIELDS mapping of field name -> field size. Fields are exposed as read-write attributes,
        and the byte representation is rebuilt from them on every access to the .raw property, so a decoded struct
        can be edited in place and re-encoded.

    """

    @classmethod
    def size(cls):
        if not hasattr(cls, '___SIZE'):
            size = 0
            for _, value in cls.FIELDS.items():
                size += value & size_mask
            setattr(cls, '___SIZE', size)
        return getattr(cls, '___SIZE')

    # noinspection PyProtectedMember
    @staticmethod
    def create_with_bytes(struct_class, raw, byte_order="little"):
        """
        Unpack a struct from raw bytes

        :param struct_class: Struct subclass
        :param raw: Bytes
        :param byte_order: Little/Big Endian Struct Unpacking
        :return: struct_class Instance
        :raises: StructDecodeError if raw is shorter than the struct
        """
        size = struct_class.size()
        if len(raw) < size:
            raise StructDecodeError(f'{struct_class.__name__} needs {size} bytes, got {len(raw)}')

        instance: Struct = struct_class(byte_order)
        current_off = 0
        raw = bytes(raw[:size])

        for field in instance._fields:
            value = instance._field_sizes[field]
            field_type = type_mask & value
            field_size = size_mask & value

            data = raw[current_off:current_off + field_size]
            instance._field_offsets[field] = current_off

            if field_type == type_bytes:
                field_value = bytes(data)
            elif field_type == type_sint:
                field_value = _uint_to_int(int.from_bytes(data, byte_order), field_size * 8)
            else:
                field_value = int.from_bytes(data, byte_order)

            setattr(instance, field, field_value)
            current_off += field_size

        instance.initialized = True
        return instance

    @staticmethod
    def create_with_values(struct_class, values, byte_order="little"):
        """
        Pack/Create a struct given field values

        :param byte_order:
        :param struct_class: Struct subclass
        :param values: List of values, in FIELDS order
        :return: struct_class Instance
        """

        instance: Struct = struct_class(byte_order)

        # noinspection PyProtectedMember
        for i, field in enumerate(instance._fields):
            setattr(instance, field, values[i])

        instance.initialized = True
        return instance

    @property
    def type_name(self):
        return self.__class__.__name__

    def field_size(self, field) -> int:
        return self._field_sizes[field] & size_mask

    @property
    def raw(self) -> bytes:
        raw = bytearray()
        for field in self._fields:
            size = self._field_sizes[field]
            field_type = type_mask & size
            field_size = size_mask & size

            field_dat = getattr(self, field)

            if isinstance(field_dat, str):
                data = field_dat.encode('utf-8')[:field_size]
                data += b'\x00' * (field_size - len(data))
            elif isinstance(field_dat, (bytes, bytearray)):
                data = bytes(field_dat).ljust(field_size, b'\x00')[:field_size]
            elif field_type == type_sint:
                data = field_dat.to_bytes(field_size, byteorder=self.byte_order, signed=True)
            else:
                data = field_dat.to_bytes(field_size, byteorder=self.byte_order)

            raw += data

        return bytes(raw)

    def __eq__(self, other):
        if self.__class__ is not other.__class__:
            return False
        for field in self._fields:
            if getattr(self, field) != getattr(other, field):
                return False
        return True

    def __ne__(self, other):
        return not self.__eq__(other)

    def __repr__(self):
        return str(self)

    def __str__(self):
        text = f'{self.__class__.__name__}('
        for field in self._fields:
            attr = getattr(self, field)
            if isinstance(attr, int):
                field_item = hex(attr)
            else:
                field_item = attr
            text += f'{field}={field_item}, '
        return text[:-2] + ')'

    def serialize(self):
        struct_dict = {'type': self.__class__.__name__}

        for field in self._fields:
            field_item = getattr(self, field)
            if isinstance(field_item, (bytes, bytearray)):
                field_item = _bytes_to_hex(field_item)
            struct_dict[field] = field_item

        return struct_dict

    def __init__(self, byte_order="little"):
        if not hasattr(self.__class__, 'FIELDS'):
            raise AssertionError(
                "Do not use the bare Struct class; it must be implemented in an actual type; Missing FIELDS")

        self.initialized = False
        self._fields = list(self.__class__.FIELDS.keys())
        self.byte_order = byte_order

        self._field_sizes = dict(self.__class__.FIELDS)
        self._field_offsets = {}

        self.off = 0
