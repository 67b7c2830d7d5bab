"""
    Implements encoding and decoding of RawArray file headers.

    This file is part of RawArray.

    RawArray is free software: you can redistribute it and/or modify
    it under the terms of the GNU General Public License as published by
    the Free Software Foundation, either version 3 of the License, or
    (at your option) any later version.

    RawArray is distributed in the hope that it will be useful,
    but WITHOUT ANY WARRANTY; without even the implied warranty of
    MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
    GNU General Public License for more details.

    You should have received a copy of the GNU General Public License
    along with RawArray.  If not, see <https://www.gnu.org/licenses/>.
"""
from enum import IntFlag
from typing import AnyStr, BinaryIO, Iterable, Tuple

import io
import logging
import operator

import numpy as np

from .streams import read_exact, remaining_bytes
from ..errors import (BadMagic, DimensionCountOverflow, InvalidArgument, InvalidEltype, TruncatedFile,
                      UnsupportedFlags)
from .. import config

logger = logging.getLogger(__name__)


class Flags(IntFlag):
    """
    Header flag bits.
    """
    BIG_ENDIAN = config.FLAG_BIG_ENDIAN
    ENCODED = config.FLAG_ENCODED
    BITS = config.FLAG_BITS


def flags_as_string(flags: int) -> str:
    """
    Human readable description of a flags value.
    :param flags: header flags
    :return: space separated flag names
    """
    flags = int(flags)
    names = ['BigEndian' if flags & Flags.BIG_ENDIAN else 'LittleEndian']
    if flags & Flags.ENCODED:
        names.append('RLE')
    if flags & Flags.BITS:
        names.append('BitArray')
    unknown = flags & ~config.ALL_KNOWN_FLAGS
    if unknown:
        names.append(f'Unknown({unknown:#x})')

    return ' '.join(names)


def _check_field(value: int, name: str) -> int:
    try:
        value = operator.index(value)
    except TypeError:
        raise InvalidArgument(f'Expected {name} to be an integer, got {type(value)}.') from None

    if not 0 <= value <= config.MAX_FIELD_VALUE:
        raise InvalidArgument(f'Expected {name} to fit in an unsigned 64-bit integer, got {value}.')

    return value


class Header:
    """
    Represents the header of a RawArray file.
    """
    def __init__(self, eltype: int, elbyte: int, size: int, dims: Iterable[int], flags: int = 0):
        """
        Create a new header, validating every field.
        :param eltype: element type code
        :param elbyte: number of bytes of one element
        :param size: number of bytes of the data segment
        :param dims: extent of each axis, axis 0 varying fastest
        :param flags: flag bits
        """
        self.flags = _check_field(flags, 'flags')
        self.eltype = _check_field(eltype, 'eltype')
        self.elbyte = _check_field(elbyte, 'elbyte')
        self.size = _check_field(size, 'size')
        self.dims: Tuple[int, ...] = tuple(_check_field(dim, 'dimension') for dim in dims)

        if self.eltype not in config.ELTYPES:
            raise InvalidArgument(f'Expected eltype to be one of {config.ELTYPES}, got {self.eltype}.')
        if self.elbyte == 0:
            raise InvalidArgument('Expected elbyte to be strictly positive, got 0.')

    @classmethod
    def for_array(cls, array) -> 'Header':
        """
        Create the header describing an in-memory array.
        The data length is taken as is and never recomputed from the dimensions.
        :param array: RawArray object
        :return: header
        """
        return cls(array.eltype, array.elbyte, len(array.data), array.dims, array.flags)

    @property
    def ndims(self) -> int:
        return len(self.dims)

    @property
    def nelem(self) -> int:
        return int(np.prod(self.dims, dtype=object))

    @property
    def data_offset(self) -> int:
        """
        Position of the first byte of the data segment.
        """
        return config.NUM_BYTES_FIXED_HEADER + config.NUM_BYTES_FIELD * self.ndims

    @property
    def file_length(self) -> int:
        """
        Number of bytes owned by the array, trailing metadata excluded.
        """
        return self.data_offset + self.size

    def tobytes(self) -> bytes:
        """
        Serializes the header.
        :return: fixed fields followed by the dimensions, little endian
        """
        fields = [config.MAGIC_NUMBER, self.flags, self.eltype, self.elbyte, self.size, self.ndims]
        fields.extend(self.dims)

        return np.array(fields, dtype=config.HEADER_DTYPE).tobytes()

    @classmethod
    def frombuffer(cls, buffer: AnyStr, must_understand: int = config.MUST_UNDERSTAND_FLAGS) -> 'Header':
        """
        Deserialize a header from the start of a byte buffer.
        :param buffer: serialized header, possibly followed by data
        :param must_understand: flag bits that make the header unreadable when set but not supported
        :return: header
        """
        return cls.fromfile(io.BytesIO(buffer), must_understand)

    @classmethod
    def fromfile(cls, fp: BinaryIO, must_understand: int = config.MUST_UNDERSTAND_FLAGS) -> 'Header':
        """
        Read a header from the current position of a byte stream.
        The stream is left positioned on the first byte of the data segment.
        :param fp: byte stream
        :param must_understand: flag bits that make the header unreadable when set but not supported
        :return: header
        """
        header_magic_bytes = read_exact(fp, len(config.MAGIC_BYTES))
        if header_magic_bytes != config.MAGIC_BYTES:
            raise BadMagic(f'Expected magic bytes to be {config.MAGIC_BYTES!r}, got {header_magic_bytes!r}, '
                           f'likely not a RawArray file.')

        num_bytes_fields = config.NUM_BYTES_FIXED_HEADER - len(config.MAGIC_BYTES)
        header_fields = read_exact(fp, num_bytes_fields)
        if len(header_fields) < num_bytes_fields:
            raise TruncatedFile(f'Expected {num_bytes_fields} bytes of header fields, got {len(header_fields)}.')

        flags, eltype, elbyte, size, ndims = (int(v) for v in np.frombuffer(header_fields, dtype=config.HEADER_DTYPE))

        unsupported = flags & must_understand & ~config.SUPPORTED_FLAGS
        if unsupported:
            raise UnsupportedFlags(f'Unsupported flags {flags_as_string(unsupported)} encountered in header, '
                                   f'this file was likely written by a newer version of RawArray.')
        if eltype not in config.ELTYPES:
            raise InvalidEltype(f'Expected eltype to be one of {config.ELTYPES}, got {eltype}.')

        remaining = remaining_bytes(fp)
        max_ndims = config.MAX_NDIMS if remaining is None else remaining // config.NUM_BYTES_FIELD
        if ndims > max_ndims:
            raise DimensionCountOverflow(f'Header declares {ndims} dimensions, at most {max_ndims} can be read.')

        num_bytes_dims = config.NUM_BYTES_FIELD * ndims
        header_dims = read_exact(fp, num_bytes_dims)
        if len(header_dims) < num_bytes_dims:
            raise DimensionCountOverflow(f'Header declares {ndims} dimensions, '
                                         f'stream ended after {len(header_dims) // config.NUM_BYTES_FIELD}.')

        dims = np.frombuffer(header_dims, dtype=config.HEADER_DTYPE).tolist()
        logger.debug('Decoded header: eltype=%d elbyte=%d size=%d dims=%s flags=%#x',
                     eltype, elbyte, size, dims, flags)

        return cls(eltype, elbyte, size, dims, flags)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Header):
            return NotImplemented
        return (self.flags, self.eltype, self.elbyte, self.size, self.dims) == \
            (other.flags, other.eltype, other.elbyte, other.size, other.dims)

    def __repr__(self) -> str:
        return f'Header(eltype={self.eltype}, elbyte={self.elbyte}, size={self.size}, dims={self.dims}, ' \
               f'flags={self.flags:#x})'
