"""
    Configuration file

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

"""
    Magic number for format identification, reads "rawarray" in little endian.
"""
MAGIC_NUMBER = 0x7961727261776172
MAGIC_BYTES = MAGIC_NUMBER.to_bytes(8, 'little')

"""
    Every header field is an unsigned 64-bit little endian integer.
"""
HEADER_DTYPE = '<u8'
NUM_BYTES_FIELD = 8
"""
    Fixed part of the header: magic, flags, eltype, elbyte, size, ndims.
"""
NUM_FIXED_FIELDS = 6
NUM_BYTES_FIXED_HEADER = NUM_FIXED_FIELDS * NUM_BYTES_FIELD
"""
    Largest value a header field can hold.
"""
MAX_FIELD_VALUE = (1 << 64) - 1

"""
    Header flag bits.
"""
FLAG_BIG_ENDIAN = 1
FLAG_ENCODED = 2
FLAG_BITS = 4
ALL_KNOWN_FLAGS = FLAG_BIG_ENDIAN | FLAG_ENCODED | FLAG_BITS
"""
    Flag bits a reader has to understand to decode the data correctly.
    No bit is marked yet, so every flags value is passed through unchanged.
"""
MUST_UNDERSTAND_FLAGS = 0
"""
    Flag bits this implementation knows how to honour.
"""
SUPPORTED_FLAGS = 0

"""
    Element type codes.
"""
ELTYPE_USER = 0
ELTYPE_INT = 1
ELTYPE_UINT = 2
ELTYPE_FLOAT = 3
ELTYPE_COMPLEX = 4
ELTYPE_BFLOAT = 5
ELTYPES = (ELTYPE_USER, ELTYPE_INT, ELTYPE_UINT, ELTYPE_FLOAT, ELTYPE_COMPLEX, ELTYPE_BFLOAT)

"""
    Upper bound on the number of dimensions when the stream length is unknown.
"""
MAX_NDIMS = 1 << 16

FILE_EXTENSION = '.ra'
