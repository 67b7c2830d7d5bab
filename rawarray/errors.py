"""
    Errors raised while encoding and decoding RawArray files.

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


class RawArrayError(Exception):
    """
    Base class of every error raised by the codec.
    """


class BadMagic(RawArrayError, ValueError):
    """
    The stream does not start with the RawArray magic number.
    """


class UnsupportedFlags(RawArrayError, ValueError):
    """
    A flag bit that must be understood is set but not supported.
    """


class InvalidEltype(RawArrayError, ValueError):
    """
    The element type code is outside the defined set.
    """


class InvalidArgument(RawArrayError, ValueError):
    """
    Malformed header field or caller supplied value.
    """


class DimensionCountOverflow(RawArrayError, ValueError):
    """
    The declared number of dimensions cannot fit in the remaining stream.
    """


class TruncatedFile(RawArrayError, EOFError):
    """
    The stream ended before the header or the data segment was complete.
    """


class SizeMismatch(RawArrayError, ValueError):
    """
    The data segment length disagrees with the dimensions and element width.
    """
