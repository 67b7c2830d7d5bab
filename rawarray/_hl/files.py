"""
    Implements high-level support for file objects.

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
from typing import BinaryIO, Optional, Type, Union
from types import TracebackType
from numpy import ndarray

import logging
import os

from .array import RawArray
from .header import Header
from .streams import read_exact, remaining_bytes
from ..errors import SizeMismatch, TruncatedFile
from .. import config

logger = logging.getLogger(__name__)

PathOrStream = Union[str, os.PathLike, BinaryIO]


def write_array(fp: BinaryIO, array: RawArray) -> int:
    """
    Write the header then the data segment, with no padding, at the current position of a stream.
    I/O errors are propagated as is and a partially written file is left in place.
    :param fp: writable byte stream
    :param array: RawArray object
    :return: number of bytes written
    """
    header = Header.for_array(array)

    fp.write(header.tobytes())
    fp.write(array.data)

    logger.debug('Wrote %d bytes: %r', header.file_length, header)

    return header.file_length


def read_array(fp: BinaryIO, strict: bool = False, must_understand: int = config.MUST_UNDERSTAND_FLAGS) -> RawArray:
    """
    Read an array from the current position of a stream.
    Bytes following the data segment are neither read nor reported.
    :param fp: readable byte stream
    :param strict: reject numeric arrays whose data length differs from the dimensions times the element width
    :param must_understand: flag bits that make the file unreadable when set but not supported
    :return: RawArray object
    """
    header = Header.fromfile(fp, must_understand)

    remaining = remaining_bytes(fp)
    if remaining is not None and remaining < header.size:
        raise TruncatedFile(f'Header declares {header.size} bytes of data, only {remaining} bytes remain.')

    data = read_exact(fp, header.size)
    if len(data) < header.size:
        raise TruncatedFile(f'Header declares {header.size} bytes of data, stream ended after {len(data)} bytes.')

    expected_size = header.nelem * header.elbyte
    if header.eltype != config.ELTYPE_USER and expected_size != header.size:
        if strict:
            raise SizeMismatch(f'Expected {expected_size} bytes of data for dimensions {header.dims} with '
                               f'{header.elbyte}-byte elements, got {header.size}.')
        logger.debug('Data size %d differs from dimensions %s times elbyte %d.',
                     header.size, header.dims, header.elbyte)

    return RawArray.from_header(header, data)


class File:
    """
        Represents a RawArray file, holding a single array.
    """
    def __init__(self, file_path: Union[str, os.PathLike], mode: str):
        """
        Create a new file object.
        :param file_path: path to the file on disk
        :param mode: opening mode (currently, only "r" or "w" supported)
        """
        self._file_path = file_path
        self._mode = mode
        self._fp = None
        self._header: Optional[Header] = None
        self._written = False

        self.open(file_path, mode)

    def open(self, file_path: Union[str, os.PathLike], mode: str):
        """
        Open the array file.
        :param file_path: path to the file on disk
        :param mode: opening mode (currently, only "r" or "w" supported)
        :return:
        """
        if mode not in ('r', 'w'):
            raise ValueError(f'Expected File opening mode to be "r" or "w", got {mode}.')

        if self._fp is not None:
            self.close()

        self._file_path = file_path
        self._mode = mode
        self._header = None
        self._written = False

        self._fp = open(self._file_path, self._mode + 'b')

    def __enter__(self):
        """
        Return File object when using a "with" statement.
        :return: File object
        """
        return self

    def __exit__(self, exception_type: Optional[Type[BaseException]], exception_value: Optional[BaseException],
                 traceback: Optional[TracebackType]):
        """
        Explicitly close the File when exiting a "with" context.
        :param exception_type: type of exception
        :param exception_value: value of exception
        :param traceback: traceback
        :return:
        """
        self.close()

    def close(self):
        """
        Close file object.
        Needs to be called explicitly or use a "with" statement.
        :return:
        """
        if self._fp is None:
            return
        if self._fp.closed:
            return

        self._fp.close()

    def validate_file_handle(self, mode):
        if mode == 'r':
            message = 'Trying to read an array from'
        elif mode == 'w':
            message = 'Trying to write an array to'
        else:
            raise ValueError(f'Unknown mode "{mode}"')

        if self._fp is None:
            raise IOError(f'{message} a non initialized file.')
        if self._fp.closed:
            raise IOError(f'{message} a closed file.')
        if self._mode != mode:
            raise IOError(f'File is expected to be opened in "{mode}" mode, got "{self._mode}".')

    @property
    def header(self) -> Header:
        """
        Header of the file, read on first access.
        :return: header
        """
        self.validate_file_handle('r')

        if self._header is None:
            self._fp.seek(0)
            self._header = Header.fromfile(self._fp)

        return self._header

    def read(self, strict: bool = False) -> RawArray:
        """
        Read the array stored in the file.
        :param strict: reject numeric arrays whose data length differs from the dimensions times the element width
        :return: RawArray object
        """
        self.validate_file_handle('r')

        self._fp.seek(0)
        array = read_array(self._fp, strict=strict)
        self._header = array.header

        return array

    def write(self, array: Union[RawArray, ndarray]):
        """
        Write the array to the file.
        :param array: RawArray object or numpy array
        :return:
        """
        self.validate_file_handle('w')

        if self._written:
            raise IOError(f'An array was already written to {self._file_path}.')
        if isinstance(array, ndarray):
            array = RawArray.from_ndarray(array)
        if not isinstance(array, RawArray):
            raise ValueError(f'Expected array type to be RawArray or ndarray, got {type(array)}.')

        self._fp.seek(0)
        write_array(self._fp, array)
        self._written = True


def read(source: PathOrStream, strict: bool = False) -> RawArray:
    """
    Read an array from a path or a readable byte stream.
    :param source: path to the file on disk or byte stream
    :param strict: reject numeric arrays whose data length differs from the dimensions times the element width
    :return: RawArray object
    """
    if isinstance(source, (str, os.PathLike)):
        with File(source, 'r') as fp_ra:
            return fp_ra.read(strict=strict)

    return read_array(source, strict=strict)


def write(destination: PathOrStream, array: Union[RawArray, ndarray]):
    """
    Write an array to a path or a writable byte stream.
    :param destination: path to the file on disk or byte stream
    :param array: RawArray object or numpy array
    :return:
    """
    if isinstance(destination, (str, os.PathLike)):
        with File(destination, 'w') as fp_ra:
            fp_ra.write(array)
        return

    if isinstance(array, ndarray):
        array = RawArray.from_ndarray(array)
    write_array(destination, array)


def read_header(source: PathOrStream) -> Header:
    """
    Validate a file and read its header without loading the data.
    :param source: path to the file on disk or byte stream
    :return: header
    """
    if isinstance(source, (str, os.PathLike)):
        with File(source, 'r') as fp_ra:
            return fp_ra.header

    return Header.fromfile(source)


def load(source: PathOrStream, dtype=None, order: str = 'F') -> ndarray:
    """
    Read a numpy array.
    :param source: path to the file on disk or byte stream
    :param dtype: type of the array to decode (if specified, overrides the type given by the header),
     required for user-defined element types such as the ones `save` writes for bool arrays
    :param order: "F" for the file dimensions with Fortran strides, "C" for the reversed dimensions
    :return: read-only numpy array
    """
    return read(source).to_ndarray(dtype=dtype, order=order)


def save(destination: PathOrStream, array: ndarray):
    """
    Write a numpy array, keeping its shape as file dimensions.
    The format has no boolean type: bool arrays are written as user-defined 1-byte elements
    and need `load(..., dtype=bool)` to be read back.
    :param destination: path to the file on disk or byte stream
    :param array: numpy array
    :return:
    """
    write(destination, RawArray.from_ndarray(array))
