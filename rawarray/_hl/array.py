"""
    Implements the in-memory RawArray object.

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
from typing import Iterable, Optional, Sequence, Union
from numpy import ndarray

import numpy as np

from .axes import column_major_view, permute_axes, row_major_view
from .header import Header, flags_as_string
from .serialization import (OpaqueRecord, RecordLayout, ScalarKind, element_kind, eltype_table, record_dtype,
                            serialize_array)
from ..errors import InvalidArgument, SizeMismatch
from .. import config


class RawArray:
    """
    Represents an n-dimensional array as stored in a RawArray file:
    element type, element width, dimensions (axis 0 varying fastest) and the raw data segment.
    """
    def __init__(self, data: bytes = b'', eltype: int = config.ELTYPE_USER, elbyte: int = 1,
                 dims: Optional[Iterable[int]] = None, flags: int = 0):
        """
        Create a new array owning a copy of `data`.
        :param data: column-major data segment
        :param eltype: element type code
        :param elbyte: number of bytes of one element
        :param dims: extent of each axis, a single axis spanning the data if None
        :param flags: header flag bits
        """
        if isinstance(data, ndarray):
            raise TypeError('Expected data to be a bytes-like object, got ndarray. '
                            'Use RawArray.from_ndarray to keep the array memory layout.')

        data = bytes(data)
        if dims is None:
            dims = (len(data) // elbyte,) if elbyte else (0,)

        header = Header(eltype, elbyte, len(data), dims, flags)

        self.flags: int = header.flags
        self.eltype: int = header.eltype
        self.elbyte: int = header.elbyte
        self.dims = header.dims
        self.data: bytes = data

    @classmethod
    def from_header(cls, header: Header, data: bytes) -> 'RawArray':
        return cls(data, header.eltype, header.elbyte, header.dims, header.flags)

    @classmethod
    def from_ndarray(cls, array: ndarray) -> 'RawArray':
        """
        Create a new array from a numpy array, keeping its shape as dimensions.
        :param array: numpy array of any memory layout
        :return: RawArray object
        """
        array = np.asarray(array)
        data, eltype, elbyte = serialize_array(array)

        return cls(data, eltype, elbyte, array.shape)

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def ndims(self) -> int:
        return len(self.dims)

    @property
    def nelem(self) -> int:
        return int(np.prod(self.dims, dtype=object))

    @property
    def header(self) -> Header:
        return Header.for_array(self)

    @property
    def kind(self) -> Union[ScalarKind, OpaqueRecord]:
        return element_kind(self.eltype, self.elbyte)

    def reshape(self, new_dims: Sequence[int]):
        """
        Change the dimensions, keeping the number of elements.
        :param new_dims: new extent of each axis
        :return:
        """
        new_dims = tuple(new_dims)
        new_nelem = int(np.prod(new_dims, dtype=object))
        if new_nelem != self.nelem:
            raise InvalidArgument(f'Cannot reshape {self.nelem} elements with dimensions {self.dims} '
                                  f'to {new_nelem} elements with dimensions {new_dims}.')

        self.dims = Header(self.eltype, self.elbyte, self.size, new_dims, self.flags).dims

    def clone_with_data(self, data: bytes) -> 'RawArray':
        """
        Create a new array with the same type and dimensions but new data.
        :param data: new data segment
        :return: RawArray object
        """
        return RawArray(data, self.eltype, self.elbyte, self.dims, self.flags)

    def to_ndarray(self, dtype=None, order: str = 'F', copy: bool = False) -> ndarray:
        """
        View the data as a numpy array.
        :param dtype: numpy type of one element (if specified, overrides the type given by eltype)
        :param order: "F" for shape `dims` with Fortran strides, "C" for the C-contiguous view of shape `reversed(dims)`
        :param copy: return a writable copy instead of a read-only view
        :return: numpy array
        """
        if dtype is None:
            kind = self.kind
            if isinstance(kind, OpaqueRecord):
                raise TypeError(f'No numpy type for eltype {self.eltype} with {self.elbyte} bytes, pass a dtype '
                                f'or a record layout. Supported types are: {eltype_table()}')
            dtype = kind.dtype

        dtype = np.dtype(dtype)
        if dtype.itemsize != self.elbyte:
            raise InvalidArgument(f'Type {dtype} has {dtype.itemsize} bytes, elements have {self.elbyte} bytes.')

        if order == 'F':
            array = column_major_view(self.data, self.dims, dtype)
        elif order == 'C':
            array = row_major_view(self.data, self.dims, dtype)
        else:
            raise ValueError(f'Expected order to be "F" or "C", got {order}.')

        return array.copy(order='K') if copy else array

    def records(self, layout: RecordLayout, order: str = 'F') -> ndarray:
        """
        Slice the data into fixed size records described by the caller.
        :param layout: mapping of field name to (byte offset, numpy type), or sequence of (name, offset, type)
        :param order: "F" or "C", as for `to_ndarray`
        :return: structured numpy array
        """
        return self.to_ndarray(record_dtype(layout, self.elbyte), order=order)

    def transpose(self, axes: Optional[Sequence[int]] = None) -> 'RawArray':
        """
        Create a new array with physically permuted axes.
        :param axes: permutation of the axes, reversed order if None
        :return: RawArray object
        """
        dims, data = permute_axes(self.data, self.dims, self.elbyte, axes)

        return RawArray(data, self.eltype, self.elbyte, dims, self.flags)

    def __eq__(self, other) -> bool:
        if not isinstance(other, RawArray):
            return NotImplemented
        return (self.flags, self.eltype, self.elbyte, self.dims, self.data) == \
            (other.flags, other.eltype, other.elbyte, other.dims, other.data)

    def __repr__(self) -> str:
        return f'RawArray(eltype={self.eltype}, elbyte={self.elbyte}, size={self.size}, dims={self.dims}, ' \
               f'flags={self.flags:#x})'

    def __str__(self) -> str:
        kind = self.kind
        try:
            data = self.to_ndarray() if isinstance(kind, ScalarKind) else self.data
        except SizeMismatch:
            data = self.data

        return '\n'.join([
            f'flags: {flags_as_string(self.flags)}',
            f'eltype: {self.eltype}',
            f'elbyte: {self.elbyte}',
            f'size: {self.size}',
            f'ndims: {self.ndims}',
            f'dims: {list(self.dims)}',
            f'data: {data}'
        ])
