"""
    Implements the axis order adaptation between column-major files and numpy arrays.

    RawArray files store data in column-major order: axis 0 varies fastest.
    numpy handles arbitrary strides, so reading is done with zero-copy views whenever possible,
    and the explicit permutation below is only needed by consumers requiring contiguous buffers.

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
from typing import Optional, Sequence, Tuple
from numpy import ndarray
from numpy import dtype

import numpy as np

from ..errors import InvalidArgument, SizeMismatch


def reverse_dims(dims: Sequence[int]) -> Tuple[int, ...]:
    return tuple(reversed(tuple(dims)))


def _num_elements(dims: Sequence[int]) -> int:
    return int(np.prod(tuple(dims), dtype=object))


def _flat_view(data: bytes, dims: Sequence[int], data_type: dtype) -> ndarray:
    data_type = np.dtype(data_type)
    nelem = _num_elements(dims)

    if nelem * data_type.itemsize != len(data):
        raise SizeMismatch(f'Cannot view {len(data)} bytes as {nelem} elements of {data_type.itemsize} bytes '
                           f'with dimensions {tuple(dims)}.')
    if nelem == 0:
        empty = np.empty(0, dtype=data_type)
        empty.setflags(write=False)
        return empty

    return np.frombuffer(data, dtype=data_type, count=nelem)


def column_major_view(data: bytes, dims: Sequence[int], data_type: dtype) -> ndarray:
    """
    View column-major data as an array of shape `dims` without copying.
    :param data: column-major data segment
    :param dims: extent of each axis, axis 0 varying fastest
    :param data_type: numpy type of one element
    :return: Fortran-ordered read-only view
    """
    return _flat_view(data, dims, data_type).reshape(tuple(dims), order='F')


def row_major_view(data: bytes, dims: Sequence[int], data_type: dtype) -> ndarray:
    """
    View column-major data as a C-contiguous array with the axes reversed, without copying.
    :param data: column-major data segment
    :param dims: extent of each axis, axis 0 varying fastest
    :param data_type: numpy type of one element
    :return: C-ordered read-only view of shape `reversed(dims)`
    """
    return _flat_view(data, dims, data_type).reshape(reverse_dims(dims), order='C')


def permute_axes(data: bytes, dims: Sequence[int], elbyte: int,
                 axes: Optional[Sequence[int]] = None) -> Tuple[Tuple[int, ...], bytes]:
    """
    Physically permute the axes of column-major data, moving whole `elbyte`-sized elements.
    Output axis k is input axis axes[k], and the output is column-major again.
    :param data: column-major data segment
    :param dims: extent of each axis, axis 0 varying fastest
    :param elbyte: number of bytes of one element
    :param axes: permutation of the axes, reversed order if None
    :return: permuted dimensions and data
    """
    dims = tuple(int(dim) for dim in dims)
    ndims = len(dims)
    axes = tuple(reversed(range(ndims))) if axes is None else tuple(int(axis) for axis in axes)

    if sorted(axes) != list(range(ndims)):
        raise InvalidArgument(f'Expected a permutation of {ndims} axes, got {axes}.')
    if elbyte <= 0:
        raise InvalidArgument(f'Expected elbyte to be strictly positive, got {elbyte}.')

    permuted_dims = tuple(dims[axis] for axis in axes)
    if ndims < 2:
        return permuted_dims, bytes(data)

    blocks = _flat_view(data, dims, np.dtype((np.void, elbyte)))
    if blocks.size == 0:
        return permuted_dims, b''

    # coordinates of every output element, then the input element they come from
    permuted_coords = np.unravel_index(np.arange(blocks.size), permuted_dims, order='F')
    coords = [None] * ndims
    for permuted_axis, axis in enumerate(axes):
        coords[axis] = permuted_coords[permuted_axis]
    source_index = np.ravel_multi_index(coords, dims, order='F')

    return permuted_dims, blocks[source_index].tobytes()


def to_row_major(data: bytes, dims: Sequence[int], elbyte: int) -> bytes:
    """
    Reorder column-major data so that it reads in row-major order with the same dimensions.
    :param data: column-major data segment
    :param dims: extent of each axis
    :param elbyte: number of bytes of one element
    :return: row-major data
    """
    return permute_axes(data, dims, elbyte)[1]


def from_row_major(data: bytes, dims: Sequence[int], elbyte: int) -> bytes:
    """
    Reorder row-major data into column-major order with the same dimensions.
    :param data: row-major data
    :param dims: extent of each axis
    :param elbyte: number of bytes of one element
    :return: column-major data segment
    """
    return permute_axes(data, reverse_dims(dims), elbyte)[1]
