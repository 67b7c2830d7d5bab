"""
    Implements the mapping between RawArray element types and numpy types.

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
from collections import namedtuple
from typing import Dict, Mapping, Optional, Sequence, Tuple, Union
from numpy import ndarray
from numpy import dtype

import numpy as np
import ml_dtypes

from ..errors import InvalidArgument
from .. import config

"""
Supported numpy types by (eltype, elbyte), all little endian
"""
dtypes = {
    (config.ELTYPE_INT, 1): np.dtype('<i1'),
    (config.ELTYPE_INT, 2): np.dtype('<i2'),
    (config.ELTYPE_INT, 4): np.dtype('<i4'),
    (config.ELTYPE_INT, 8): np.dtype('<i8'),

    (config.ELTYPE_UINT, 1): np.dtype('<u1'),
    (config.ELTYPE_UINT, 2): np.dtype('<u2'),
    (config.ELTYPE_UINT, 4): np.dtype('<u4'),
    (config.ELTYPE_UINT, 8): np.dtype('<u8'),

    (config.ELTYPE_FLOAT, 2): np.dtype('<f2'),
    (config.ELTYPE_FLOAT, 4): np.dtype('<f4'),
    (config.ELTYPE_FLOAT, 8): np.dtype('<f8'),

    (config.ELTYPE_COMPLEX, 8): np.dtype('<c8'),
    (config.ELTYPE_COMPLEX, 16): np.dtype('<c16'),

    (config.ELTYPE_BFLOAT, 2): np.dtype(ml_dtypes.bfloat16)
}

"""
Element type codes by numpy kind
"""
eltype_kinds = {
    'i': config.ELTYPE_INT,
    'u': config.ELTYPE_UINT,
    'f': config.ELTYPE_FLOAT,
    'c': config.ELTYPE_COMPLEX
}

"""
Element kinds:
    - ScalarKind: a numeric element numpy can represent directly
    - OpaqueRecord: a fixed size record the caller has to describe
"""
ScalarKind = namedtuple('ScalarKind', 'eltype elbyte dtype')
OpaqueRecord = namedtuple('OpaqueRecord', 'elbyte')

"""
Record field description: name -> (byte offset, numpy type)
"""
RecordLayout = Union[Mapping[str, Tuple[int, object]], Sequence[Tuple[str, int, object]]]


def numpy_dtype(eltype: int, elbyte: int) -> Optional[dtype]:
    """
    Numpy type matching an element type, if any.
    :param eltype: element type code
    :param elbyte: number of bytes of one element
    :return: numpy type or None
    """
    return dtypes.get((eltype, elbyte))


def element_kind(eltype: int, elbyte: int) -> Union[ScalarKind, OpaqueRecord]:
    """
    Classify an element type.
    Numeric types without a numpy counterpart (such as 128-bit integers) are handled as opaque records.
    :param eltype: element type code
    :param elbyte: number of bytes of one element
    :return: ScalarKind or OpaqueRecord
    """
    data_type = numpy_dtype(eltype, elbyte)
    if data_type is None:
        return OpaqueRecord(elbyte)

    return ScalarKind(eltype, elbyte, data_type)


def format_eltype(data_type: dtype) -> Tuple[int, int]:
    """
    Converts a numpy array type to a (eltype, elbyte) pair,
     raises an exception if it is not possible.
    :param data_type: numpy array type
    :return: element type code and element width in bytes
    """
    data_type = np.dtype(data_type)

    if data_type == dtypes[(config.ELTYPE_BFLOAT, 2)]:
        return config.ELTYPE_BFLOAT, 2
    if data_type.kind in eltype_kinds:
        key = eltype_kinds[data_type.kind], data_type.itemsize
        # longdouble and clongdouble have no IEEE counterpart in the table
        if key in dtypes:
            return key
        raise TypeError(f'Type {data_type} with {data_type.itemsize} bytes is not supported. '
                        f'Supported numeric types are: {", ".join(sorted(set(eltype_table().values())))}')
    if data_type.kind in ('b', 'V') and data_type.itemsize > 0:
        return config.ELTYPE_USER, data_type.itemsize

    raise TypeError(f'Type {data_type} is not supported. Supported types are numeric, bfloat16, bool and '
                    f'fixed size records.')


def record_dtype(layout: RecordLayout, elbyte: int) -> dtype:
    """
    Build the numpy structured type slicing a fixed size record.
    :param layout: mapping of field name to (offset, type), or sequence of (name, offset, type)
    :param elbyte: number of bytes of one record
    :return: structured numpy type of size `elbyte`
    """
    fields = [(name, offset, field_type) for name, (offset, field_type) in layout.items()] \
        if isinstance(layout, Mapping) else list(layout)

    names, offsets, formats = [], [], []
    for name, offset, field_type in fields:
        field_type = np.dtype(field_type)
        if offset < 0 or offset + field_type.itemsize > elbyte:
            raise InvalidArgument(f'Field {name} at offset {offset} with {field_type.itemsize} bytes '
                                  f'does not fit in a {elbyte}-byte record.')
        names.append(name)
        offsets.append(offset)
        formats.append(field_type)

    return np.dtype({'names': names, 'formats': formats, 'offsets': offsets, 'itemsize': elbyte})


def serialize_array(array: ndarray) -> Tuple[bytes, int, int]:
    """
    Serialize a numpy array to byte string in column-major order.
    :param array: numpy array
    :return: serialized array, element type code and element width
    """
    eltype, elbyte = format_eltype(array.dtype)

    if eltype in eltype_kinds.values() and array.dtype.byteorder in ('>', '='):
        array = array.astype(array.dtype.newbyteorder('<'), copy=False)

    return array.tobytes(order='F'), eltype, elbyte


def eltype_table() -> Dict[Tuple[int, int], str]:
    """
    Names of the supported numeric types, for error messages and display.
    :return: mapping of (eltype, elbyte) to numpy type name
    """
    return {key: value.name for key, value in dtypes.items()}
