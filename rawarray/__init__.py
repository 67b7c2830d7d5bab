"""
    Python implementation of the RawArray file format.

    A RawArray file stores a single n-dimensional array, with no separate metadata file.
    Data is stored in column-major order (the first dimension varies fastest) and every header
    field is a little endian unsigned 64-bit integer:
    <MAGIC><FLAGS><ELTYPE><ELBYTE><SIZE><NDIMS><DIMS><DATA>

    Any bytes following the data segment are left to the user and never read.
"""
from ._hl.array import RawArray
from ._hl.files import File, read, write, load, save, read_header, read_array, write_array
from ._hl.header import Header, Flags
from ._hl.serialization import ScalarKind, OpaqueRecord
from ._hl.axes import permute_axes, to_row_major, from_row_major
from .errors import (RawArrayError, BadMagic, UnsupportedFlags, InvalidEltype, InvalidArgument,
                     DimensionCountOverflow, TruncatedFile, SizeMismatch)
from .version import version as __version__
