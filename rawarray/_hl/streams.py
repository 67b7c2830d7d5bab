"""
    Helpers for sequential reads on byte streams.

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
from typing import BinaryIO, Optional

import os

"""
    Largest single read request, so that a corrupt length never triggers one huge allocation.
"""
NUM_BYTES_READ_CHUNK = 1 << 24


def remaining_bytes(fp: BinaryIO) -> Optional[int]:
    """
    Number of bytes between the current position and the end of the stream.
    :param fp: byte stream
    :return: number of remaining bytes, or None if the stream cannot tell
    """
    seekable = getattr(fp, 'seekable', None)
    if seekable is None or not seekable():
        return None

    position = fp.tell()
    end = fp.seek(0, os.SEEK_END)
    fp.seek(position)

    return max(end - position, 0)


def read_exact(fp: BinaryIO, length: int) -> bytes:
    """
    Read up to `length` bytes, retrying on short reads until the end of the stream.
    :param fp: byte stream
    :param length: number of bytes to read
    :return: the bytes read, shorter than `length` only at end of stream
    """
    chunks = bytearray()

    while len(chunks) < length:
        chunk = fp.read(min(length - len(chunks), NUM_BYTES_READ_CHUNK))
        if not chunk:
            break
        chunks += chunk

    return bytes(chunks)
