import io
import os
import tempfile
import unittest
import numpy as np
import ml_dtypes
from numpy import ndarray
import rawarray
from rawarray import (File, RawArray, OpaqueRecord, ScalarKind, BadMagic, InvalidArgument, TruncatedFile,
                      SizeMismatch)
from rawarray import config


NUMERIC_TYPES = ['int8', 'int16', 'int32', 'int64', 'uint8', 'uint16', 'uint32', 'uint64',
                 'float16', 'float32', 'float64', 'complex64', 'complex128']
SHAPES = [(7,), (3, 5), (2, 3, 4), (0, 4), ()]
RECORD_TYPE = np.dtype([('index', '<i4'), ('value', '<f8')])


def random_array(shape, dtype) -> ndarray:
    values = np.random.randint(0, 100, size=shape)
    if np.dtype(dtype).kind == 'c':
        values = values + 1j * np.random.randint(0, 100, size=shape)
    return np.asarray(values).astype(dtype)


class RaFileTestEnvironment:
    def setUp(self):
        self.tmp_dir = tempfile.TemporaryDirectory()
        self.ra_path = os.path.join(self.tmp_dir.name, 'array' + config.FILE_EXTENSION)

    def tearDown(self):
        self.tmp_dir.cleanup()

    def assert_round_trip(self, array: RawArray):
        rawarray.write(self.ra_path, array)
        self.assertEqual(rawarray.read(self.ra_path), array)


class TestRoundTrip(RaFileTestEnvironment, unittest.TestCase):
    def test_numeric_types(self):
        for dtype in NUMERIC_TYPES:
            for shape in SHAPES:
                with self.subTest(dtype=dtype, shape=shape):
                    expected = random_array(shape, dtype)
                    rawarray.save(self.ra_path, expected)
                    array = rawarray.load(self.ra_path)

                    self.assertEqual(array.shape, expected.shape)
                    self.assertEqual(array.dtype, expected.dtype)
                    assert np.all(array == expected)

    def test_bfloat16(self):
        expected = np.array([[np.pi, np.e], [np.log(2), 6.02e23]], dtype=ml_dtypes.bfloat16)
        rawarray.save(self.ra_path, expected)

        header = rawarray.read_header(self.ra_path)
        self.assertEqual((header.eltype, header.elbyte), (config.ELTYPE_BFLOAT, 2))
        array = rawarray.load(self.ra_path)
        self.assertEqual(array.dtype, expected.dtype)
        self.assertEqual(array.tobytes(order='F'), expected.tobytes(order='F'))

    def test_records(self):
        expected = np.zeros(6, dtype=RECORD_TYPE)
        expected['index'] = np.arange(6)
        expected['value'] = np.linspace(0.0, 1.0, 6)
        rawarray.save(self.ra_path, expected.reshape(2, 3))

        array = rawarray.read(self.ra_path)
        self.assertEqual((array.eltype, array.elbyte), (config.ELTYPE_USER, 12))
        self.assertEqual(array.kind, OpaqueRecord(12))

        records = array.records({'index': (0, '<i4'), 'value': (4, '<f8')})
        assert np.all(records['index'] == expected.reshape(2, 3)['index'])
        assert np.all(records['value'] == expected.reshape(2, 3)['value'])

    def test_opaque_payload(self):
        payload = bytes(range(30))
        self.assert_round_trip(RawArray(payload, config.ELTYPE_USER, 3, dims=[2, 5]))
        self.assert_round_trip(RawArray(payload, config.ELTYPE_USER, 3, dims=[7]))
        self.assert_round_trip(RawArray(b'', config.ELTYPE_FLOAT, 8, dims=[0, 3]))
        self.assert_round_trip(RawArray(payload[:16], config.ELTYPE_INT, 16, flags=4))

    def test_stream(self):
        stream = io.BytesIO()
        expected = random_array((3, 4), 'float64')
        rawarray.write(stream, expected)

        stream.seek(0)
        assert np.all(rawarray.load(stream) == expected)

    def test_four_floats(self):
        rawarray.save(self.ra_path, np.array([1.0, 2.0, 3.0, 4.0], dtype=np.float32))

        self.assertEqual(os.path.getsize(self.ra_path), 72)
        self.assertEqual(rawarray.load(self.ra_path).tolist(), [1.0, 2.0, 3.0, 4.0])

    def test_complex_column_major(self):
        values = (np.arange(12) + 1j * np.arange(12, 24)).astype(np.complex64)
        array = RawArray(values.tobytes(), config.ELTYPE_COMPLEX, 8, dims=[2, 6])
        self.assert_round_trip(array)

        matrix = rawarray.read(self.ra_path).to_ndarray()
        self.assertEqual(matrix.shape, (2, 6))
        for i in range(12):
            self.assertEqual(matrix[i % 2, i // 2], values[i])

        rawarray.save(self.ra_path, matrix)
        with open(self.ra_path, 'rb') as fp:
            fp.seek(rawarray.read_header(self.ra_path).data_offset)
            self.assertEqual(fp.read(), values.tobytes())


class FailingSink(io.BytesIO):
    """
    Writable stream failing on its second write, like a disk filling up after the header.
    """
    def __init__(self, error):
        super().__init__()
        self.error = error
        self.num_writes = 0

    def write(self, data):
        self.num_writes += 1
        if self.num_writes > 1:
            raise self.error
        return super().write(data)


class TestWriteErrors(unittest.TestCase):
    def test_write_array_propagates(self):
        error = OSError(28, 'No space left on device')
        sink = FailingSink(error)

        with self.assertRaises(OSError) as context:
            rawarray.write_array(sink, RawArray.from_ndarray(np.arange(4, dtype=np.int32)))
        self.assertIs(context.exception, error)
        self.assertEqual(len(sink.getvalue()), 56)

    def test_write_propagates(self):
        error = OSError(5, 'Input/output error')

        with self.assertRaises(OSError) as context:
            rawarray.write(FailingSink(error), np.arange(4, dtype=np.int32))
        self.assertIs(context.exception, error)


class TestTrailingBytes(RaFileTestEnvironment, unittest.TestCase):
    def setUp(self):
        super().setUp()
        self.expected = RawArray.from_ndarray(random_array((4, 3), 'int32'))
        rawarray.write(self.ra_path, self.expected)

    def test_volatile_metadata_ignored(self):
        with open(self.ra_path, 'ab') as fp:
            fp.write(b'{"author": "someone", "created": "yesterday"}')

        self.assertEqual(rawarray.read(self.ra_path), self.expected)
        self.assertGreater(os.path.getsize(self.ra_path), self.expected.header.file_length)

    def test_truncated_data(self):
        with open(self.ra_path, 'rb') as fp:
            buffer = fp.read()

        with self.assertRaises(TruncatedFile):
            rawarray.read(io.BytesIO(buffer[:-1]))
        self.assertEqual(rawarray.read(io.BytesIO(buffer)), self.expected)

    def test_truncated_data_non_seekable(self):
        with open(self.ra_path, 'rb') as fp:
            buffer = fp.read()

        read_fd, write_fd = os.pipe()
        os.write(write_fd, buffer[:-4])
        os.close(write_fd)
        with os.fdopen(read_fd, 'rb') as pipe:
            with self.assertRaises(TruncatedFile):
                rawarray.read(pipe)

    def test_bad_magic(self):
        with open(self.ra_path, 'r+b') as fp:
            fp.write(b'RAWARRAY')

        with self.assertRaises(BadMagic):
            rawarray.read(self.ra_path)


class TestStrictRead(RaFileTestEnvironment, unittest.TestCase):
    def test_numeric_size_mismatch(self):
        rawarray.write(self.ra_path, RawArray(bytes(12), config.ELTYPE_FLOAT, 4, dims=[4]))

        self.assertEqual(rawarray.read(self.ra_path).size, 12)
        with self.assertRaises(SizeMismatch):
            rawarray.read(self.ra_path, strict=True)

    def test_user_defined_exempt(self):
        array = RawArray(bytes(12), config.ELTYPE_USER, 4, dims=[4])
        rawarray.write(self.ra_path, array)

        self.assertEqual(rawarray.read(self.ra_path, strict=True), array)


class TestFileHandle(RaFileTestEnvironment, unittest.TestCase):
    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            File(self.ra_path, 'a')

    def test_wrong_mode(self):
        with File(self.ra_path, 'w') as fp_ra:
            with self.assertRaises(IOError):
                fp_ra.read()
            fp_ra.write(np.arange(3))

        with File(self.ra_path, 'r') as fp_ra:
            with self.assertRaises(IOError):
                fp_ra.write(np.arange(3))

    def test_single_array(self):
        with File(self.ra_path, 'w') as fp_ra:
            fp_ra.write(np.arange(3))
            with self.assertRaises(IOError):
                fp_ra.write(np.arange(3))

    def test_closed_file(self):
        fp_ra = File(self.ra_path, 'w')
        fp_ra.close()
        with self.assertRaises(IOError):
            fp_ra.write(np.arange(3))

    def test_header(self):
        rawarray.save(self.ra_path, random_array((2, 3, 4), 'uint16'))

        with File(self.ra_path, 'r') as fp_ra:
            header = fp_ra.header
            self.assertEqual(header.dims, (2, 3, 4))
            self.assertEqual(header.size, 48)
            self.assertEqual(fp_ra.read().header, header)


class TestRawArray(unittest.TestCase):
    def test_default_dims(self):
        array = RawArray(bytes(8), config.ELTYPE_UINT, 2)
        self.assertEqual(array.dims, (4,))
        self.assertEqual((array.size, array.ndims, array.nelem), (8, 1, 4))
        self.assertEqual(array.kind, ScalarKind(config.ELTYPE_UINT, 2, np.dtype('<u2')))

    def test_invalid_arguments(self):
        with self.assertRaises(InvalidArgument):
            RawArray(bytes(8), config.ELTYPE_UINT, 0)
        with self.assertRaises(InvalidArgument):
            RawArray(bytes(8), 9, 1)

    def test_reshape(self):
        array = RawArray.from_ndarray(np.arange(6, dtype=np.int16))
        array.reshape([2, 3])
        self.assertEqual(array.dims, (2, 3))

        with self.assertRaises(InvalidArgument):
            array.reshape([4, 2])

    def test_clone_with_data(self):
        array = RawArray.from_ndarray(np.zeros((2, 2), dtype=np.float32))
        clone = array.clone_with_data(np.ones(4, dtype=np.float32).tobytes())

        self.assertEqual(clone.dims, array.dims)
        assert np.all(clone.to_ndarray() == 1.0)

    def test_to_ndarray(self):
        expected = random_array((2, 3), 'int32')
        array = RawArray.from_ndarray(expected)

        view = array.to_ndarray()
        self.assertFalse(view.flags.writeable)
        self.assertTrue(view.flags.f_contiguous)
        assert np.all(view == expected)

        transposed = array.to_ndarray(order='C')
        self.assertTrue(transposed.flags.c_contiguous)
        assert np.all(transposed == expected.T)

        copied = array.to_ndarray(copy=True)
        self.assertTrue(copied.flags.writeable)

        assert np.all(array.to_ndarray(dtype='<u4') == expected.astype(np.uint32))
        with self.assertRaises(InvalidArgument):
            array.to_ndarray(dtype='<i2')
        with self.assertRaises(ValueError):
            array.to_ndarray(order='A')

    def test_opaque_without_type(self):
        array = RawArray(bytes(6), config.ELTYPE_USER, 3)
        with self.assertRaises(TypeError):
            array.to_ndarray()

    def test_unsupported_type(self):
        with self.assertRaises(TypeError):
            RawArray.from_ndarray(np.array(['a', 'b']))

    def test_extended_precision_rejected(self):
        if np.dtype(np.longdouble).itemsize == 8:
            self.skipTest('longdouble is double precision on this platform')

        for data_type in (np.longdouble, np.clongdouble):
            with self.subTest(dtype=data_type):
                with self.assertRaises(TypeError):
                    RawArray.from_ndarray(np.array([1.5, 2.5], dtype=data_type))

    def test_bool(self):
        stream = io.BytesIO()
        rawarray.save(stream, np.array([True, False, True]))

        stream.seek(0)
        with self.assertRaises(TypeError):
            rawarray.load(stream)
        stream.seek(0)
        self.assertEqual(rawarray.load(stream, dtype=bool).tolist(), [True, False, True])

    def test_ndarray_data_rejected(self):
        array = np.asfortranarray(np.arange(6, dtype=np.int32).reshape(2, 3))

        with self.assertRaises(TypeError):
            RawArray(array, config.ELTYPE_INT, 4, dims=(2, 3))
        assert np.all(RawArray.from_ndarray(array).to_ndarray() == array)

    def test_big_endian_input(self):
        expected = np.arange(5, dtype='>i4')
        array = RawArray.from_ndarray(expected)

        self.assertEqual(array.data, np.arange(5, dtype='<i4').tobytes())

    def test_str(self):
        text = str(RawArray.from_ndarray(np.array([1, 2], dtype=np.uint8)))

        self.assertIn('flags: LittleEndian', text)
        self.assertIn('eltype: 2', text)
        self.assertIn('dims: [2]', text)
        self.assertIn('data: [1 2]', text)


if __name__ == '__main__':
    unittest.main()
