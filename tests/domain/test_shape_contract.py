import unittest

from src.keydl.domain._errors import ConfigurationError, UnsupportedFeatureError
from src.keydl.domain._padding import ConvPadding
from src.keydl.domain._shape import UNKNOWN_DIM, num_elements, shape_to_str
from src.keydl.domain._shape_contract import (
    conv2d_output_shape,
    conv_output_length,
    cropping_output_shape,
    dense_output_shape,
    depthwise_conv2d_output_shape,
    flatten_output_shape,
    normalize_spatial,
    pool2d_output_shape,
    same_padding_amounts,
    validate_cropping,
)


class TestConvOutputLength(unittest.TestCase):
    def test_same_and_valid_matrix(self):
        cases = [
            # (length, kernel, stride, padding, expected)
            (28, 5, 1, ConvPadding.SAME, 28),
            (28, 2, 2, ConvPadding.SAME, 14),
            (7, 2, 2, ConvPadding.SAME, 4),
            (28, 5, 1, ConvPadding.VALID, 24),
            (28, 2, 2, ConvPadding.VALID, 14),
            (7, 3, 2, ConvPadding.VALID, 3),
            (5, 5, 1, ConvPadding.VALID, 1),
        ]
        for length, k, s, p, expected in cases:
            with self.subTest(length=length, kernel=k, stride=s, padding=p):
                self.assertEqual(conv_output_length(length, k, s, p), expected)

    def test_full_padding_is_unsupported(self):
        with self.assertRaises(UnsupportedFeatureError) as ctx:
            conv_output_length(28, 3, 1, ConvPadding.FULL)
        self.assertIn("is not supported", str(ctx.exception))

    def test_valid_kernel_larger_than_input_raises(self):
        with self.assertRaises(ConfigurationError):
            conv_output_length(3, 5, 1, ConvPadding.VALID)

    def test_unknown_extent_stays_unknown(self):
        self.assertEqual(conv_output_length(UNKNOWN_DIM, 3, 1, ConvPadding.SAME), UNKNOWN_DIM)

    def test_same_padding_puts_extra_at_end(self):
        self.assertEqual(same_padding_amounts(28, 5, 1), (2, 2))
        self.assertEqual(same_padding_amounts(7, 2, 2), (0, 1))
        self.assertEqual(same_padding_amounts(8, 2, 2), (0, 0))


class TestNormalizeSpatial(unittest.TestCase):
    def test_accepted_forms(self):
        self.assertEqual(normalize_spatial(2, 2, "strides"), (2, 2))
        self.assertEqual(normalize_spatial((5, 3), 2, "kernel_size"), (5, 3))
        self.assertEqual(normalize_spatial((1, 2, 2, 1), 2, "pool_size"), (2, 2))
        self.assertEqual(normalize_spatial([1, 1, 1, 1], 2, "strides"), (1, 1))

    def test_rejected_forms(self):
        for bad in [(2, 2, 2), (2, 2, 2, 2), (0, 1), (-1, 2), "ab", 0, (1.5, 2)]:
            with self.subTest(value=bad):
                with self.assertRaises(ConfigurationError):
                    normalize_spatial(bad, 2, "strides")


class TestCroppingContract(unittest.TestCase):
    def test_cropping1d_flat_pair(self):
        spec = validate_cropping((1, 2), 1)
        self.assertEqual(spec, ((1, 2),))
        self.assertEqual(cropping_output_shape((UNKNOWN_DIM, 4, 3), spec), (UNKNOWN_DIM, 1, 3))

    def test_output_extent_is_input_minus_left_minus_right(self):
        cases = [
            ((UNKNOWN_DIM, 10, 2), ((2, 3),), (UNKNOWN_DIM, 5, 2)),
            ((UNKNOWN_DIM, 8, 9, 3), ((1, 1), (2, 0)), (UNKNOWN_DIM, 6, 7, 3)),
            ((UNKNOWN_DIM, 4, 5, 6, 1), ((1, 1), (1, 1), (0, 2)), (UNKNOWN_DIM, 2, 3, 4, 1)),
        ]
        for in_shape, cropping, expected in cases:
            with self.subTest(in_shape=in_shape, cropping=cropping):
                spec = validate_cropping(cropping, len(cropping))
                self.assertEqual(cropping_output_shape(in_shape, spec), expected)

    def test_wrong_pair_count(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_cropping(((1, 1), (1, 1), (1, 1)), 2)
        self.assertEqual(str(ctx.exception), "The cropping should be an array of size 2.")

    def test_wrong_pair_size(self):
        with self.assertRaises(ConfigurationError) as ctx:
            validate_cropping(((1, 1), (1, 1, 1)), 2)
        self.assertEqual(
            str(ctx.exception), "All elements of cropping should be arrays of size 2."
        )

    def test_negative_amount(self):
        with self.assertRaises(ConfigurationError):
            validate_cropping(((-1, 1),), 1)

    def test_crop_consuming_axis_raises(self):
        with self.assertRaises(ConfigurationError):
            cropping_output_shape((UNKNOWN_DIM, 3, 1), ((2, 1),))

    def test_rank_mismatch_raises(self):
        with self.assertRaises(ConfigurationError):
            cropping_output_shape((UNKNOWN_DIM, 3, 3, 1), ((1, 1),))


class TestLayerShapes(unittest.TestCase):
    def test_mnist_chain(self):
        conv1 = conv2d_output_shape((UNKNOWN_DIM, 28, 28, 1), (5, 5), (1, 1), ConvPadding.SAME, 32)
        self.assertEqual(conv1, (UNKNOWN_DIM, 28, 28, 32))
        pool1 = pool2d_output_shape(conv1, (2, 2), (2, 2), ConvPadding.SAME)
        self.assertEqual(pool1, (UNKNOWN_DIM, 14, 14, 32))
        flat = flatten_output_shape(pool1)
        self.assertEqual(flat, (6272,))
        self.assertEqual(dense_output_shape(flat, 10), (10,))

    def test_depthwise_multiplies_channels(self):
        out = depthwise_conv2d_output_shape(
            (UNKNOWN_DIM, 8, 8, 3), (3, 3), (2, 2), ConvPadding.VALID, 4
        )
        self.assertEqual(out, (UNKNOWN_DIM, 3, 3, 12))

    def test_conv_rank_mismatch(self):
        with self.assertRaises(ConfigurationError):
            conv2d_output_shape((UNKNOWN_DIM, 28, 28), (3, 3), (1, 1), ConvPadding.SAME, 8)

    def test_flatten_requires_known_extents(self):
        with self.assertRaises(ConfigurationError):
            flatten_output_shape((UNKNOWN_DIM, UNKNOWN_DIM, 3))

    def test_dense_keeps_leading_axes(self):
        self.assertEqual(dense_output_shape((UNKNOWN_DIM, 5, 7), 3), (UNKNOWN_DIM, 5, 3))

    def test_shape_functions_are_pure(self):
        in_shape = (UNKNOWN_DIM, 9, 9, 2)
        a = conv2d_output_shape(in_shape, (3, 3), (2, 2), ConvPadding.SAME, 4)
        b = conv2d_output_shape(in_shape, (3, 3), (2, 2), ConvPadding.SAME, 4)
        self.assertEqual(a, b)
        self.assertEqual(in_shape, (UNKNOWN_DIM, 9, 9, 2))


class TestShapeHelpers(unittest.TestCase):
    def test_shape_to_str(self):
        self.assertEqual(shape_to_str((-1, 28, 28, 32)), "[-1, 28, 28, 32]")
        self.assertEqual(shape_to_str((3136,)), "[3136]")

    def test_num_elements(self):
        self.assertEqual(num_elements((5, 5, 1, 32)), 800)
        self.assertEqual(num_elements(()), 1)
        with self.assertRaises(ValueError):
            num_elements((UNKNOWN_DIM, 3))


if __name__ == "__main__":
    unittest.main()
