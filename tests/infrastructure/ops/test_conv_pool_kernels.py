import unittest
import numpy as np

from src.keydl.domain._padding import ConvPadding
from src.keydl.infrastructure.ops.array_cpu import slice_cpu
from src.keydl.infrastructure.ops.conv2d_cpu import (
    conv2d_forward_cpu,
    depthwise_conv2d_forward_cpu,
    pad_nhwc,
)
from src.keydl.infrastructure.ops.loss_cpu import (
    accuracy_cpu,
    mse_cpu,
    softmax_cross_entropy_with_logits_cpu,
)
from src.keydl.infrastructure.ops.pool2d_cpu import (
    avgpool2d_forward_cpu,
    maxpool2d_forward_cpu,
)


def conv2d_valid_reference(x, w, stride):
    """Naive loop reference for VALID padding."""
    N, H, W, C = x.shape
    kh, kw, _, F = w.shape
    sh, sw = stride
    Ho = (H - kh) // sh + 1
    Wo = (W - kw) // sw + 1
    y = np.zeros((N, Ho, Wo, F), dtype=np.float64)
    for n in range(N):
        for i in range(Ho):
            for j in range(Wo):
                patch = x[n, i * sh : i * sh + kh, j * sw : j * sw + kw, :]
                for f in range(F):
                    y[n, i, j, f] = np.sum(patch * w[:, :, :, f])
    return y


class TestConv2dKernel(unittest.TestCase):
    def setUp(self) -> None:
        self.rng = np.random.default_rng(0)

    def test_valid_matches_reference(self):
        cases = [
            # (x_shape, w_shape, stride)
            ((2, 6, 6, 3), (3, 3, 3, 4), (1, 1)),
            ((1, 7, 5, 2), (2, 3, 2, 3), (2, 1)),
            ((1, 8, 8, 1), (5, 5, 1, 2), (3, 3)),
        ]
        for x_shape, w_shape, stride in cases:
            with self.subTest(x_shape=x_shape, w_shape=w_shape, stride=stride):
                x = self.rng.standard_normal(x_shape).astype(np.float32)
                w = self.rng.standard_normal(w_shape).astype(np.float32)
                y = conv2d_forward_cpu(x, w, strides=stride, padding=ConvPadding.VALID)
                np.testing.assert_allclose(
                    y, conv2d_valid_reference(x, w, stride), rtol=1e-4, atol=1e-4
                )

    def test_same_preserves_extent_at_unit_stride(self):
        x = self.rng.standard_normal((1, 28, 28, 1)).astype(np.float32)
        w = self.rng.standard_normal((5, 5, 1, 8)).astype(np.float32)
        y = conv2d_forward_cpu(x, w, strides=(1, 1), padding=ConvPadding.SAME)
        self.assertEqual(y.shape, (1, 28, 28, 8))
        self.assertEqual(y.dtype, np.float32)

    def test_same_equals_valid_on_padded_input(self):
        x = self.rng.standard_normal((1, 7, 7, 2)).astype(np.float32)
        w = self.rng.standard_normal((2, 2, 2, 3)).astype(np.float32)
        y = conv2d_forward_cpu(x, w, strides=(2, 2), padding=ConvPadding.SAME)
        x_pad = pad_nhwc(x, (2, 2), (2, 2), ConvPadding.SAME)
        np.testing.assert_allclose(
            y, conv2d_valid_reference(x_pad, w, (2, 2)), rtol=1e-4, atol=1e-4
        )
        self.assertEqual(y.shape, (1, 4, 4, 3))

    def test_channel_mismatch_raises(self):
        with self.assertRaises(ValueError):
            conv2d_forward_cpu(
                np.zeros((1, 4, 4, 2), np.float32),
                np.zeros((3, 3, 3, 1), np.float32),
                strides=(1, 1),
                padding=ConvPadding.SAME,
            )


class TestDepthwiseConv2dKernel(unittest.TestCase):
    def test_each_channel_uses_its_own_filters(self):
        rng = np.random.default_rng(1)
        x = rng.standard_normal((2, 5, 5, 3)).astype(np.float32)
        w = rng.standard_normal((3, 3, 3, 2)).astype(np.float32)
        y = depthwise_conv2d_forward_cpu(x, w, strides=(1, 1), padding=ConvPadding.VALID)
        self.assertEqual(y.shape, (2, 3, 3, 6))
        for c in range(3):
            for m in range(2):
                ref = conv2d_valid_reference(x[..., c : c + 1], w[:, :, c : c + 1, m : m + 1], (1, 1))
                np.testing.assert_allclose(y[..., c * 2 + m], ref[..., 0], rtol=1e-4, atol=1e-4)


class TestPool2dKernels(unittest.TestCase):
    def test_maxpool_valid(self):
        x = np.arange(16, dtype=np.float32).reshape(1, 4, 4, 1)
        y = maxpool2d_forward_cpu(x, pool_size=(2, 2), strides=(2, 2), padding=ConvPadding.VALID)
        np.testing.assert_array_equal(y[0, :, :, 0], [[5, 7], [13, 15]])

    def test_maxpool_same_ignores_padding_for_negative_inputs(self):
        x = -np.ones((1, 3, 3, 1), dtype=np.float32)
        y = maxpool2d_forward_cpu(x, pool_size=(2, 2), strides=(2, 2), padding=ConvPadding.SAME)
        self.assertEqual(y.shape, (1, 2, 2, 1))
        np.testing.assert_array_equal(y, -np.ones((1, 2, 2, 1), dtype=np.float32))

    def test_avgpool_same_excludes_padding(self):
        x = np.ones((1, 3, 3, 2), dtype=np.float32)
        y = avgpool2d_forward_cpu(x, pool_size=(2, 2), strides=(2, 2), padding=ConvPadding.SAME)
        np.testing.assert_allclose(y, np.ones((1, 2, 2, 2), dtype=np.float32))

    def test_avgpool_valid(self):
        x = np.arange(16, dtype=np.float32).reshape(1, 4, 4, 1)
        y = avgpool2d_forward_cpu(x, pool_size=(2, 2), strides=(2, 2), padding=ConvPadding.VALID)
        np.testing.assert_allclose(y[0, :, :, 0], [[2.5, 4.5], [10.5, 12.5]])


class TestArrayAndLossKernels(unittest.TestCase):
    def test_slice_with_to_end_extent(self):
        x = np.arange(24).reshape(2, 4, 3)
        y = slice_cpu(x, begin=(0, 1, 0), size=(-1, 1, -1))
        np.testing.assert_array_equal(y, x[:, 1:2, :])

    def test_slice_out_of_range(self):
        with self.assertRaises(ValueError):
            slice_cpu(np.zeros((1, 4, 1)), begin=(0, 3, 0), size=(-1, 2, -1))

    def test_softmax_cross_entropy_uniform_logits(self):
        logits = np.zeros((2, 4), dtype=np.float32)
        labels = np.eye(4, dtype=np.float32)[[0, 3]]
        self.assertAlmostEqual(
            float(softmax_cross_entropy_with_logits_cpu(logits, labels)), np.log(4.0), places=5
        )

    def test_accuracy_and_mse(self):
        pred = np.array([[0.9, 0.1], [0.2, 0.8]], dtype=np.float32)
        labels = np.array([[1.0, 0.0], [1.0, 0.0]], dtype=np.float32)
        self.assertAlmostEqual(float(accuracy_cpu(pred, labels)), 0.5)
        self.assertAlmostEqual(float(mse_cpu(pred, labels)), (0.01 + 0.01 + 0.64 + 0.64) / 4, places=5)

    def test_loss_shape_mismatch(self):
        with self.assertRaises(ValueError):
            mse_cpu(np.zeros((2, 3)), np.zeros((2, 2)))


if __name__ == "__main__":
    unittest.main()
