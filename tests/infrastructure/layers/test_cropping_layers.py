import unittest
import numpy as np

from src.keydl.domain._errors import ConfigurationError
from src.keydl.infrastructure.engine import Graph
from src.keydl.infrastructure.layers import Cropping1D, Cropping2D, Cropping3D, Input
from src.keydl.infrastructure.models import Sequential


class TestCroppingLayers(unittest.TestCase):
    def test_cropping1d_shape(self):
        layer = Cropping1D((1, 2), name="crop")
        self.assertEqual(layer.build(Graph(), (-1, 4, 3)), (-1, 1, 3))
        self.assertEqual(layer.get_params(), 0)

    def test_cropping2d_three_pairs_rejected_at_construction(self):
        with self.assertRaises(ConfigurationError):
            Cropping2D(((1, 1), (1, 1), (1, 1)))

    def test_cropping3d_pair_size_rejected(self):
        with self.assertRaises(ConfigurationError):
            Cropping3D(((1, 1), (1, 1), (1,)))

    def test_cropping1d_forward_values(self):
        x = np.arange(8, dtype=np.float32).reshape(2, 4, 1)
        with Sequential.of(Input(4, 1), Cropping1D((1, 2))) as model:
            model.compile(loss="mse", metric="mae")
            y = model.predict(x)
        np.testing.assert_array_equal(y, x[:, 1:2, :])

    def test_cropping2d_forward_values(self):
        x = np.random.default_rng(0).standard_normal((2, 6, 5, 3)).astype(np.float32)
        with Sequential.of(Input(6, 5, 3), Cropping2D(((1, 2), (0, 3)))) as model:
            model.compile(loss="mse", metric="mae")
            self.assertEqual(model.layers[0].output_shape, (-1, 3, 2, 3))
            y = model.predict(x)
        np.testing.assert_array_equal(y, x[:, 1:4, 0:2, :])

    def test_cropping3d_forward_values(self):
        x = np.random.default_rng(1).standard_normal((1, 4, 4, 4, 2)).astype(np.float32)
        with Sequential.of(Input(4, 4, 4, 2), Cropping3D(((1, 1), (0, 2), (2, 0)))) as model:
            model.compile(loss="mse", metric="mae")
            y = model.predict(x)
        np.testing.assert_array_equal(y, x[:, 1:3, 0:2, 2:4, :])

    def test_crop_larger_than_input_fails_compile(self):
        model = Sequential.of(Input(3, 1), Cropping1D((2, 1)))
        with self.assertRaises(ConfigurationError):
            model.compile(loss="mse", metric="mae")
        self.assertFalse(model.is_compiled)
        model.close()


if __name__ == "__main__":
    unittest.main()
