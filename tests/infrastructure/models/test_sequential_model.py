import json
import logging
import unittest
import numpy as np

from src.keydl.domain._errors import (
    ConfigurationError,
    DoubleCompileError,
    ModelDisposedError,
    UninitializedModelError,
)
from src.keydl.domain._losses import LossFunctions, Metrics
from src.keydl.domain._padding import ConvPadding
from src.keydl.infrastructure.layers import (
    Conv2D,
    Dense,
    DepthwiseConv2D,
    Flatten,
    Input,
    MaxPool2D,
)
from src.keydl.infrastructure.models import ModelState, Sequential
from src.keydl.infrastructure.optimizers import SGD, Adam


def mnist_layers():
    return [
        Input(28, 28, 1),
        Conv2D(32, (5, 5), (1, 1, 1, 1), ConvPadding.SAME),
        MaxPool2D((1, 2, 2, 1), (1, 2, 2, 1), ConvPadding.SAME),
        Conv2D(64, (5, 5), (1, 1, 1, 1), ConvPadding.SAME),
        MaxPool2D((1, 2, 2, 1), (1, 2, 2, 1), ConvPadding.SAME),
        Flatten(),
        Dense(512),
        Dense(10, activation="linear"),
    ]


class TestSequentialMnist(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.model = Sequential.of(*mnist_layers())
        cls.model.compile(
            SGD(lr=0.1),
            LossFunctions.SOFT_MAX_CROSS_ENTROPY_WITH_LOGITS,
            Metrics.ACCURACY,
        )

    @classmethod
    def tearDownClass(cls) -> None:
        cls.model.close()

    def test_params_per_layer(self):
        params = [layer.get_params() for layer in self.model.layers]
        self.assertEqual(params, [832, 0, 51264, 0, 0, 1606144, 5130])
        self.assertEqual(self.model.count_params(), sum(params))

    def test_output_shapes(self):
        shapes = [layer.output_shape for layer in self.model.layers]
        self.assertEqual(
            shapes,
            [
                (-1, 28, 28, 32),
                (-1, 14, 14, 32),
                (-1, 14, 14, 64),
                (-1, 7, 7, 64),
                (3136,),
                (512,),
                (10,),
            ],
        )

    def test_generated_names(self):
        names = [layer.name for layer in self.model.layers]
        self.assertEqual(
            names,
            ["conv2d_1", "maxpool2d_2", "conv2d_3", "maxpool2d_4", "flatten_5", "dense_6", "dense_7"],
        )
        self.assertEqual(self.model.input_layer.name, "input_0")

    def test_summary_rows(self):
        rows = self.model.summary()
        self.assertEqual(len(rows), 7)
        self.assertEqual(rows[0], "conv2d_1(Conv2D)             [-1, 28, 28, 32]          832")
        self.assertEqual(rows[4], f"{'flatten_5(Flatten)':<29}{'[3136]':<26}0")
        self.assertEqual(rows[6], f"{'dense_7(Dense)':<29}{'[10]':<26}5130")

    def test_summary_is_logged(self):
        with self.assertLogs("src.keydl.infrastructure.models._sequential", level=logging.INFO) as cm:
            self.model.summary()
        text = "\n".join(cm.output)
        self.assertIn("Total params: 1663370", text)
        self.assertIn("conv2d_1(Conv2D)", text)

    def test_predict_shapes(self):
        x = np.random.default_rng(0).standard_normal((3, 28, 28, 1)).astype(np.float32)
        y = self.model.predict(x)
        self.assertEqual(y.shape, (3, 10))
        np.testing.assert_allclose(self.model.predict(x, batch_size=2), y, rtol=1e-5, atol=1e-5)
        self.assertEqual(self.model.predict_classes(x).shape, (3,))

    def test_evaluate_returns_loss_and_metric(self):
        x = np.random.default_rng(1).standard_normal((4, 28, 28, 1)).astype(np.float32)
        y = np.eye(10, dtype=np.float32)[[0, 1, 2, 3]]
        result = self.model.evaluate(x, y)
        self.assertEqual(set(result), {"loss", "accuracy"})
        self.assertGreaterEqual(result["accuracy"], 0.0)
        self.assertLessEqual(result["accuracy"], 1.0)
        self.assertTrue(np.isfinite(result["loss"]))

    def test_get_layer(self):
        self.assertIs(self.model.get_layer("dense_6"), self.model.layers[5])
        with self.assertRaises(KeyError):
            self.model.get_layer("nope")


class TestSequentialLifecycle(unittest.TestCase):
    def small_model(self):
        return Sequential.of(Input(4), Dense(3, activation="linear"), Dense(2, activation="softmax"))

    def test_queries_before_compile_raise(self):
        model = self.small_model()
        self.assertEqual(model.state, ModelState.CREATED)
        for call in (model.count_params, model.summary, model.get_weights):
            with self.subTest(call=call.__name__):
                with self.assertRaises(UninitializedModelError):
                    call()
        with self.assertRaises(UninitializedModelError):
            model.predict(np.zeros((1, 4), np.float32))
        with self.assertRaises(UninitializedModelError):
            model.layers[0].get_params()

    def test_double_compile(self):
        model = self.small_model().compile(Adam(), "mse", "mae")
        with self.assertRaises(DoubleCompileError):
            model.compile(Adam(), "mse", "mae")
        model.close()

    def test_use_after_close(self):
        model = self.small_model()
        model.compile()
        model.close()
        model.close()
        self.assertTrue(model.is_closed)
        for call in (
            model.count_params,
            model.summary,
            lambda: model.compile(),
            lambda: model.predict(np.zeros((1, 4), np.float32)),
            lambda: model.add(Dense(1)),
            lambda: model.layers,
        ):
            with self.subTest(call=call):
                with self.assertRaises(ModelDisposedError):
                    call()

    def test_close_before_compile(self):
        model = self.small_model()
        model.close()
        with self.assertRaises(ModelDisposedError):
            model.compile()

    def test_context_manager_releases_session(self):
        with self.small_model() as model:
            model.compile(loss="mse", metric="mse")
            session = model._require_session()
        self.assertTrue(model.is_closed)
        self.assertTrue(session.closed)

    def test_context_manager_closes_on_error(self):
        model = self.small_model()
        with self.assertRaises(RuntimeError):
            with model:
                raise RuntimeError("boom")
        self.assertTrue(model.is_closed)

    def test_failed_compile_resets_layers(self):
        model = Sequential.of(Input(3, 3, 1), Conv2D(2, (5, 5), padding=ConvPadding.VALID))
        with self.assertRaises(ConfigurationError):
            model.compile()
        self.assertEqual(model.state, ModelState.CREATED)
        self.assertFalse(model.layers[0].is_built)
        model.close()

    def test_invalid_optimizer_settings(self):
        model = self.small_model()
        with self.assertRaises(ConfigurationError):
            model.compile(SGD(lr=-1.0))
        with self.assertRaises(ConfigurationError):
            model.compile(object())
        with self.assertRaises(ConfigurationError):
            model.compile(loss="hinge")
        self.assertFalse(model.is_compiled)
        model.close()

    def test_first_layer_must_be_input(self):
        with self.assertRaises(ConfigurationError):
            Sequential.of(Dense(3))
        with self.assertRaises(ConfigurationError):
            Sequential.of(Input(3), Input(3))

    def test_compile_requires_a_layer_after_input(self):
        model = Sequential.of(Input(3))
        with self.assertRaises(ConfigurationError):
            model.compile()
        model.close()

    def test_layer_belongs_to_one_model(self):
        dense = Dense(2)
        Sequential.of(Input(3), dense)
        with self.assertRaises(ConfigurationError):
            Sequential.of(Input(3), dense)

    def test_add_after_compile_rejected(self):
        model = self.small_model().compile()
        with self.assertRaises(ConfigurationError):
            model.add(Dense(1))
        model.close()

    def test_trainable_and_frozen_params(self):
        model = self.small_model()
        model.layers[0].is_trainable = False
        model.compile(loss="mse", metric="mae")
        self.assertEqual(model.frozen_params(), 4 * 3 + 3)
        self.assertEqual(model.trainable_params(), 3 * 2 + 2)
        self.assertEqual(model.count_params(), model.frozen_params() + model.trainable_params())
        model.close()


class TestSequentialWeights(unittest.TestCase):
    def test_set_and_get_weights(self):
        with Sequential.of(Input(2), Dense(2, activation="linear")) as model:
            model.compile(loss="mse", metric="mae")
            kernel = np.array([[1.0, 2.0], [3.0, 4.0]], dtype=np.float32)
            bias = np.array([0.5, -0.5], dtype=np.float32)
            model.set_weights([kernel, bias])
            got = model.get_weights()
            np.testing.assert_array_equal(got[0], kernel)
            np.testing.assert_array_equal(got[1], bias)
            y = model.predict(np.array([[1.0, 1.0]], dtype=np.float32))
            np.testing.assert_allclose(y, [[4.5, 5.5]])

    def test_predict_empty_batch(self):
        with Sequential.of(Input(4), Dense(2)) as model:
            model.compile()
            x = np.zeros((0, 4), np.float32)
            self.assertEqual(model.predict(x).shape, (0, 2))
            self.assertEqual(model.predict(x, batch_size=2).shape, (0, 2))

    def test_set_weights_accepts_generator(self):
        with Sequential.of(Input(2), Dense(2, activation="linear")) as model:
            model.compile(loss="mse", metric="mae")
            model.set_weights(np.full(w.shape, 2.0, np.float32) for w in model.get_weights())
            np.testing.assert_array_equal(model.get_weights()[0], np.full((2, 2), 2.0))

    def test_set_weights_count_mismatch(self):
        with Sequential.of(Input(2), Dense(2)) as model:
            model.compile()
            with self.assertRaises(ConfigurationError):
                model.set_weights([np.zeros((2, 2), np.float32)])

    def test_layer_weights_through_model_session(self):
        with Sequential.of(Input(2), Dense(3)) as model:
            model.compile()
            layer = model.layers[0]
            kernel, bias = layer.get_weights()
            self.assertEqual(kernel.shape, (2, 3))
            layer.set_weights([np.ones((2, 3), np.float32), np.zeros(3, np.float32)])
            np.testing.assert_array_equal(layer.get_weights()[0], np.ones((2, 3)))


class TestArchitectureConfig(unittest.TestCase):
    def test_json_round_trip(self):
        model = Sequential.of(*mnist_layers())
        model.compile(Adam(lr=0.01), "softmax_cross_entropy_with_logits", "accuracy")
        text = model.to_json()
        model.close()

        cfg = json.loads(text)
        self.assertEqual(cfg["layers"][1]["type"], "Conv2D")
        self.assertEqual(cfg["compile"]["optimizer"]["type"], "Adam")

        rebuilt = Sequential.from_json(text)
        self.assertFalse(rebuilt.is_compiled)
        self.assertEqual(
            [layer.name for layer in rebuilt.layers],
            ["conv2d_1", "maxpool2d_2", "conv2d_3", "maxpool2d_4", "flatten_5", "dense_6", "dense_7"],
        )
        rebuilt.compile(**rebuilt.compile_config)
        self.assertEqual(rebuilt.optimizer, Adam(lr=0.01))
        self.assertEqual(rebuilt.count_params(), 1663370)
        rebuilt.close()

    def test_frozen_layers_survive_round_trip(self):
        layers = mnist_layers()
        layers[1].is_trainable = False
        layers[6].is_trainable = False
        model = Sequential.of(*layers).compile()
        frozen, trainable = model.frozen_params(), model.trainable_params()
        text = model.to_json()
        model.close()

        self.assertEqual(frozen, 832 + 1606144)
        self.assertFalse(json.loads(text)["layers"][6]["config"]["trainable"])
        self.assertNotIn("trainable", json.loads(text)["layers"][7]["config"])

        rebuilt = Sequential.from_json(text)
        self.assertEqual(
            [layer.is_trainable for layer in rebuilt.layers],
            [False, True, True, True, True, False, True],
        )
        rebuilt.compile()
        self.assertEqual(rebuilt.frozen_params(), frozen)
        self.assertEqual(rebuilt.trainable_params(), trainable)
        rebuilt.close()

    def test_frozen_depthwise_config(self):
        layer = DepthwiseConv2D((3, 3), depth_multiplier=2, name="dw")
        layer.is_trainable = False
        rebuilt = DepthwiseConv2D.from_config(layer.get_config())
        self.assertFalse(rebuilt.is_trainable)
        self.assertEqual(rebuilt.depth_multiplier, 2)
        self.assertTrue(DepthwiseConv2D.from_config(DepthwiseConv2D().get_config()).is_trainable)


if __name__ == "__main__":
    unittest.main()
