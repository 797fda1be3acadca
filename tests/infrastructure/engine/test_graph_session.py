import unittest
import numpy as np

from src.keydl.domain._engine import IGraph, ISession
from src.keydl.infrastructure.engine import Graph, KernelRegistry, Session


class TestGraph(unittest.TestCase):
    def test_satisfies_capability_interfaces(self):
        g = Graph()
        self.assertIsInstance(g, IGraph)
        self.assertIsInstance(Session(g), ISession)

    def test_explicit_name_collision_raises(self):
        g = Graph()
        g.placeholder("x", (-1, 3))
        with self.assertRaises(ValueError):
            g.create_variable("x", (3,))

    def test_generated_names_are_unique(self):
        g = Graph()
        x = g.placeholder("x", (-1, 3))
        a = g.build_op("relu", x)
        b = g.build_op("relu", x)
        self.assertNotEqual(a.name, b.name)
        self.assertIn(a.name, g)
        self.assertIn(b.name, g)

    def test_unknown_op_kind_fails_at_build_time(self):
        g = Graph()
        x = g.placeholder("x", (-1, 3))
        with self.assertRaises(KeyError):
            g.build_op("does_not_exist", x)

    def test_variable_requires_known_shape(self):
        g = Graph()
        with self.assertRaises(ValueError):
            g.create_variable("w", (-1, 3))

    def test_operands_from_other_graph_are_rejected(self):
        g1, g2 = Graph(), Graph()
        x = g1.placeholder("x", (-1, 3))
        with self.assertRaises(ValueError):
            g2.build_op("relu", x)

    def test_kernel_registry_lists_core_ops(self):
        kinds = KernelRegistry.available()
        for kind in ("conv2d", "depthwise_conv2d", "max_pool", "avg_pool", "matmul", "slice"):
            self.assertIn(kind, kinds)


class TestSession(unittest.TestCase):
    def setUp(self) -> None:
        self.g = Graph()
        self.x = self.g.placeholder("x", (-1, 3))
        self.w = self.g.create_variable(
            "w", (3, 2), np.float32, lambda shape, dtype=None: np.ones(shape, dtype=dtype)
        )
        self.b = self.g.create_variable("b", (2,))
        y = self.g.build_op("matmul", self.x, self.w)
        self.y = self.g.build_op("bias_add", y, self.b)
        self.sess = Session(self.g)
        self.sess.initialize_variables()

    def tearDown(self) -> None:
        self.sess.close()

    def test_run_fetch_evaluates_graph(self):
        x = np.array([[1.0, 2.0, 3.0]], dtype=np.float32)
        (out,) = self.sess.run_fetch([self.y], {self.x: x})
        np.testing.assert_allclose(out, [[6.0, 6.0]])

    def test_fetch_by_name_and_feed_by_name(self):
        x = np.zeros((2, 3), dtype=np.float32)
        out, w = self.sess.run_fetch([self.y.name, "w"], {"x": x})
        self.assertEqual(out.shape, (2, 2))
        np.testing.assert_array_equal(w, np.ones((3, 2), dtype=np.float32))

    def test_assign_replaces_value(self):
        self.sess.assign("b", np.array([1.0, -1.0], dtype=np.float32))
        (out,) = self.sess.run_fetch([self.y], {self.x: np.zeros((1, 3), np.float32)})
        np.testing.assert_allclose(out, [[1.0, -1.0]])

    def test_assign_shape_mismatch(self):
        with self.assertRaises(ValueError):
            self.sess.assign("b", np.zeros((3,), dtype=np.float32))

    def test_fetched_variables_are_copies(self):
        (w,) = self.sess.run_fetch(["w"])
        w[:] = 5.0
        (w_again,) = self.sess.run_fetch(["w"])
        np.testing.assert_array_equal(w_again, np.ones((3, 2), dtype=np.float32))

    def test_missing_feed_raises(self):
        with self.assertRaises(ValueError):
            self.sess.run_fetch([self.y])

    def test_feed_shape_checked(self):
        with self.assertRaises(ValueError):
            self.sess.run_fetch([self.y], {self.x: np.zeros((1, 4), np.float32)})

    def test_uninitialized_variable_raises(self):
        g = Graph()
        v = g.create_variable("v", (2,))
        with Session(g) as sess:
            with self.assertRaises(RuntimeError):
                sess.run_fetch([v])

    def test_closed_session_rejects_use(self):
        self.sess.close()
        self.sess.close()
        self.assertTrue(self.sess.closed)
        with self.assertRaises(RuntimeError):
            self.sess.run_fetch(["w"])


if __name__ == "__main__":
    unittest.main()
