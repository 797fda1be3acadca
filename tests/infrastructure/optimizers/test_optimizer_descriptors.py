import unittest

from src.keydl.domain._errors import ConfigurationError
from src.keydl.domain._optimizers import IOptimizer
from src.keydl.infrastructure.optimizers import SGD, Adam, RMSProp, optimizer_from_config


class TestOptimizerDescriptors(unittest.TestCase):
    def test_defaults_are_valid(self):
        for opt in (SGD(), Adam(), RMSProp()):
            with self.subTest(optimizer=type(opt).__name__):
                self.assertIsInstance(opt, IOptimizer)
                opt.validate()

    def test_invalid_hyperparameters(self):
        cases = [
            SGD(lr=0.0),
            SGD(momentum=1.0),
            SGD(nesterov=True),
            Adam(lr=-1e-3),
            Adam(betas=(0.9, 1.0)),
            Adam(eps=0.0),
            Adam(weight_decay=-0.1),
            RMSProp(rho=1.5),
        ]
        for opt in cases:
            with self.subTest(optimizer=opt):
                with self.assertRaises(ConfigurationError):
                    opt.validate()

    def test_config_round_trip(self):
        for opt in (SGD(lr=0.5, momentum=0.9, nesterov=True), Adam(lr=0.01, betas=(0.8, 0.99)), RMSProp(rho=0.95)):
            with self.subTest(optimizer=opt):
                self.assertEqual(optimizer_from_config(opt.get_config()), opt)

    def test_unknown_type(self):
        with self.assertRaises(ConfigurationError):
            optimizer_from_config({"type": "Adagrad"})


if __name__ == "__main__":
    unittest.main()
