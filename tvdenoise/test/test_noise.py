import numpy as np

import pytest

from tvdenoise import functional
from tvdenoise.noise import MIN_LAMBDA, NoiseModel


class TestSet:
    def setup_method(self, method):
        np.random.seed(12345)
        self.models = list(NoiseModel)

    def test_from_name(self):
        assert NoiseModel.from_name("gaussian") is NoiseModel.GAUSSIAN
        assert NoiseModel.from_name("laplace") is NoiseModel.LAPLACE
        assert NoiseModel.from_name("poisson") is NoiseModel.POISSON
        assert NoiseModel.from_name(NoiseModel.LAPLACE) is NoiseModel.LAPLACE

    @pytest.mark.parametrize("name", ["speckle", "Gaussian", "", "gaussian:10"])
    def test_from_name_unrecognized(self, name):
        with pytest.raises(ValueError, match="Unrecognized noise model"):
            NoiseModel.from_name(name)

    def test_names(self):
        assert str(NoiseModel.POISSON) == "poisson"
        assert NoiseModel.GAUSSIAN.title == "Gaussian"

    def test_initial_lambda_gaussian(self):
        sigma = 10 / 255
        lam = NoiseModel.GAUSSIAN.initial_lambda(sigma)
        assert np.abs(lam - (0.7079 / sigma + 0.002686 / sigma**2)) < 1e-12
        assert np.abs(lam - 19.8) < 0.1

    def test_initial_lambda_laplace(self):
        sigma = 0.05
        expected = (-0.00416 * sigma + 0.001301) / (
            ((sigma - 0.2042) * sigma + 0.01635) * sigma + 5.836e-4
        )
        assert np.abs(NoiseModel.LAPLACE.initial_lambda(sigma) - expected) < 1e-10

    def test_initial_lambda_poisson(self):
        sigma = 0.1
        expected = 0.2839 / sigma + 0.001502 / sigma**2
        assert np.abs(NoiseModel.POISSON.initial_lambda(sigma) - expected) < 1e-10

    def test_initial_lambda_floor(self):
        for model in self.models:
            for sigma in np.linspace(0.001, 0.5, 200):
                assert model.initial_lambda(sigma) >= MIN_LAMBDA
        # laplace fit is negative for large sigma
        assert NoiseModel.LAPLACE.initial_lambda(0.5) == MIN_LAMBDA

    def test_initial_lambda_nonpositive_sigma(self):
        for model in self.models:
            with pytest.raises(ValueError):
                model.initial_lambda(0.0)
            with pytest.raises(ValueError):
                model.initial_lambda(-1.0)

    def test_correct_lambda(self):
        assert NoiseModel.GAUSSIAN.correct_lambda(10.0, 0.2, 0.1) == pytest.approx(20.0)
        assert NoiseModel.POISSON.correct_lambda(10.0, 0.05, 0.1) == pytest.approx(5.0)
        assert NoiseModel.LAPLACE.correct_lambda(10.0, 0.4, 0.1) == pytest.approx(20.0)
        for model in self.models:
            assert model.correct_lambda(3.0, 0.1, 0.1) == pytest.approx(3.0)

    def test_correct_lambda_monotonic(self):
        rmse = np.sort(np.random.uniform(0, 0.5, 100))
        for model in self.models:
            lam = [model.correct_lambda(12.0, r, 0.05) for r in rmse]
            assert np.all(np.diff(lam) >= 0)

    def test_fidelity(self):
        y = np.random.rand(1, 4, 5)
        assert isinstance(NoiseModel.GAUSSIAN.fidelity(y, 2.0), functional.SquaredL2Fidelity)
        assert isinstance(NoiseModel.LAPLACE.fidelity(y, 2.0), functional.L1Fidelity)
        f = NoiseModel.POISSON.fidelity(y, 2.0)
        assert isinstance(f, functional.PoissonFidelity)
        assert f.lam == 2.0
