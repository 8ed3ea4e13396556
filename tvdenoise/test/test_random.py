import numpy as np

import jax

import pytest

from tvdenoise.random import add_noise


class TestAddNoise:
    def setup_method(self, method):
        self.x = np.full((1, 128, 128), 0.5)
        self.sigma = 0.1

    @pytest.mark.parametrize("model", ["gaussian", "laplace", "poisson"])
    def test_std(self, model):
        y, key = add_noise(self.x, model, self.sigma, seed=3)
        assert isinstance(y, np.ndarray)
        assert y.shape == self.x.shape
        assert np.abs(np.std(y - self.x) - self.sigma) < 0.1 * self.sigma
        assert np.abs(np.mean(y - self.x)) < 0.1 * self.sigma

    def test_poisson_nonnegative(self):
        y, _ = add_noise(self.x, "poisson", 0.3)
        assert np.all(y >= 0)

    def test_seed(self):
        y0, _ = add_noise(self.x, "gaussian", self.sigma)
        y1, _ = add_noise(self.x, "gaussian", self.sigma, seed=0)
        y2, _ = add_noise(self.x, "gaussian", self.sigma, seed=1)
        np.testing.assert_array_equal(y0, y1)
        assert not np.array_equal(y0, y2)

    def test_key(self):
        y0, key = add_noise(self.x, "laplace", self.sigma, key=jax.random.PRNGKey(7))
        y1, _ = add_noise(self.x, "laplace", self.sigma, key=key)
        assert not np.array_equal(y0, y1)
        with pytest.raises(ValueError):
            add_noise(self.x, "laplace", self.sigma, key=key, seed=1)

    def test_invalid(self):
        with pytest.raises(ValueError):
            add_noise(self.x, "speckle", self.sigma)
        with pytest.raises(ValueError):
            add_noise(self.x, "gaussian", 0.0)
        with pytest.raises(ValueError):
            add_noise(np.zeros((1, 4, 4)), "poisson", self.sigma)
