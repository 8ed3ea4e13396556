import numpy as np

import imageio.v3 as iio
import pytest

from tvdenoise import cli
from tvdenoise.noise import NoiseModel


@pytest.fixture
def clean_image(tmp_path):
    x = np.full((20, 20), 60, dtype=np.uint8)
    x[5:15, 5:15] = 190
    path = tmp_path / "clean.png"
    iio.imwrite(path, x)
    return str(path)


class TestParseModel:
    def test_model_only(self):
        assert cli.parse_model("laplace") == (NoiseModel.LAPLACE, None)

    def test_sigma(self):
        model, sigma = cli.parse_model("gaussian:10")
        assert model is NoiseModel.GAUSSIAN
        assert sigma == pytest.approx(10 / 255)

    @pytest.mark.parametrize("arg", ["speckle:10", "gaussian:abc", "gaussian:0", "poisson:-3", ""])
    def test_invalid(self, arg):
        with pytest.raises(ValueError):
            cli.parse_model(arg)


class TestDenoiseCommand:
    def test_usage(self, capsys):
        assert cli.main([]) == 0
        assert "usage: tvdenoise" in capsys.readouterr().out

    def test_help(self, capsys):
        with pytest.raises(SystemExit) as exc:
            cli.main(["-h"])
        assert exc.value.code == 0
        out = capsys.readouterr().out
        assert "laplace" in out and "poisson" in out

    @pytest.mark.parametrize(
        "options",
        [
            ["-n", "gaussian"],
            ["-n", "gaussian:10", "-l", "5"],
            ["-n", "speckle:10"],
            ["-l", "-2"],
            ["-l", "5", "-q", "0"],
        ],
    )
    def test_config_error(self, tmp_path, clean_image, capsys, options):
        out = tmp_path / "out.png"
        assert cli.main(options + [clean_image, str(out)]) == 1
        assert capsys.readouterr().err.startswith("Error:")
        assert not out.exists()

    def test_missing_input(self, tmp_path, capsys):
        assert cli.main(["-l", "5", str(tmp_path / "none.png"), str(tmp_path / "out.png")]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_lambda(self, tmp_path, clean_image):
        out = tmp_path / "out.png"
        assert cli.main(["-n", "laplace", "-l", "2", clean_image, str(out)]) == 0
        assert iio.imread(out).shape == (20, 20)

    def test_constant_image(self, tmp_path):
        flat = tmp_path / "flat.png"
        iio.imwrite(flat, np.full((16, 16), 128, dtype=np.uint8))
        out = tmp_path / "out.png"
        assert cli.main(["-n", "gaussian:10", str(flat), str(out)]) == 0
        np.testing.assert_array_equal(iio.imread(out), iio.imread(flat))

    def test_sigma(self, tmp_path, clean_image, capsys):
        noisy = str(tmp_path / "noisy.png")
        out = tmp_path / "out.png"
        assert cli.imnoise_main(["gaussian:15", clean_image, noisy]) == 0
        assert cli.main(["-n", "gaussian:15", noisy, str(out)]) == 0
        assert "Tuning lambda..." in capsys.readouterr().out
        assert out.exists()


class TestImnoiseCommand:
    def test_usage(self, capsys):
        assert cli.imnoise_main([]) == 0
        assert "usage: imnoise" in capsys.readouterr().out

    def test_seed(self, tmp_path, clean_image):
        paths = [str(tmp_path / f"noisy{k}.png") for k in range(3)]
        assert cli.imnoise_main(["laplace:20", clean_image, paths[0]]) == 0
        assert cli.imnoise_main(["laplace:20", clean_image, paths[1]]) == 0
        assert cli.imnoise_main(["--seed", "5", "laplace:20", clean_image, paths[2]]) == 0
        imgs = [iio.imread(p) for p in paths]
        np.testing.assert_array_equal(imgs[0], imgs[1])
        assert not np.array_equal(imgs[0], imgs[2])

    def test_missing_sigma(self, tmp_path, clean_image, capsys):
        assert cli.imnoise_main(["poisson", clean_image, str(tmp_path / "n.png")]) == 1
        assert "Error:" in capsys.readouterr().err


class TestImdiffCommand:
    def test_identical(self, clean_image, capsys):
        assert cli.imdiff_main([clean_image, clean_image]) == 0
        out = capsys.readouterr().out
        assert "Maximum absolute difference:  0" in out
        assert "Root mean squared error:      0.0000" in out
        assert "Mean absolute error:          0.0000" in out

    def test_difference(self, tmp_path, clean_image, capsys):
        other = tmp_path / "other.png"
        x = iio.imread(clean_image).copy()
        x[0, 0] += 10
        iio.imwrite(other, x)
        assert cli.imdiff_main([clean_image, str(other)]) == 0
        out = capsys.readouterr().out
        assert "Maximum absolute difference:  10" in out
        assert f"Root mean squared error:      {10 / 20:.4f}" in out
        assert f"Mean absolute error:          {10 / 400:.4f}" in out
        assert "Signal-to-noise ratio:" in out

    def test_gray_vs_rgb(self, tmp_path, clean_image, capsys):
        rgb = tmp_path / "rgb.png"
        x = np.stack([iio.imread(clean_image)] * 3, axis=-1)
        x[0, 0, 0] = 0
        iio.imwrite(rgb, x)
        assert cli.imdiff_main([clean_image, str(rgb)]) == 0

    def test_shape_mismatch(self, tmp_path, clean_image, capsys):
        small = tmp_path / "small.png"
        iio.imwrite(small, np.zeros((4, 4), dtype=np.uint8))
        assert cli.imdiff_main([clean_image, str(small)]) == 1
        assert "Error:" in capsys.readouterr().err
