import numpy as np

import imageio.v3 as iio
import pytest

from tvdenoise.image import Image, is_grayscale, read_image, write_image


class TestImage:
    def setup_method(self, method):
        np.random.seed(12345)

    def test_attributes(self):
        img = Image(np.zeros((3, 4, 5)))
        assert (img.num_channels, img.height, img.width) == (3, 4, 5)
        assert img.shape == (3, 4, 5)
        u = img.empty_like()
        assert u.shape == img.shape and u.data is not img.data

    @pytest.mark.parametrize(
        "data", [np.zeros((4, 5)), np.zeros((0, 4, 5)), np.zeros((1, 4, 5), dtype=np.uint8)]
    )
    def test_invalid(self, data):
        with pytest.raises(ValueError):
            Image(data)

    def test_is_grayscale(self):
        x = np.random.rand(1, 4, 4)
        assert is_grayscale(np.repeat(x, 3, axis=0))
        y = np.repeat(x, 3, axis=0)
        y[2, 1, 1] += 0.1
        assert not is_grayscale(y)


class TestImageIO:
    def setup_method(self, method):
        np.random.seed(12345)

    def test_rgb_roundtrip(self, tmp_path):
        data = np.round(255 * np.random.rand(3, 6, 7)) / 255
        path = str(tmp_path / "rgb.png")
        write_image(Image(data), path)
        img = read_image(path)
        assert img.shape == (3, 6, 7)
        np.testing.assert_allclose(img.data, data, atol=1e-12)

    def test_grayscale_reduction(self, tmp_path):
        gray = np.random.randint(0, 256, (6, 7), dtype=np.uint8)
        path = str(tmp_path / "gray.png")
        iio.imwrite(path, np.stack([gray] * 3, axis=-1))
        img = read_image(path)
        assert img.num_channels == 1
        np.testing.assert_allclose(img.data[0], gray / 255.0)

    def test_alpha_dropped(self, tmp_path):
        rgba = np.random.randint(0, 256, (5, 4, 4), dtype=np.uint8)
        path = str(tmp_path / "rgba.png")
        iio.imwrite(path, rgba)
        img = read_image(path)
        assert img.num_channels == 3
        np.testing.assert_allclose(np.moveaxis(img.data, 0, -1), rgba[..., :3] / 255.0)

    def test_clipping(self, tmp_path):
        data = np.array([[[-0.5, 0.5, 1.5]]])
        path = str(tmp_path / "clip.png")
        write_image(Image(data), path)
        np.testing.assert_array_equal(iio.imread(path), [[0, 128, 255]])

    def test_jpeg(self, tmp_path):
        data = np.random.rand(3, 16, 16)
        path = str(tmp_path / "noise.jpg")
        write_image(Image(data), path, quality=50)
        assert read_image(path).shape[1:] == (16, 16)

    @pytest.mark.parametrize("quality", [0, 101])
    def test_invalid_quality(self, tmp_path, quality):
        with pytest.raises(ValueError):
            write_image(Image(np.zeros((1, 4, 4))), str(tmp_path / "x.jpg"), quality=quality)

    def test_invalid_channels(self, tmp_path):
        with pytest.raises(ValueError):
            write_image(Image(np.zeros((2, 4, 4))), str(tmp_path / "x.png"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            read_image(str(tmp_path / "missing.png"))
