"""Unit tests for gamma encoding and image file output."""

import numpy as np
import pytest
from PIL import Image as PILImage


class TestDisplay:
    """Tests for clamping and gamma."""

    def test_clamp_image(self):
        """Values are clamped into [0, 1]."""
        from pathtracer.output.display import clamp_image

        image = np.array([[[-0.5, 0.5, 1.5]]])
        assert clamp_image(image).tolist() == [[[0.0, 0.5, 1.0]]]

    def test_apply_gamma(self):
        """Gamma encoding raises values to 1/gamma."""
        from pathtracer.output.display import apply_gamma

        image = np.full((1, 1, 3), 0.25)
        assert apply_gamma(image, 2.0)[0, 0, 0] == pytest.approx(0.5)
        assert apply_gamma(image, 1.0)[0, 0, 0] == pytest.approx(0.25)

    def test_apply_gamma_rejects_non_positive(self):
        """Gamma must be positive."""
        from pathtracer.output.display import apply_gamma

        with pytest.raises(ValueError):
            apply_gamma(np.zeros((1, 1, 3)), 0.0)


class TestExport:
    """Tests for quantisation and file formats."""

    def test_image_to_uint8_rounds_to_nearest(self):
        """byte = floor(clamp(x)^(1/gamma) * 255 + 0.5)."""
        from pathtracer.output.export import image_to_uint8

        image = np.array([[[0.0, 1.0, 0.5], [2.0, -1.0, 0.25]]])
        result = image_to_uint8(image, gamma=2.2)
        expected_half = int(np.floor(0.5 ** (1 / 2.2) * 255 + 0.5))
        expected_quarter = int(np.floor(0.25 ** (1 / 2.2) * 255 + 0.5))
        assert result.dtype == np.uint8
        assert result.tolist() == [[[0, 255, expected_half], [255, 0, expected_quarter]]]

    def test_image_to_uint8_linear(self):
        """With gamma 1 mid grey rounds up to 128."""
        from pathtracer.output.export import image_to_uint8

        assert image_to_uint8(np.full((1, 1, 3), 0.5), gamma=1.0).tolist() == [[[128, 128, 128]]]

    def test_encode_ppm(self):
        """Header followed by 'r g b ' triplets, row-major, top row first."""
        from pathtracer.output.export import encode_ppm

        image = np.array([[[1, 2, 3], [4, 5, 6]], [[7, 8, 9], [10, 11, 12]]], dtype=np.uint8)
        assert encode_ppm(image) == "P3\n2 2\n255\n1 2 3 4 5 6 7 8 9 10 11 12 "

    def test_encode_ppm_rejects_wrong_shape(self):
        """Only (H, W, 3) arrays can be encoded."""
        from pathtracer.output.export import encode_ppm

        with pytest.raises(ValueError):
            encode_ppm(np.zeros((2, 2), dtype=np.uint8))

    def test_save_image_dispatches_on_suffix(self, tmp_path):
        """.ppm is written as text, .png through Pillow."""
        from pathtracer.output.export import image_to_uint8, save_image

        image = np.linspace(0.0, 1.0, 4 * 3 * 3).reshape(4, 3, 3)

        ppm_path = tmp_path / "image.ppm"
        save_image(image, ppm_path)
        assert ppm_path.read_text().startswith("P3\n3 4\n255\n")

        png_path = tmp_path / "image.png"
        save_image(image, png_path)
        with PILImage.open(png_path) as png:
            np.testing.assert_array_equal(np.asarray(png), image_to_uint8(image))

    def test_save_image_unwritable_path(self, tmp_path):
        """Missing directories surface as OSError."""
        from pathtracer.output.export import save_image

        with pytest.raises(OSError):
            save_image(np.zeros((2, 2, 3)), tmp_path / "missing" / "image.ppm")


    def test_check_output_writable(self, tmp_path):
        """The output file is created up front and missing directories raise OSError."""
        from pathtracer.output.export import check_output_writable

        path = tmp_path / "image.ppm"
        check_output_writable(path)
        assert path.exists()
        with pytest.raises(OSError):
            check_output_writable(tmp_path / "missing" / "image.ppm")
