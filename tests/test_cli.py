"""Tests for render settings and the command-line entry point."""

import pytest


class TestRenderSettings:
    """Tests for RenderSettings validation."""

    def test_defaults(self):
        """Defaults describe a 512x384 image at 4 samples per pixel."""
        from pathtracer.config import RenderSettings

        settings = RenderSettings()
        settings.validate()
        assert (settings.width, settings.height, settings.samples) == (512, 384, 4)
        assert settings.output == "image.ppm"
        assert settings.subpixel_samples == 1

    @pytest.mark.parametrize(("samples", "expected"), [(1, 1), (3, 1), (4, 1), (8, 2), (10, 2)])
    def test_subpixel_samples(self, samples, expected):
        """Samples are divided over the 2x2 sub-pixels, at least one each."""
        from pathtracer.config import RenderSettings, samples_per_subpixel

        assert RenderSettings(samples=samples).subpixel_samples == expected
        assert samples_per_subpixel(samples) == expected

    @pytest.mark.parametrize(
        "overrides",
        [
            {"width": 0},
            {"height": -4},
            {"width": 5000},
            {"samples": 0},
            {"seed": -1},
            {"roulette_depth": -1},
            {"rows_per_batch": 0},
            {"gamma": 0.0},
            {"output": ""},
        ],
    )
    def test_invalid_settings(self, overrides):
        """Each invalid field raises ValueError."""
        from pathtracer.config import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**overrides).validate()


class TestCommandLine:
    """Tests for argument parsing and rendering through the CLI."""

    def test_parse_defaults(self):
        """No arguments gives the default settings."""
        from pathtracer.cli import parse_args

        args = parse_args([])
        assert args.samples == 4
        assert (args.width, args.height) == (512, 384)
        assert args.arch == "cpu"
        assert not args.quiet

    def test_parse_all_options(self):
        """Positional samples and every option are parsed."""
        from pathtracer.cli import parse_args, settings_from_args

        args = parse_args(
            [
                "16",
                "--width", "64",
                "--height", "32",
                "--seed", "9",
                "--roulette-depth", "7",
                "--rows-per-batch", "4",
                "--output", "out.png",
                "--quiet",
            ]
        )
        settings = settings_from_args(args)
        assert settings.samples == 16
        assert (settings.width, settings.height) == (64, 32)
        assert settings.seed == 9
        assert settings.roulette_depth == 7
        assert settings.rows_per_batch == 4
        assert settings.output == "out.png"
        assert args.quiet

    def test_invalid_arguments_exit_with_error(self):
        """Invalid settings return exit status 1 before any rendering."""
        from pathtracer.cli import main

        assert main(["--width", "0", "--quiet"]) == 1
        assert main(["0", "--quiet"]) == 1

    def test_render_scene_writes_ppm(self, tmp_path):
        """render_scene renders the Cornell box and writes the file."""
        from pathtracer.cli import render_scene
        from pathtracer.config import RenderSettings

        output = tmp_path / "cornell.ppm"
        settings = RenderSettings(width=16, height=12, samples=4, output=str(output))
        assert render_scene(settings, quiet=True) == output

        tokens = output.read_text().split()
        assert tokens[:4] == ["P3", "16", "12", "255"]
        assert len(tokens) == 4 + 16 * 12 * 3

    def test_render_scene_unwritable_output(self, tmp_path, monkeypatch):
        """An unwritable output path raises OSError before any rendering."""
        from pathtracer.cli import render_scene
        from pathtracer.config import RenderSettings
        from pathtracer.core.renderer import Renderer

        def fail_render(self, *args, **kwargs):
            pytest.fail("render started despite an unwritable output path")

        monkeypatch.setattr(Renderer, "render", fail_render)

        settings = RenderSettings(
            width=8, height=8, samples=4, output=str(tmp_path / "missing" / "out.ppm")
        )
        with pytest.raises(OSError):
            render_scene(settings, quiet=True)
