from main import build_settings, main
from newtonfractal.cli import parse_args
from newtonfractal.errors import ConfigurationError
from newtonfractal.fractal import FractalGenerator
from newtonfractal.settings import default_settings


def test_render(tmp_path):
    output = tmp_path / "out.png"
    code = main(["-f", "x^2-1", "-d", "2*x", "-r", "1", "-s", "0.5", "-o", str(output)])
    assert code == 0
    assert output.exists()


def test_solve(capsys):
    assert main(["-f", "x^2-1", "-d", "2*x", "--solve", "2", "0"]) == 0
    assert capsys.readouterr().out.strip() == "1"

    assert main(["-f", "x^2-1", "-d", "2*x", "--solve", "0", "0"]) == 0
    assert capsys.readouterr().out.strip() == "no root found"


def test_invalid_input_fails(tmp_path):
    assert main(["-f", "x^2-y", "-o", str(tmp_path / "out.png")]) == 1
    assert main(["-r", "1", "-s", "2", "-o", str(tmp_path / "out.png")]) == 1
    assert main(["--load", str(tmp_path / "missing.yaml")]) == 1
    assert main(["-r", "inf", "-s", "1", "-o", str(tmp_path / "out.png")]) == 1
    assert not (tmp_path / "out.png").exists()


def test_build_settings(tmp_path):
    assert build_settings(parse_args([])) == default_settings

    settings = build_settings(parse_args(["-f", "x^2-1"]))
    assert settings.formula == "x^2-1"
    assert settings.derivative is None

    path = tmp_path / "settings.yaml"
    assert main(["-f", "x^4-1", "-d", "4*x^3", "-s", "0.5", "--save", str(path), "--solve", "1", "1"]) == 0

    settings = build_settings(parse_args(["--load", str(path), "--auto", "-p", "2"]))
    assert settings.formula == "x^4-1"
    assert settings.derivative is None
    assert settings.step_size == 0.5
    assert settings.start == (1.0, 1.0)
    assert settings.processes == 2


def test_failed_generation_is_reported(tmp_path, monkeypatch):
    def fail(self, progress_callback=None):
        raise ConfigurationError("A generation is already running")

    monkeypatch.setattr(FractalGenerator, "generate", fail)
    output = tmp_path / "out.png"
    assert main(["-r", "1", "-s", "0.5", "-o", str(output)]) == 1
    assert not output.exists()
