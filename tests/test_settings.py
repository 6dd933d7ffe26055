import pytest
import yaml

from newtonfractal.errors import ConfigurationError
from newtonfractal.settings import (
    FractalSettings, default_settings, dict_to_settings, load_settings, save_settings, settings_to_dict,
)


def test_defaults():
    assert default_settings.formula == "x^3-1"
    assert default_settings.derivative == "3*x^2"
    assert default_settings.plot_range == 1.0
    assert default_settings.step_size == 0.01


def test_save_and_load(tmp_path):
    settings = FractalSettings(
        formula="x^2-1", derivative=None, plot_range=2.0, step_size=0.5, start=(1.0, -1.0), processes=3
    )
    path = tmp_path / "settings.yaml"
    save_settings(settings, path)

    with open(path) as file:
        document = yaml.safe_load(file)
    assert document["formula"] == {"f": "x^2-1", "derivative": None}
    assert document["window"]["range"] == 2.0

    assert load_settings(path) == settings


def test_optional_sections_default():
    settings = dict_to_settings({"formula": {"f": "x^3-1"}, "window": {"range": 1, "step": 0.1}})
    assert settings.derivative is None
    assert settings.start == (0.0, 0.0)
    assert settings.processes == 1
    assert settings_to_dict(settings)["computation"] == {"processes": 1}


@pytest.mark.parametrize("document", [
    {},
    {"formula": {"f": "x"}},
    {"formula": {"f": "x"}, "window": {"range": "wide", "step": 0.1}},
    None,
])
def test_malformed_settings(document):
    with pytest.raises(ConfigurationError):
        dict_to_settings(document)
