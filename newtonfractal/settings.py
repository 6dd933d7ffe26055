from dataclasses import dataclass

import yaml

from newtonfractal.errors import ConfigurationError


@dataclass
class FractalSettings:
    formula: str
    derivative: str | None  # None selects the numeric derivative
    plot_range: float
    step_size: float
    start: tuple = (0.0, 0.0)  # single point solves only
    processes: int = 1


default_settings = FractalSettings(
    formula="x^3-1",
    derivative="3*x^2",
    plot_range=1.0,
    step_size=0.01,
)


def settings_to_dict(settings):
    """Convert FractalSettings to a dictionary for YAML serialization."""
    return {
        "formula": {
            "f": settings.formula,
            "derivative": settings.derivative,
        },
        "window": {
            "range": settings.plot_range,
            "step": settings.step_size,
            "start": {
                "re": settings.start[0],
                "im": settings.start[1],
            },
        },
        "computation": {
            "processes": settings.processes,
        },
    }


def dict_to_settings(settings_dict):
    """Convert a dictionary to a FractalSettings object."""
    try:
        formula = settings_dict["formula"]
        window = settings_dict["window"]
        start = window.get("start", {"re": 0.0, "im": 0.0})
        computation = settings_dict.get("computation", {})
        return FractalSettings(
            formula=str(formula["f"]),
            derivative=formula.get("derivative"),
            plot_range=float(window["range"]),
            step_size=float(window["step"]),
            start=(float(start["re"]), float(start["im"])),
            processes=int(computation.get("processes", 1)),
        )
    except (KeyError, TypeError, AttributeError, ValueError) as error:
        raise ConfigurationError(f"Malformed settings: {error!r}") from error


def load_settings(path):
    with open(path, "r") as file:
        return dict_to_settings(yaml.safe_load(file))


def save_settings(settings, path):
    with open(path, "w") as file:
        yaml.dump(settings_to_dict(settings), file, default_flow_style=False)
