class FractalError(ValueError):
    """Base class for every error raised by the fractal generator."""


class ConfigurationError(FractalError):
    """Bad formula text or an invalid range/step combination."""


class ParseError(ConfigurationError):
    """Formula text that does not fit the evaluator's grammar."""


class BindingError(FractalError, KeyError):
    """A formula refers to a variable that has no value."""

    def __str__(self):
        # KeyError would quote the message
        return str(self.args[0]) if self.args else ""
