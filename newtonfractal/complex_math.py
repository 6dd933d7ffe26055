import math
from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class ComplexNumber:
    re: float
    im: float

    @property
    def is_nan(self):
        return math.isnan(self.re) or math.isnan(self.im)


ZERO = ComplexNumber(0.0, 0.0)
NAN = ComplexNumber(math.nan, math.nan)


def round_half_up(value, digits=0):
    """
    Round halves away from minus infinity, i.e. floor(value + 0.5).
    Non-finite values are returned unchanged so NaN keeps signalling divergence.
    """
    factor = 10.0 ** digits
    scaled = value * factor
    if not math.isfinite(scaled):
        return value
    if digits == 0:
        return math.floor(scaled + 0.5)
    return math.floor(scaled + 0.5) / factor


def round_complex(c, digits):
    return ComplexNumber(round_half_up(c.re, digits), round_half_up(c.im, digits))


def add(a, b):
    return ComplexNumber(a.re + b.re, a.im + b.im)


def sub(a, b):
    return ComplexNumber(a.re - b.re, a.im - b.im)


def mul(a, b):
    return ComplexNumber(a.re * b.re - a.im * b.im, a.re * b.im + b.re * a.im)


def div(a, b):
    """Complex division; a zero divisor yields NaN/inf components instead of raising."""
    base = np.float64(b.re * b.re + b.im * b.im)
    with np.errstate(divide="ignore", invalid="ignore"):
        re = (b.re * a.re + b.im * a.im) / base
        im = (b.re * a.im - b.im * a.re) / base
    return ComplexNumber(float(re), float(im))


def pow(a, b):
    """
    Integer power by repeated multiplication. Only the rounded real part of the
    exponent is used; exponents <= 1 return the base unchanged.
    """
    if not math.isfinite(b.re):
        return NAN
    times = round_half_up(b.re) - 1
    result = a
    while times > 0:
        result = mul(result, a)
        times -= 1
    return result


def _format_float(value):
    return f"{value:.3f}".rstrip("0").rstrip(".")


def format_complex(c):
    """
    Format a complex number rounded to 3 decimals, e.g. "1 - 0.5 i".
    Returns None when either component is NaN.
    """
    if c.is_nan:
        return None

    re = round_half_up(c.re, 3)
    im = round_half_up(c.im, 3)
    if re == 0 and im == 0:
        return "0"

    parts = []
    if re != 0:
        parts.append(_format_float(re))
    if im != 0:
        sign = "-" if im < 0 else "+"
        parts.append(f"{sign} {_format_float(abs(im))} i")
    return " ".join(parts)
