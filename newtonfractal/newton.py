import logging

from newtonfractal.complex_math import NAN, ZERO, ComplexNumber, div, format_complex, round_complex, sub
from newtonfractal.errors import BindingError
from newtonfractal.parser import evaluate_tree, parse_formula, validate_formula

MAX_ITERATIONS = 1000
TOLERANCE = 1e-8
DERIVATIVE_STEP = 1e-8
ROUNDING_DIGITS = 5


class NewtonSolver:
    """
    Newton-Raphson iteration on a formula in x. Subclasses provide step(),
    which maps the current estimate to the next one.
    """

    def __init__(self, formula):
        self.formula = formula

    def step(self, x):
        raise NotImplementedError

    def solve(self, start=ZERO):
        """
        Iterate from start and return the root, or NAN if the iteration produced
        an undefined value or did not settle within MAX_ITERATIONS steps.
        """
        if abs(start.re) + abs(start.im) < TOLERANCE:
            start = ZERO

        estimate = start
        try:
            for _ in range(MAX_ITERATIONS):
                candidate = self.step(estimate)
                if candidate.is_nan:
                    break

                delta = abs(candidate.re - estimate.re) + abs(candidate.im - estimate.im)
                estimate = candidate
                if delta < TOLERANCE:
                    return estimate
        except BindingError as error:
            logging.debug(f"Stopped iteration from {start}: {error}")

        return NAN


class AnalyticNewtonSolver(NewtonSolver):
    """Newton's method with a user supplied derivative formula."""

    def __init__(self, formula, derivative):
        super().__init__(formula)
        self.derivative = derivative

        # Surface errors in either formula on its own before combining them
        parse_formula(formula)
        parse_formula(derivative)
        self._update = parse_formula(f"x-(({formula})/({derivative}))")

    def step(self, x):
        return evaluate_tree(self._update, {"x": x})


class NumericNewtonSolver(NewtonSolver):
    """
    Newton's method with a forward difference derivative along the real axis.
    Derivative and estimates are rounded to ROUNDING_DIGITS decimals.
    """

    def __init__(self, formula):
        super().__init__(formula)
        self._tree = parse_formula(formula)

    def f(self, x):
        return evaluate_tree(self._tree, {"x": x})

    def step(self, x):
        value = self.f(x)
        shifted = self.f(ComplexNumber(x.re + DERIVATIVE_STEP, x.im))
        derivative = div(sub(shifted, value), ComplexNumber(DERIVATIVE_STEP, 0.0))
        derivative = round_complex(derivative, ROUNDING_DIGITS)

        return round_complex(sub(x, div(value, derivative)), ROUNDING_DIGITS)


def create_solver(formula, derivative=None):
    """Analytic solver when a derivative is given, numeric solver otherwise."""
    if derivative:
        return AnalyticNewtonSolver(formula, derivative)
    return NumericNewtonSolver(formula)


def solve_point(formula, derivative=None, start=ZERO):
    """Solve from a single start point. Returns the root and its textual form."""
    validate_formula(formula)
    if derivative:
        validate_formula(derivative)

    solver = create_solver(formula, derivative)
    root = solver.solve(start)
    logging.info(f"Solved {formula} from {format_complex(start)}: {format_complex(root)}")
    return root, format_complex(root)
