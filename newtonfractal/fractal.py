import logging
import math
import threading
from functools import partial
from multiprocessing import Pool
from time import time

import numpy as np
from matplotlib.colors import to_rgb

from newtonfractal.complex_math import NAN, ComplexNumber, round_half_up
from newtonfractal.datatypes import FractalResult, RootEntry
from newtonfractal.errors import ConfigurationError, FractalError
from newtonfractal.newton import create_solver
from newtonfractal.parser import validate_formula

COLORS = [
    "#F76A6A", "#F7926A", "#FCC441", "#F7C06A", "#F7E16A",
    "#F6F76A", "#CEF76A", "#CEDD5D", "#A8E577", "#78F76A",
    "#6AF7D9", "#6AE3F7", "#6AB8F7", "#6A83F7", "#AA6AF7",
    "#CB6AF7", "#F76AD7", "#F76AB9", "#F76A98", "#F76A74",
]
NON_CONVERGENT_COLOR = "#000000"
ROOT_TOLERANCE = 1e-4


def hex_to_rgb(color):
    return tuple(int(round(c * 255)) for c in to_rgb(color))


PALETTE = tuple(hex_to_rgb(color) for color in COLORS)
NON_CONVERGENT_RGB = hex_to_rgb(NON_CONVERGENT_COLOR)


def roots_match(a, b):
    """Roots closer than ROOT_TOLERANCE, or NaN in the same component of both."""
    if abs(a.re - b.re) + abs(a.im - b.im) < ROOT_TOLERANCE:
        return True
    return (np.isnan(a.re) and np.isnan(b.re)) or (np.isnan(a.im) and np.isnan(b.im))


class RootRegistry:
    """
    Ordered roots and their colors, in order of discovery. Entry 0 is always
    the non-convergent (nan, nan) root in black.
    """

    def __init__(self):
        self.entries = [RootEntry(NAN, NON_CONVERGENT_RGB)]
        self.color_count = 0

    def __len__(self):
        return len(self.entries)

    def __iter__(self):
        return iter(self.entries)

    def __getitem__(self, index):
        return self.entries[index]

    def find(self, root):
        for index, entry in enumerate(self.entries):
            if roots_match(entry.root, root):
                return index
        return -1

    def resolve(self, root):
        """Index of the entry matching root, registering a new color if none does."""
        index = self.find(root)
        if index >= 0:
            return index

        # Once the palette is used up the last color is reused
        color = PALETTE[min(self.color_count, len(PALETTE) - 1)]
        self.color_count += 1
        self.entries.append(RootEntry(root, color))
        logging.debug(f"New root {root} gets color {color}")
        return len(self.entries) - 1


def _solve_row(solver, xs, y):
    return [solver.solve(ComplexNumber(x, y)) for x in xs]


class FractalGenerator:
    """
    Runs a Newton solver from every point of the square [-range, range]^2,
    sampled every step_size, and colors each point by the root it reached.
    """

    def __init__(self, formula, derivative=None, plot_range=1.0, step_size=0.01, processes=1):
        validate_formula(formula)
        if derivative:
            validate_formula(derivative)
        if (
            not plot_range > 0 or not step_size > 0 or step_size > plot_range
            or not math.isfinite(plot_range / step_size)
        ):
            raise ConfigurationError(
                f"Need 0 < step size <= range, got step size {step_size} and range {plot_range}"
            )

        self.formula = formula
        self.derivative = derivative
        self.plot_range = plot_range
        self.step_size = step_size
        self.processes = processes
        self.solver = create_solver(formula, derivative)

        self.size = 2 * round_half_up(plot_range / step_size)
        self.total_cells = self.size * self.size

        self._running = threading.Lock()
        self._cancel = threading.Event()
        self._reset()

    def _reset(self):
        self.pixels = np.zeros((self.size, self.size, 3), dtype=np.uint8)
        self.color_indices = np.zeros((self.size, self.size), dtype=np.int32)
        self.registry = RootRegistry()
        self.completed_cells = 0
        self.progress = 0
        self.start_time = None

    def __str__(self):
        elapsed = time() - self.start_time if self.start_time else 0.0
        return (
            f"{self.progress}% | {self.completed_cells}/{self.total_cells} points | "
            f"{len(self.registry) - 1} roots | {elapsed:.2f}s"
        )

    def sample_axis(self):
        """Sample positions along one axis; samples past size are dropped."""
        samples = []
        value = -self.plot_range
        while value <= self.plot_range:
            samples.append(value)
            value += self.step_size
        return samples[:self.size]

    def cancel(self):
        """Stop the running generation after the current point."""
        self._cancel.set()

    def _rows(self, ys, xs):
        if self.processes > 1:
            with Pool(self.processes) as pool:
                yield from pool.imap(partial(_solve_row, self.solver, xs), ys)
        else:
            for y in ys:
                yield (self.solver.solve(ComplexNumber(x, y)) for x in xs)

    def _report_progress(self, percent, callback):
        if percent <= self.progress and self.completed_cells:
            return
        if percent // 10 > self.progress // 10:
            logging.info(f"Fractal computation at {percent}%")
        self.progress = percent
        if callback is not None:
            callback(percent)

    def generate(self, progress_callback=None):
        """
        Compute the whole grid. progress_callback receives integer percentages
        from 0 to 100. Returns a FractalResult, flagged as cancelled when
        cancel() stopped the computation early.
        """
        if not self._running.acquire(blocking=False):
            raise ConfigurationError("A generation is already running")

        try:
            cancelled = self._cancel.is_set()
            self._reset()
            self.start_time = time()
            logging.info(
                f"Starting fractal computation for {self.formula} "
                f"on {self.size}x{self.size} points..."
            )
            self._report_progress(0, progress_callback)

            ys = xs = self.sample_axis()
            rows = self._rows(ys, xs)
            try:
                for row, roots in enumerate(rows):
                    if cancelled or self._cancel.is_set():
                        cancelled = True
                        break
                    for column, root in enumerate(roots):
                        index = self.registry.resolve(root)
                        self.color_indices[row, column] = index
                        self.pixels[row, column] = self.registry[index].color
                        self.completed_cells += 1
                        self._report_progress(
                            round_half_up(100 * self.completed_cells / self.total_cells),
                            progress_callback,
                        )
                        if self._cancel.is_set():
                            cancelled = True
                            break
                    if cancelled:
                        break
            finally:
                rows.close()

            elapsed = time() - self.start_time
            if cancelled:
                logging.warning(f"Fractal computation cancelled at {self.progress}%.")
            else:
                self._report_progress(100, progress_callback)
                logging.info(
                    f"Fractal computation completed in {elapsed:.2f} seconds, "
                    f"{len(self.registry) - 1} roots found."
                )

            return FractalResult(
                pixels=self.pixels,
                color_indices=self.color_indices,
                roots=list(self.registry),
                cancelled=cancelled,
                elapsed=elapsed,
            )
        finally:
            self._cancel.clear()
            self._running.release()


class FractalWorker(threading.Thread):
    """Runs one generation off the calling thread."""

    def __init__(self, generator, finished=None, progress=None):
        super().__init__(daemon=True)
        self.generator = generator
        self.finished = finished
        self.progress = progress
        self.result = None
        self.error = None

    def run(self):
        """Perform fractal computation in a separate thread."""
        try:
            self.result = self.generator.generate(self.progress)
        except FractalError as error:
            logging.error(f"Fractal computation failed: {error}")
            self.error = error
            return
        if self.finished is not None:
            self.finished(self.result)

    def cancel(self):
        self.generator.cancel()
