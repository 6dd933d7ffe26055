import sys
import logging
from dataclasses import replace

from newtonfractal.cli import parse_args
from newtonfractal.complex_math import ComplexNumber
from newtonfractal.errors import FractalError
from newtonfractal.export import format_root_table, save_image
from newtonfractal.fractal import FractalGenerator, FractalWorker
from newtonfractal.newton import solve_point
from newtonfractal.settings import default_settings, load_settings, save_settings

LOG_FILE = "log.txt"


def setup_logging(log_file=LOG_FILE):
    logger = logging.getLogger()
    logger.setLevel(logging.INFO)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    console_handler.setFormatter(console_formatter)
    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.INFO)
    file_formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(file_formatter)
    logger.addHandler(console_handler)
    logger.addHandler(file_handler)


def build_settings(args):
    """Settings from --load (or the defaults), overridden by explicit flags."""
    settings = load_settings(args.load) if args.load else default_settings
    if args.load:
        logging.info(f"Settings loaded from {args.load}")

    overrides = {}
    if args.formula is not None:
        overrides["formula"] = args.formula
        # A new formula does not keep the old derivative
        overrides["derivative"] = None
    if args.derivative is not None:
        overrides["derivative"] = args.derivative
    if args.auto:
        overrides["derivative"] = None
    if args.plot_range is not None:
        overrides["plot_range"] = args.plot_range
    if args.step_size is not None:
        overrides["step_size"] = args.step_size
    if args.solve is not None:
        overrides["start"] = tuple(args.solve)
    if args.processes is not None:
        overrides["processes"] = args.processes
    return replace(settings, **overrides)


def render(settings, output):
    generator = FractalGenerator(
        settings.formula,
        settings.derivative,
        plot_range=settings.plot_range,
        step_size=settings.step_size,
        processes=settings.processes,
    )
    worker = FractalWorker(generator)
    worker.start()
    try:
        while worker.is_alive():
            worker.join(0.1)
    except KeyboardInterrupt:
        logging.warning("Interrupted, keeping the points computed so far...")
        worker.cancel()
        worker.join()

    if worker.error is not None:
        raise worker.error
    result = worker.result
    save_image(result, output)
    table = format_root_table(result.roots)
    logging.info(f"Roots:\n{table}" if table else "No roots found.")
    return result


def main(argv=None):
    args = parse_args(argv)
    try:
        settings = build_settings(args)
        if args.save:
            save_settings(settings, args.save)
            logging.info(f"Settings saved to {args.save}")

        if args.solve is not None:
            _, text = solve_point(settings.formula, settings.derivative, ComplexNumber(*settings.start))
            print(text if text is not None else "no root found")
        else:
            render(settings, args.output)
    except (FractalError, OSError) as error:
        logging.error(f"{type(error).__name__}: {error}")
        return 1
    return 0


def run():
    setup_logging()
    sys.exit(main())


if __name__ == "__main__":
    run()
