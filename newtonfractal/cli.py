import argparse


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Renders the Newton fractal of a complex formula in x.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--load", type=str, metavar="PATH", help="Path to a settings file.")
    parser.add_argument("--save", type=str, metavar="PATH", help="Save the effective settings to this file.")
    parser.add_argument(
        "-f", "--formula", type=str,
        help="Formula f(x), e.g. x^3-1. Without --derivative the derivative is approximated.",
    )
    parser.add_argument("-d", "--derivative", type=str, help="Derivative f'(x), e.g. 3*x^2.")
    parser.add_argument(
        "--auto", action="store_true", help="Approximate the derivative numerically, ignoring any derivative."
    )
    parser.add_argument("-r", "--range", type=float, dest="plot_range", help="Plot x, y in [-range, range].")
    parser.add_argument("-s", "--step", type=float, dest="step_size", help="Distance between sampled points.")
    parser.add_argument(
        "--solve", type=float, nargs=2, metavar=("RE", "IM"), help="Solve from a single start point only."
    )
    parser.add_argument("-o", "--output", type=str, metavar="PATH", help="PNG file to write.", default="fractal.png")
    parser.add_argument("-p", "--processes", type=int, help="Worker processes for the grid.")
    return parser.parse_args(argv)
