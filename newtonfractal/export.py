import logging

from PIL import Image


def render_image(result):
    return Image.fromarray(result.pixels)


def save_image(result, file_path):
    """Save the fractal's pixel buffer to an image file using Pillow."""
    logging.info(f"Exporting fractal to {file_path}...")
    render_image(result).save(file_path)
    logging.info(f"Fractal successfully exported to {file_path}.")


def format_root_table(roots):
    """One line per root with a textual form: "x1 = 1 (#f76a6a)"."""
    lines = []
    for entry in roots:
        label = entry.label
        if label is None:
            continue
        lines.append(f"x{len(lines) + 1} = {label} ({entry.hex_color})")
    return "\n".join(lines)
