"""Color parsing for material options."""

from typing import Optional, Tuple

from PIL import ImageColor


def normalize_color(value: Optional[str]) -> Optional[str]:
    """
    Normalize an authored color to lowercase "#rrggbb".

    Accepts anything Pillow understands: "#abc", "#aabbcc", "0xaabbcc",
    named colors and "rgb(...)" strings. Alpha is discarded.

    Returns:
        Normalized hex string, or None if the value cannot be parsed
    """
    if not value or not isinstance(value, str):
        return None

    text = value.strip()
    # The builder's color picker occasionally stores THREE-style "0x" prefixes
    if text.lower().startswith("0x"):
        text = "#" + text[2:]

    try:
        rgb = ImageColor.getrgb(text)
    except ValueError:
        return None

    r, g, b = rgb[:3]
    return f"#{r:02x}{g:02x}{b:02x}"


def to_rgb_float(value: str) -> Tuple[float, float, float]:
    """Convert a color string to an RGB tuple in the 0-1 range."""
    normalized = normalize_color(value)
    if normalized is None:
        raise ValueError(f"Invalid color: {value!r}")

    r, g, b = ImageColor.getrgb(normalized)[:3]
    return (r / 255.0, g / 255.0, b / 255.0)
