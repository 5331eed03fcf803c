import colorsys
from pathlib import Path

GOLDEN = 0.618033988749895


def app_root() -> Path:
    # .../apps/assembly_ui
    return Path(__file__).resolve().parents[1]

def repo_root() -> Path:
    # repo root
    return Path(__file__).resolve().parents[3]

def piece_color(i: int) -> str:
    """Distinct hex colour per piece index (golden-ratio hue walk, 3 lightness bands)."""
    h = (i * GOLDEN) % 1.0
    l = (0.55, 0.42, 0.68)[i % 3]
    r, g, b = colorsys.hls_to_rgb(h, l, 0.65)
    return "#{:02x}{:02x}{:02x}".format(int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))

def text_color_for(hex_color: str) -> str:
    """Black or white, whichever reads better on `hex_color`."""
    r = int(hex_color[1:3], 16)
    g = int(hex_color[3:5], 16)
    b = int(hex_color[5:7], 16)
    luma = 0.299 * r + 0.587 * g + 0.114 * b
    return "#000000" if luma > 140 else "#ffffff"
