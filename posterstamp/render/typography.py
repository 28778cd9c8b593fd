from __future__ import annotations

import platform
from pathlib import Path

from PIL import ImageDraw, ImageFont


def _system_font_candidates(bold: bool) -> list[Path]:
    system = platform.system().lower()
    if "windows" in system:
        if bold:
            return [Path(r"C:\Windows\Fonts\arialbd.ttf"), Path(r"C:\Windows\Fonts\msyhbd.ttc")]
        return [Path(r"C:\Windows\Fonts\arial.ttf"), Path(r"C:\Windows\Fonts\msyh.ttc")]
    if "darwin" in system:
        return [
            Path("/System/Library/Fonts/Helvetica.ttc"),
            Path("/System/Library/Fonts/PingFang.ttc"),
            Path("/Library/Fonts/Arial Unicode.ttf"),
        ]
    if bold:
        return [
            Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
            Path("/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
            Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Bold.ttc"),
        ]
    return [
        Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/dejavu/DejaVuSans.ttf"),
        Path("/usr/share/fonts/opentype/noto/NotoSansCJK-Regular.ttc"),
    ]


def load_font(font_path: Path | None, size: int, bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    candidates: list[Path] = []
    if font_path:
        candidates.append(font_path)
    candidates.extend(_system_font_candidates(bold))
    for candidate in candidates:
        if candidate.exists():
            try:
                return ImageFont.truetype(str(candidate), size=size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def spaced_text_width(font: ImageFont.ImageFont, text: str, spacing: float) -> float:
    """Advance width of ``text`` with ``spacing`` px added between glyphs."""
    if not text:
        return 0.0
    if not spacing:
        return float(font.getlength(text))
    return sum(float(font.getlength(ch)) for ch in text) + spacing * (len(text) - 1)


def draw_centered_text(
    draw: ImageDraw.ImageDraw,
    *,
    center_x: float,
    baseline_y: float,
    text: str,
    font: ImageFont.ImageFont,
    fill: tuple[int, int, int, int],
    spacing: float = 0.0,
) -> None:
    """Draw ``text`` horizontally centered on ``center_x`` with its baseline at ``baseline_y``."""
    if not text:
        return
    if not spacing:
        draw.text((center_x, baseline_y), text, font=font, fill=fill, anchor="ms")
        return
    x = center_x - spaced_text_width(font, text, spacing) / 2
    for ch in text:
        draw.text((x, baseline_y), ch, font=font, fill=fill, anchor="ls")
        x += float(font.getlength(ch)) + spacing
