"""
QR codes for the public menu URL (qrcode + Pillow).

PNG output is scaled to ``width`` pixels; SVG output is a single path
in the dark colour over a light background rectangle and scales freely.
"""

import base64
import io
import logging
from dataclasses import dataclass

import qrcode
import qrcode.image.svg
from PIL import Image, ImageColor

from restopos.core.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}


@dataclass
class QROptions:
    width: int = 300
    margin: int = 2
    dark: str = "#000000"
    light: str = "#FFFFFF"
    error_correction: str = "M"

    def validate(self) -> "QROptions":
        if self.error_correction not in ERROR_CORRECTION:
            raise ValidationFailed(f"Invalid error correction level. Options: {list(ERROR_CORRECTION)}")
        if not 64 <= self.width <= 2048:
            raise ValidationFailed("QR width must be between 64 and 2048 pixels")
        if not 0 <= self.margin <= 20:
            raise ValidationFailed("QR margin must be between 0 and 20")
        return self


def _build(text: str, options: QROptions, box_size: int = 10) -> qrcode.QRCode:
    if not text:
        raise ValidationFailed("Nothing to encode")
    qr = qrcode.QRCode(
        error_correction=ERROR_CORRECTION[options.error_correction],
        box_size=box_size,
        border=options.margin,
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr


def generate_qr_png(text: str, options: QROptions = None) -> bytes:
    """PNG bytes of a ``width`` x ``width`` QR code."""
    options = (options or QROptions()).validate()
    qr = _build(text, options)

    modules = qr.modules_count + 2 * options.margin
    qr.box_size = max(1, options.width // modules)

    try:
        image = qr.make_image(fill_color=options.dark, back_color=options.light).get_image()
    except ValueError:
        raise ValidationFailed("Invalid QR colours")

    if image.size[0] != options.width:
        image = image.resize((options.width, options.width), Image.NEAREST)

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def generate_qr_data_url(text: str, options: QROptions = None) -> str:
    png = generate_qr_png(text, options)
    return "data:image/png;base64," + base64.b64encode(png).decode("ascii")


def _svg_factory(options: QROptions) -> type:
    for colour in (options.dark, options.light):
        try:
            ImageColor.getrgb(colour)
        except ValueError:
            raise ValidationFailed("Invalid QR colours")

    base = qrcode.image.svg.SvgPathImage
    return type(
        "MenuSvgImage",
        (base,),
        {"QR_PATH_STYLE": {**base.QR_PATH_STYLE, "fill": options.dark}, "background": options.light},
    )


def generate_qr_svg(text: str, options: QROptions = None) -> str:
    """SVG markup of the QR code."""
    options = (options or QROptions()).validate()
    qr = _build(text, options)
    image = qr.make_image(image_factory=_svg_factory(options))
    svg = image.to_string(encoding="unicode")
    return svg.decode("utf-8") if isinstance(svg, bytes) else svg
