"""ESC/POS renderer for receipt instructions.

Walks a render instruction sequence and produces the command bytes for
an ESC/POS thermal printer, or a plain-text preview of the same output.
"""

import logging
from io import BytesIO
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from invoice_printer.printing.instructions import (
    Cut,
    Feed,
    Image,
    Justification,
    RenderInstruction,
    Text,
    TextStyle,
)

logger = logging.getLogger(__name__)


class EscPosRenderer:
    """Interpreter from render instructions to ESC/POS commands.

    Each printed copy starts from a freshly initialized printer: ESC @ is
    emitted at the start and again after every cut that is followed by
    more output.
    """

    # ESC/POS command constants
    ESC = b'\x1b'
    GS = b'\x1d'
    LF = b'\x0a'

    # ESC ! n print mode bits
    MODE_EMPHASIZED = 0x08
    MODE_DOUBLE_HEIGHT = 0x10

    def __init__(self, paper_dots: int = 576, encoding: str = "cp437"):
        """Initialize the renderer.

        Args:
            paper_dots: Printable width in dots (576 for 80mm, 384 for 58mm)
            encoding: Code page used for text bytes
        """
        self.paper_dots = paper_dots
        self.encoding = encoding

    def render(self, instructions: Sequence[RenderInstruction]) -> bytes:
        """Render instructions to printer command bytes."""
        commands: List[bytes] = [self._cmd_init()]

        for position, instruction in enumerate(instructions):
            if isinstance(instruction, Text):
                commands.append(self._render_text(instruction))
            elif isinstance(instruction, Feed):
                commands.append(self._cmd_feed(instruction.lines))
            elif isinstance(instruction, Image):
                commands.append(self._render_image(instruction))
            elif isinstance(instruction, Cut):
                commands.append(self._cmd_cut())
                if position + 1 < len(instructions):
                    commands.append(self._cmd_init())
            else:
                raise TypeError(f"Unknown render instruction: {instruction!r}")

        return b''.join(commands)

    def _cmd_init(self) -> bytes:
        """Initialize printer command."""
        return self.ESC + b'@'

    def _cmd_cut(self) -> bytes:
        """Partial paper cut command."""
        return self.GS + b'V' + b'\x01'

    def _cmd_feed(self, lines: int) -> bytes:
        """ESC d n - print and feed n lines."""
        return self.ESC + b'd' + bytes([max(0, min(lines, 255))])

    def _cmd_justify(self, justification: Justification) -> bytes:
        """Set text justification."""
        justify_byte = {
            Justification.LEFT: b'\x00',
            Justification.CENTER: b'\x01',
            Justification.RIGHT: b'\x02',
        }
        return self.ESC + b'a' + justify_byte.get(justification, b'\x00')

    def _cmd_print_mode(self, style: TextStyle) -> bytes:
        """Select print mode."""
        mode = 0
        if style.emphasized:
            mode |= self.MODE_EMPHASIZED
        if style.double_height:
            mode |= self.MODE_DOUBLE_HEIGHT
        return self.ESC + b'!' + bytes([mode])

    def _render_text(self, text: Text) -> bytes:
        """Render a text line to commands."""
        commands = [self._cmd_justify(text.justification)]
        if not text.style.is_plain:
            commands.append(self._cmd_print_mode(text.style))

        commands.append(text.content.encode(self.encoding, errors="replace"))
        commands.append(self.LF)

        if not text.style.is_plain:
            commands.append(self._cmd_print_mode(TextStyle()))
        return b''.join(commands)

    def _load_image(self, source: Union[Path, bytes]) -> PILImage.Image:
        if isinstance(source, bytes):
            return PILImage.open(BytesIO(source))
        return PILImage.open(source)

    def _render_image(self, image: Image) -> bytes:
        """Render an image as a GS v 0 raster bit image.

        Images wider than the paper are scaled down; unreadable images are
        logged and skipped.
        """
        try:
            img = self._load_image(image.source)
            img.load()
        except (OSError, UnidentifiedImageError) as e:
            logger.error(f"Image rendering failed: {e}")
            return b''

        if img.width > self.paper_dots:
            height = max(1, int(img.height * self.paper_dots / img.width))
            img = img.resize((self.paper_dots, height), PILImage.Resampling.LANCZOS)

        img = img.convert('L').convert('1', dither=PILImage.Dither.FLOYDSTEINBERG)
        return self._image_to_raster(img, image.justification)

    def _image_to_raster(self, img: PILImage.Image, justification: Justification) -> bytes:
        """Convert a 1-bit PIL image to ESC/POS raster commands."""
        width, height = img.size

        # Width must be a multiple of 8
        if width % 8 != 0:
            new_width = (width // 8 + 1) * 8
            padded = PILImage.new('1', (new_width, height), 1)  # white
            offset = (new_width - width) // 2 if justification == Justification.CENTER else 0
            padded.paste(img, (offset, 0))
            img = padded
            width = new_width

        bytes_per_line = width // 8

        # PIL packs white as 1; the printer expects 1 for black
        raster_data = bytes(b ^ 0xFF for b in img.tobytes())

        # GS v 0 m xL xH yL yH data
        commands = [
            self._cmd_justify(justification),
            self.GS + b'v0',
            b'\x00',
            bytes([bytes_per_line & 0xFF, (bytes_per_line >> 8) & 0xFF]),
            bytes([height & 0xFF, (height >> 8) & 0xFF]),
            raster_data,
            self.LF,
        ]
        return b''.join(commands)

    def preview(self, instructions: Iterable[RenderInstruction], width: int) -> str:
        """Generate a text preview of the printed output.

        Args:
            instructions: Instructions to preview
            width: Printer column count

        Returns:
            ASCII representation of the receipt
        """
        width = max(width, 1)
        border = "+" + "-" * width + "+"
        lines = [border]
        open_box = True

        for instruction in instructions:
            if not open_box:
                lines.append("")
                lines.append(border)
                open_box = True

            if isinstance(instruction, Text):
                for chunk in self._wrap(instruction.content, width):
                    if instruction.justification == Justification.CENTER:
                        chunk = chunk.center(width)
                    elif instruction.justification == Justification.RIGHT:
                        chunk = chunk.rjust(width)
                    else:
                        chunk = chunk.ljust(width)
                    lines.append("|" + chunk + "|")

            elif isinstance(instruction, Image):
                lines.append("|" + "[IMAGE]".center(width) + "|")

            elif isinstance(instruction, Feed):
                for _ in range(instruction.lines):
                    lines.append("|" + " " * width + "|")

            elif isinstance(instruction, Cut):
                lines.append(border)
                open_box = False

        if open_box:
            lines.append(border)
        return "\n".join(lines)

    @staticmethod
    def _wrap(content: str, width: int) -> List[str]:
        """Hard-wrap a line the way the printer does."""
        if not content:
            return [""]
        return [content[i:i + width] for i in range(0, len(content), width)]
