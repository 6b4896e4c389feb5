"""Render instructions for thermal receipts.

A receipt is an ordered sequence of these instructions. Each text line
carries its own justification and style, so the sequence alone fully
determines what the printer outputs.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


class Justification(Enum):
    """Horizontal alignment of a printed line."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class TextStyle:
    """Print mode flags for a text line."""

    emphasized: bool = False
    double_height: bool = False

    @property
    def is_plain(self) -> bool:
        return not (self.emphasized or self.double_height)


PLAIN = TextStyle()
BANNER = TextStyle(emphasized=True, double_height=True)


@dataclass(frozen=True)
class Text:
    """A single printed line (the renderer adds the line feed)."""

    content: str
    justification: Justification = Justification.LEFT
    style: TextStyle = field(default=PLAIN)


@dataclass(frozen=True)
class Feed:
    """Advance the paper by a number of lines."""

    lines: int = 1


@dataclass(frozen=True)
class Image:
    """A bitmap, given as a file path or encoded image bytes."""

    source: Union[Path, bytes]
    justification: Justification = Justification.CENTER


@dataclass(frozen=True)
class Cut:
    """Cut the paper."""


RenderInstruction = Union[Text, Feed, Image, Cut]
