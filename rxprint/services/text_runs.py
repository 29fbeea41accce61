# FILE: rxprint/services/text_runs.py
from __future__ import annotations

import html as _html
from dataclasses import dataclass
from typing import Literal

Direction = Literal["ltr", "rtl"]

LATIN_FONT_STACK = "Calibri, 'Segoe UI', Arial, sans-serif"
RTL_FONT_STACK = "Calibri, 'B Nazanin', Tahoma, sans-serif"


@dataclass(frozen=True)
class TextRun:
    """A piece of text tagged with its writing direction and typeface chain."""
    text: str
    direction: Direction = "ltr"
    font_stack: str = LATIN_FONT_STACK

    @property
    def align(self) -> str:
        return "right" if self.direction == "rtl" else "left"

    def html_attrs(self) -> str:
        return (f'dir="{self.direction}" '
                f'style="direction:{self.direction};text-align:{self.align};'
                f'font-family:{_html.escape(self.font_stack, quote=True)};"')


def ltr(text: str) -> TextRun:
    return TextRun(text or "", "ltr", LATIN_FONT_STACK)


def rtl(text: str) -> TextRun:
    return TextRun(text or "", "rtl", RTL_FONT_STACK)
