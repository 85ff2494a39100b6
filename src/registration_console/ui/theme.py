from __future__ import annotations

from typing import Iterable

from gradio.themes.base import Base
from gradio.themes.utils import colors, fonts, sizes


class ConsoleTheme(Base):
    """Dark slate theme with blue primary actions and red destructive ones."""

    def __init__(
        self,
        *,
        primary_hue: colors.Color | str = colors.blue,
        secondary_hue: colors.Color | str = colors.red,
        neutral_hue: colors.Color | str = colors.slate,
        spacing_size: sizes.Size | str = sizes.spacing_md,
        radius_size: sizes.Size | str = sizes.radius_lg,
        text_size: sizes.Size | str = sizes.text_md,
        font: fonts.Font
        | str
        | Iterable[fonts.Font | str] = (
            fonts.GoogleFont("Inter"),
            "ui-sans-serif",
            "system-ui",
            "sans-serif",
        ),
        font_mono: fonts.Font
        | str
        | Iterable[fonts.Font | str] = (
            "ui-monospace",
            "Consolas",
            "monospace",
        ),
    ):
        super().__init__(
            primary_hue=primary_hue,
            secondary_hue=secondary_hue,
            neutral_hue=neutral_hue,
            spacing_size=spacing_size,
            radius_size=radius_size,
            text_size=text_size,
            font=font,
            font_mono=font_mono,
        )

        super().set(
            body_background_fill="*neutral_900",
            body_background_fill_dark="*neutral_900",
            body_text_color="*neutral_200",
            body_text_color_dark="*neutral_200",
            block_background_fill="*neutral_800",
            block_background_fill_dark="*neutral_800",
            block_border_width="0px",
            block_title_text_color="white",
            block_title_text_color_dark="white",
            block_label_text_color="*neutral_300",
            block_label_text_color_dark="*neutral_300",
            input_background_fill="*neutral_800",
            input_background_fill_dark="*neutral_800",
            input_border_color="*neutral_700",
            input_border_color_dark="*neutral_700",
            button_primary_background_fill="*primary_600",
            button_primary_background_fill_hover="*primary_700",
            button_primary_text_color="white",
            button_cancel_background_fill="*secondary_600",
            button_cancel_background_fill_hover="*secondary_700",
            button_cancel_text_color="white",
            button_secondary_background_fill="*neutral_700",
            button_secondary_background_fill_hover="*neutral_600",
            button_secondary_text_color="*neutral_200",
            button_secondary_text_color_dark="*neutral_200",
        )
