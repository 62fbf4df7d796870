from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Any, Callable, Optional, Union
import os
import logging

import cv2
from dotenv import load_dotenv

from ..models.image import Image
from ..models.adjustments import AdjustmentParameters
from ..models.filter_type import FilterType
from ..models.operation_result import OperationResult
from ..models.errors import EditorError, InvalidParameter
from ..repositories.history_repository import HistoryRepository
from ..pipeline import adjustment_pipeline
from .image_service import ImageService
from .filter_service import FilterService
from .palette_service import PaletteService

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[Image], None]
ErrorCallback = Callable[[EditorError], None]


def _number(value, cast, name: str):
    try:
        return cast(value)
    except (TypeError, ValueError, OverflowError) as err:
        raise InvalidParameter(f"{name.capitalize()} must be a number, got {value!r}") from err


class ImageEditor:
    """
    Owns the stored image, the adjustment parameters, the undo history
    and the overlay.  This is the whole surface a UI layer talks to.

    *   Filters and open/undo replace the stored image.
    *   Adjustments only change parameters; they are re-applied to a copy
        of the stored image on every refresh.
    *   Every successful logical action pushes exactly one snapshot of the
        stored image before changing anything.
    *   Failures never escape: they are logged, sent to ``on_error`` and
        returned inside the OperationResult, with state left untouched.
    """

    def __init__(self,
                 on_refresh: Optional[RefreshCallback] = None,
                 on_error: Optional[ErrorCallback] = None,
                 *,
                 image_service: ImageService = None,
                 filter_service: FilterService = None,
                 palette_service: PaletteService = None,
                 history: HistoryRepository = None):
        self.on_refresh = on_refresh
        self.on_error = on_error

        self.image_service = image_service or ImageService()
        self.filter_service = filter_service or FilterService()
        self.palette_service = palette_service or PaletteService()
        self.history = history or HistoryRepository()

        self.default_overlay_opacity = float(os.getenv("DEFAULT_OVERLAY_OPACITY", "0.5"))
        self.default_palette_size = int(os.getenv("DEFAULT_PALETTE_SIZE", "5"))

        self._image = Image.empty()
        self._params = AdjustmentParameters()

    # ─── Read accessors ────────────────────────────────────────────
    @property
    def image(self) -> Image:
        """A copy of the stored (unadjusted) image."""
        return self._image.clone()

    @property
    def parameters(self) -> AdjustmentParameters:
        overlay = self._params.overlay
        return replace(self._params, overlay=overlay.clone() if overlay is not None else None)

    @property
    def red(self) -> int:
        return self._params.red

    @property
    def green(self) -> int:
        return self._params.green

    @property
    def blue(self) -> int:
        return self._params.blue

    @property
    def has_image(self) -> bool:
        return not self._image.is_empty

    @property
    def can_undo(self) -> bool:
        return not self.history.is_empty

    @property
    def history_depth(self) -> int:
        return len(self.history)

    # ─── File operations ───────────────────────────────────────────
    def open(self, path: Union[str, Path]) -> OperationResult:
        return self._run("open", lambda: self._replace_image(self.image_service.load(path)))

    def open_bytes(self, data: bytes) -> OperationResult:
        return self._run("open_bytes", lambda: self._replace_image(self.image_service.load_bytes(data)))

    def save(self, path: Union[str, Path]) -> OperationResult:
        """Write what the user sees: the stored image with adjustments applied."""
        def _save():
            self.image_service.require_loaded(self._image)
            written = self.image_service.save(self.render(), path)
            logger.info(f"Saved image to {written}")
            return written
        return self._run("save", _save)

    # ─── Filters ───────────────────────────────────────────────────
    def apply_filter(self, filter_type: Union[FilterType, str]) -> OperationResult:
        def _apply():
            ftype = FilterType.from_name(filter_type)
            self.image_service.require_loaded(self._image)
            new_pixels = self.filter_service.apply(self._image, ftype)
            new_image = self.image_service.create_image(new_pixels, self._image.path)
            display = self._render(self._params, new_image)
            self.history.push(self._image)
            self._image = new_image
            logger.info(f"Applied filter: {ftype.value}")
            return self._refresh(display)
        return self._run("apply_filter", _apply)

    # ─── Adjustments ───────────────────────────────────────────────
    def set_brightness(self, factor: float) -> OperationResult:
        return self._run(
            "set_brightness",
            lambda: self._update_parameters(brightness=_number(factor, float, "brightness")),
        )

    def set_saturation(self, factor: float) -> OperationResult:
        return self._run(
            "set_saturation",
            lambda: self._update_parameters(saturation=_number(factor, float, "saturation")),
        )

    def set_scale(self, factor: float) -> OperationResult:
        return self._run(
            "set_scale",
            lambda: self._update_parameters(scale=_number(factor, float, "scale")),
        )

    def set_channel_offsets(self, red: int, green: int, blue: int) -> OperationResult:
        return self._run(
            "set_channel_offsets",
            lambda: self._update_parameters(
                red=_number(red, int, "red"),
                green=_number(green, int, "green"),
                blue=_number(blue, int, "blue"),
            ),
        )

    def reset_adjustments(self) -> OperationResult:
        def _reset():
            defaults = AdjustmentParameters()
            return self._update_parameters(
                brightness=defaults.brightness,
                saturation=defaults.saturation,
                scale=defaults.scale,
                red=defaults.red,
                green=defaults.green,
                blue=defaults.blue,
            )
        return self._run("reset_adjustments", _reset)

    # ─── Overlay ───────────────────────────────────────────────────
    def add_overlay(self, path: Union[str, Path], opacity: float = None) -> OperationResult:
        """
        Blend a second image over the current one on every refresh.
        Does not touch the stored image, so nothing is pushed to history.
        """
        def _add():
            self.image_service.require_loaded(self._image)
            alpha = self.default_overlay_opacity if opacity is None else _number(opacity, float, "opacity")
            candidate = replace(self._params, opacity=alpha)
            candidate.validate()
            candidate.overlay = self.image_service.load(path)
            display = self._render(candidate)
            self._params = candidate
            logger.info(f"Overlay added: {path} (opacity={alpha})")
            return self._refresh(display)
        return self._run("add_overlay", _add)

    def remove_overlay(self) -> OperationResult:
        def _remove():
            self._params = replace(self._params, overlay=None, opacity=0.0)
            return self._refresh() if self.has_image else None
        return self._run("remove_overlay", _remove)

    # ─── History ───────────────────────────────────────────────────
    def undo(self) -> OperationResult:
        def _undo():
            display = self._render(self._params, self.history.peek())
            self._image = self.history.pop()
            logger.info(f"Undo → {self._image.width}x{self._image.height} ({len(self.history)} left)")
            return self._refresh(display)
        return self._run("undo", _undo)

    # ─── Palette ───────────────────────────────────────────────────
    def extract_palette(self, color_count: int = None) -> OperationResult:
        """Palette of the stored image; the value is a Palette."""
        count = self.default_palette_size if color_count is None else int(color_count)
        return self._run("extract_palette",
                         lambda: self.palette_service.extract(self._image.clone(), count))

    # ─── Rendering ─────────────────────────────────────────────────
    def render(self) -> Image:
        return self._render(self._params)

    # ─── Internal helpers ──────────────────────────────────────────
    def _run(self, action: str, operation: Callable[[], Any]) -> OperationResult:
        try:
            return OperationResult(value=operation())
        except EditorError as err:
            logger.warning(f"{action} failed [{err.kind}]: {err}")
            if self.on_error is not None:
                self.on_error(err)
            return OperationResult(error=err)

    def _render(self, params: AdjustmentParameters, image: Image = None) -> Image:
        try:
            return adjustment_pipeline.render(self._image if image is None else image, params)
        except EditorError:
            raise
        except (cv2.error, MemoryError, ValueError, OverflowError) as err:
            raise InvalidParameter(f"Cannot render with these adjustments: {err}") from err

    def _refresh(self, display: Image = None) -> Image:
        if display is None:
            display = self.render()
        if self.on_refresh is not None:
            self.on_refresh(display)
        return display

    def _replace_image(self, new_image: Image) -> Image:
        # decode has succeeded; state changes start once the display renders
        display = self._render(self._params, new_image)
        self.history.push(self._image)
        self._image = new_image
        logger.info(f"Opened {new_image.path or '<bytes>'} ({new_image.width}x{new_image.height})")
        return self._refresh(display)

    def _update_parameters(self, **changes) -> Image:
        self.image_service.require_loaded(self._image)
        candidate = replace(self._params, **changes)
        candidate.validate()

        if all(getattr(self._params, name) == value for name, value in changes.items()):
            return self._refresh()

        # render first: a candidate that cannot be displayed is never committed
        display = self._render(candidate)
        self.history.push(self._image)
        self._params = candidate
        logger.debug(f"Adjustment changed: {changes}")
        return self._refresh(display)
