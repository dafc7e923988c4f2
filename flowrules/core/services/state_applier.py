"""
State Applier - Pushes computed element states onto a rendering surface.

All mutations of one call happen inside a single begin/end update bracket.
Elements the surface does not know are skipped; an element that fails does
not stop the others.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from flowrules.core.domain.state import ElementState, ShapeState
from flowrules.core.ports.render_surface import RenderSurface

logger = logging.getLogger(__name__)

_SHAPE_STYLE_KEYS = (
    ("fill_color", "fillColor"),
    ("stroke_color", "strokeColor"),
    ("font_color", "fontColor"),
    ("bg_color", "labelBackgroundColor"),
)


@dataclass
class ApplyReport:
    """Outcome of one apply call."""

    applied: int = 0
    total: int = 0
    skipped: list[str] = field(default_factory=list)  # not found on the surface
    failed: list[str] = field(default_factory=list)


def apply_states(surface: RenderSurface, states: Mapping[str, ElementState]) -> ApplyReport:
    """
    Apply element states to the surface.

    Args:
        surface: Diagram to mutate
        states: Output of the state computer

    Returns:
        Counts of applied, skipped and failed elements
    """
    if surface is None:
        raise ValueError("apply_states requires a rendering surface")

    report = ApplyReport(total=len(states))

    # an empty map still clears animations left by the previous pass
    surface.begin_update()
    try:
        surface.clear_animations()
        for element_id, state in states.items():
            element = find_element(surface, element_id)
            if element is None:
                report.skipped.append(element_id)
                continue
            try:
                _apply_element(surface, element, state)
            except Exception as e:
                logger.debug(f"Failed to apply state to '{element_id}': {e}")
                report.failed.append(element_id)
                continue
            report.applied += 1
    finally:
        surface.end_update()

    surface.refresh()

    if report.failed:
        logger.error(
            f"Failed to apply {len(report.failed)}/{report.total} element states "
            f"(first: {report.failed[0]})"
        )
    logger.info(f"Applied states to {report.applied}/{report.total} elements")
    return report


def reset_states(surface: RenderSurface, original_values: Mapping[str, str]) -> None:
    """Restore the label and visibility of every given element, rule-touched or not."""
    if surface is None:
        raise ValueError("reset_states requires a rendering surface")

    surface.begin_update()
    try:
        surface.clear_animations()
        for element_id, value in original_values.items():
            element = find_element(surface, element_id)
            if element is None:
                continue
            surface.set_value(element, value)
            surface.set_visible(element, True)
    finally:
        surface.end_update()
    surface.refresh()
    logger.info(f"Reset {len(original_values)} elements to their original values")


def snapshot_values(surface: RenderSurface, element_ids: Iterable[str] | None = None) -> dict[str, str]:
    """Capture current labels so they can be restored by ``reset_states``."""
    ids = surface.element_ids() if element_ids is None else element_ids
    snapshot = {}
    for element_id in ids:
        element = surface.get_element(element_id)
        if element is not None:
            snapshot[element_id] = surface.get_value(element)
    return snapshot


def find_element(surface: RenderSurface, element_id: str) -> Any | None:
    element = surface.get_element(element_id)
    if element is not None:
        return element
    return surface.find_element_by_value(element_id)


def _apply_element(surface: RenderSurface, element: Any, state: ElementState) -> None:
    if state.shape is not None:
        _apply_shape(surface, element, state.shape)
        surface.set_visible(element, state.shape.visible)

    if state.text is not None and state.text.value is not None:
        surface.set_value(element, state.text.value)

    if state.event is not None and state.event.active:
        surface.animate(element, state.event.animation, state.event.duration)


def _apply_shape(surface: RenderSurface, element: Any, shape: ShapeState) -> None:
    for attr, style_key in _SHAPE_STYLE_KEYS:
        color = getattr(shape, attr)
        if color:
            surface.set_style(element, style_key, color)
    if shape.opacity is not None:
        surface.set_style(element, "opacity", str(round(shape.opacity * 100)))
