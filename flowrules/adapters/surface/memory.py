"""
In-Memory Surface Adapter - A RenderSurface backed by plain Python objects.

Styles use the draw.io ``key=value;key=value`` notation. Mutations are only
allowed inside a begin/end update bracket.
"""

from dataclasses import dataclass, field

from flowrules.core.ports.render_surface import RenderSurface


@dataclass
class SurfaceElement:
    id: str
    value: str = ""
    style: dict[str, str] = field(default_factory=dict)
    visible: bool = True
    animation: tuple[str, int] | None = None  # (kind, duration ms)


def parse_style(style: str) -> dict[str, str]:
    """Parse a draw.io style string; bare tokens (shape names) map to ''."""
    result = {}
    for part in (style or "").split(";"):
        part = part.strip()
        if not part:
            continue
        key, sep, value = part.partition("=")
        result[key] = value if sep else ""
    return result


def format_style(style: dict[str, str]) -> str:
    return "".join(f"{k}={v};" if v != "" else f"{k};" for k, v in style.items())


class InMemorySurface(RenderSurface):
    """
    Diagram held in memory.

    Used for tests and for hosts that mirror a remote diagram and ship the
    resulting styles themselves.
    """

    def __init__(self, labels: dict[str, str] | None = None, styles: dict[str, str] | None = None):
        """
        Initialize the surface.

        Args:
            labels: Element id -> label, in diagram order
            styles: Element id -> draw.io style string
        """
        styles = styles or {}
        self.elements: dict[str, SurfaceElement] = {
            element_id: SurfaceElement(element_id, label, parse_style(styles.get(element_id, "")))
            for element_id, label in (labels or {}).items()
        }
        self._update_depth = 0
        self.refresh_count = 0

    def element_ids(self) -> list[str]:
        return list(self.elements)

    def labels(self) -> dict[str, str]:
        return {element_id: e.value for element_id, e in self.elements.items()}

    def get_element(self, element_id: str) -> SurfaceElement | None:
        return self.elements.get(element_id)

    def find_element_by_value(self, value: str) -> SurfaceElement | None:
        return next((e for e in self.elements.values() if e.value == value), None)

    def get_value(self, element: SurfaceElement) -> str:
        return element.value

    def set_value(self, element: SurfaceElement, value: str) -> None:
        self._check_in_update()
        element.value = value

    def set_visible(self, element: SurfaceElement, visible: bool) -> None:
        self._check_in_update()
        element.visible = visible

    def set_style(self, element: SurfaceElement, key: str, value: str) -> None:
        self._check_in_update()
        element.style[key] = value

    def style_of(self, element_id: str) -> str:
        return format_style(self.elements[element_id].style)

    def animate(self, element: SurfaceElement, animation: str, duration: int) -> None:
        self._check_in_update()
        element.animation = (animation, duration)

    def clear_animations(self) -> None:
        for element in self.elements.values():
            element.animation = None

    def begin_update(self) -> None:
        self._update_depth += 1

    def end_update(self) -> None:
        if self._update_depth == 0:
            raise RuntimeError("end_update() without matching begin_update()")
        self._update_depth -= 1

    def refresh(self) -> None:
        self.refresh_count += 1

    def _check_in_update(self) -> None:
        if self._update_depth == 0:
            raise RuntimeError("Surface mutated outside begin_update()/end_update()")
