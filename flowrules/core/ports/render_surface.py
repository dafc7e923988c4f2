"""
RenderSurface Port - Interface to the diagram that element states are applied to.

The engine never draws anything itself; it drives an implementation of this
port (a graph model in a browser bridge, a test double, ...).
"""

from abc import ABC, abstractmethod
from typing import Any


class RenderSurface(ABC):
    """
    Abstract interface for a mutable diagram.

    Elements are opaque handles returned by ``get_element`` /
    ``find_element_by_value`` and passed back to the mutation methods.
    """

    @abstractmethod
    def element_ids(self) -> list[str]:
        """All element identifiers, in diagram order."""
        ...

    @abstractmethod
    def get_element(self, element_id: str) -> Any | None:
        """
        Look up an element by identifier.

        Returns:
            Element handle, or None if the diagram has no such element
        """
        ...

    @abstractmethod
    def find_element_by_value(self, value: str) -> Any | None:
        """Look up an element by its displayed value (for surfaces keyed differently)."""
        ...

    @abstractmethod
    def get_value(self, element: Any) -> str:
        """Current label of an element."""
        ...

    @abstractmethod
    def set_value(self, element: Any, value: str) -> None:
        ...

    @abstractmethod
    def set_visible(self, element: Any, visible: bool) -> None:
        ...

    @abstractmethod
    def set_style(self, element: Any, key: str, value: str) -> None:
        """
        Set one style property of an element.

        Args:
            element: Element handle
            key: Style key, e.g. 'fillColor'
            value: Style value, e.g. '#F2495C'
        """
        ...

    @abstractmethod
    def animate(self, element: Any, animation: str, duration: int) -> None:
        """Start an animation on an element; duration in milliseconds."""
        ...

    @abstractmethod
    def clear_animations(self) -> None:
        ...

    @abstractmethod
    def begin_update(self) -> None:
        """Open a mutation bracket; changes become visible at ``end_update``."""
        ...

    @abstractmethod
    def end_update(self) -> None:
        ...

    def refresh(self) -> None:
        """Redraw after an update bracket. No-op by default."""
        return None
