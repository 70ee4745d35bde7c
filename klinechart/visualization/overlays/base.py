"""Base classes for chart overlays."""

import logging
from abc import ABC, abstractmethod
from functools import wraps
from typing import TYPE_CHECKING, Callable, Dict, Iterator, List, Optional, Type, TypeVar

from ..components.surface import Element, ListenerScope, Surface
from ..utils.scales import CoordinateMapper

if TYPE_CHECKING:
    from ..components.chart import PriceChart

logger = logging.getLogger(__name__)

NARROW_BREAKPOINT = 600  # viewport width in pixels

O = TypeVar('O', bound='Overlay')


def guarded(method: Callable) -> Callable:
    """Keep overlay failures inside the overlay.

    The error is logged and the overlay falls back to its hidden state; the
    caller (registry, surface dispatch) never sees the exception.
    """
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except Exception:
            logger.exception(f"{self.overlay_id}: {method.__name__} failed")
            self._hide_elements()
            return None
    return wrapper


class Overlay(ABC):
    """Base class for chart overlays.

    An overlay owns a set of surface elements, created once in `initialize`
    and updated on every render. Geometry is always recomputed from the
    chart's current mapper; an overlay never keeps a mapper between calls.
    """

    def __init__(self, overlay_id: Optional[str] = None):
        """Initialize the overlay.

        Args:
            overlay_id: Stable identifier used for registry lookup, the
                class name by default
        """
        self.overlay_id = overlay_id or type(self).__name__
        self.enabled = True
        self.chart: Optional['PriceChart'] = None
        self.surface: Optional[Surface] = None
        self.registry: Optional['OverlayRegistry'] = None
        self.elements: Dict[str, Element] = {}
        self._listeners = ListenerScope()
        self._initialized = False
        self._disposed = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def disposed(self) -> bool:
        return self._disposed

    def initialize(
        self: O,
        chart: 'PriceChart',
        surface: Surface,
        registry: Optional['OverlayRegistry'] = None
    ) -> O:
        """Bind the chart and surface and create the owned elements.

        Calling it again on an initialized overlay does nothing.

        Args:
            chart: Chart whose state the overlay reads
            surface: Container surface the elements live on
            registry: Registry used to reach other overlays

        Returns:
            The overlay itself
        """
        if self._initialized:
            return self
        if self._disposed:
            raise RuntimeError(f"{self.overlay_id} has been disposed")

        self.chart = chart
        self.surface = surface
        self.registry = registry
        self._create_elements()
        self._bind_listeners()
        self._initialized = True
        logger.debug(f"Initialized overlay {self.overlay_id}")
        return self

    def _element(self, name: str, kind: str, **attrs) -> Element:
        """Create an element owned by this overlay."""
        element = self.surface.create_element(kind, self.overlay_id, name, **attrs)
        self.elements[name] = element
        return element

    @abstractmethod
    def _create_elements(self) -> None:
        """Create the overlay's elements on the surface."""
        pass

    def _bind_listeners(self) -> None:
        """Register long-lived event listeners, through `self._listeners`."""
        pass

    def _mapper(self) -> Optional[CoordinateMapper]:
        if self.chart is None or not self.chart.series:
            return None
        return self.chart.mapper

    @property
    def is_narrow(self) -> bool:
        return self.surface is not None and self.surface.viewport_width < NARROW_BREAKPOINT

    @guarded
    def render(self) -> None:
        """Recompute geometry and update the elements.

        Does nothing while disabled; clears when the chart has no data.
        """
        if not self._initialized or not self.enabled:
            return
        mapper = self._mapper()
        if mapper is None:
            self.clear()
            return
        self._update_geometry(mapper)
        self._paint()

    @guarded
    def on_resize(self) -> None:
        """Recompute geometry after a resize, even while disabled.

        Elements are only repainted while enabled.
        """
        if not self._initialized:
            return
        mapper = self._mapper()
        if mapper is None:
            self.clear()
            return
        self._update_geometry(mapper)
        if self.enabled:
            self._paint()

    @guarded
    def on_data_update(self) -> None:
        if self.enabled:
            self.render()

    def _update_geometry(self, mapper: CoordinateMapper) -> None:
        """Compute pixel geometry from the current mapper without touching elements."""
        pass

    @abstractmethod
    def _paint(self) -> None:
        """Write the computed geometry into the elements and show them."""
        pass

    @guarded
    def clear(self) -> None:
        """Hide every element, keeping them for the next render."""
        self._hide_elements()

    def _hide_elements(self) -> None:
        for element in self.elements.values():
            element.hide()

    def set_enabled(self: O, enabled: bool) -> O:
        """Enable or disable the overlay.

        Disabling cancels any drag in progress and hides the elements;
        enabling renders again.
        """
        enabled = bool(enabled)
        if enabled == self.enabled:
            return self
        self.enabled = enabled
        if enabled:
            self.render()
        else:
            self._cancel_interaction()
            self.clear()
        logger.debug(f"{self.overlay_id} {'enabled' if enabled else 'disabled'}")
        return self

    def _cancel_interaction(self) -> None:
        """Abort pointer interaction in progress and drop its listeners."""
        pass

    def dispose(self) -> None:
        """Permanently remove the overlay's elements and listeners."""
        if self._disposed:
            return
        if self._initialized:
            self.clear()
            self._cancel_interaction()
            self._listeners.release()
            for element in self.elements.values():
                self.surface.remove_element(element)
        self.elements.clear()
        self._disposed = True
        self._initialized = False
        logger.debug(f"Disposed overlay {self.overlay_id}")

    def __repr__(self) -> str:
        state = 'enabled' if self.enabled else 'disabled'
        return f"<{type(self).__name__} {self.overlay_id} {state}>"


class OverlayRegistry:
    """Keyed, ordered collection of the overlays of one chart."""

    def __init__(self, chart: 'PriceChart', surface: Surface):
        """Initialize the registry.

        Args:
            chart: Chart the overlays read from
            surface: Container surface the overlays draw on
        """
        self.chart = chart
        self.surface = surface
        self._overlays: Dict[str, Overlay] = {}

    def add(self, overlay: O) -> O:
        """Initialize, store and render an overlay.

        Args:
            overlay: The overlay to add

        Returns:
            The overlay

        Raises:
            ValueError: If an overlay with the same id is already registered
        """
        if overlay.overlay_id in self._overlays:
            raise ValueError(f"Overlay '{overlay.overlay_id}' is already registered")
        overlay.initialize(self.chart, self.surface, self)
        self._overlays[overlay.overlay_id] = overlay
        overlay.render()
        logger.info(f"Added overlay {overlay.overlay_id}")
        return overlay

    def get(self, overlay_id: str) -> Optional[Overlay]:
        return self._overlays.get(overlay_id)

    def get_by_type(self, overlay_type: Type[O]) -> Optional[O]:
        """First registered overlay of the given type."""
        for overlay in self._overlays.values():
            if isinstance(overlay, overlay_type):
                return overlay
        return None

    def remove(self, overlay_id: str) -> Optional[Overlay]:
        """Dispose and forget an overlay."""
        overlay = self._overlays.pop(overlay_id, None)
        if overlay is not None:
            overlay.dispose()
            logger.info(f"Removed overlay {overlay_id}")
        return overlay

    def on_update(self) -> None:
        """Notify enabled overlays of new data, in insertion order."""
        for overlay in list(self._overlays.values()):
            if overlay.enabled:
                overlay.on_data_update()

    def on_resize(self) -> None:
        """Notify every overlay, enabled or not, of a resize."""
        for overlay in list(self._overlays.values()):
            overlay.on_resize()

    def enable_all(self) -> None:
        for overlay in list(self._overlays.values()):
            overlay.set_enabled(True)

    def disable_all(self) -> None:
        for overlay in list(self._overlays.values()):
            overlay.set_enabled(False)

    def clear(self) -> None:
        """Hide every overlay."""
        for overlay in list(self._overlays.values()):
            overlay.clear()

    def dispose(self) -> None:
        """Dispose and remove every overlay."""
        for overlay_id in list(self._overlays):
            self.remove(overlay_id)

    def __iter__(self) -> Iterator[Overlay]:
        return iter(list(self._overlays.values()))

    def __len__(self) -> int:
        return len(self._overlays)

    def __contains__(self, overlay_id: str) -> bool:
        return overlay_id in self._overlays

    @property
    def ids(self) -> List[str]:
        return list(self._overlays)
