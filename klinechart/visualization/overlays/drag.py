"""Pointer drag handling for overlays with a draggable label."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..components.surface import Element, ListenerScope, PointerEvent, Surface

logger = logging.getLogger(__name__)


@dataclass
class DragState:
    """State of one drag gesture."""
    active: bool = False
    pointer_offset_y: float = 0.0
    last_price: Optional[float] = None


class DragController:
    """Turns pointer down/move/up on a handle into price updates.

    Mouse drags listen on the document while active; touch drags listen on
    the handle, which keeps receiving the touch events it started. Either way
    the drag-only listeners live in one scope released on pointer-up,
    `cancel()` or `dispose()`.
    """

    def __init__(
        self,
        surface: Surface,
        handle: Element,
        on_start: Callable[[], Optional[float]],
        on_move: Callable[[float], Optional[float]],
        on_end: Callable[[Optional[float]], None],
        can_start: Callable[[], bool] = lambda: True
    ):
        """Initialize the controller and arm the handle.

        Args:
            surface: Surface the handle lives on
            handle: Element that starts a drag when pressed
            on_start: Called when a drag starts, returns the starting price
            on_move: Called with the handle's new centre Y in container
                coordinates, returns the resulting price
            on_end: Called once with the final price when the drag ends
            can_start: Whether a drag may start right now
        """
        self.surface = surface
        self.handle = handle
        self._on_start = on_start
        self._on_move = on_move
        self._on_end = on_end
        self._can_start = can_start

        self.state = DragState()
        self._armed = ListenerScope()
        self._dragging = ListenerScope()

        self._armed.listen(handle, 'mousedown', self._handle_mouse_down)
        self._armed.listen(handle, 'touchstart', self._handle_touch_start)

    @property
    def active(self) -> bool:
        return self.state.active

    @property
    def listener_count(self) -> int:
        """Number of drag-only listeners currently registered."""
        return len(self._dragging)

    def _handle_mouse_down(self, event: PointerEvent) -> None:
        if event.button != 0:
            return
        if self._begin(event):
            self._dragging.listen(self.surface.document, 'mousemove', self._handle_move)
            self._dragging.listen(self.surface.document, 'mouseup', self._handle_end)

    def _handle_touch_start(self, event: PointerEvent) -> None:
        if event.touches != 1:
            return
        if self._begin(event):
            self._dragging.listen(self.handle, 'touchmove', self._handle_move)
            self._dragging.listen(self.handle, 'touchend', self._handle_end)

    def _begin(self, event: PointerEvent) -> bool:
        if self.state.active or not self._can_start():
            return False

        event.prevent_default()
        event.stop_propagation()
        self.state = DragState(
            active=True,
            pointer_offset_y=event.client_y - self.surface.client_center_y(self.handle),
            last_price=self._on_start(),
        )
        logger.debug(f"Drag started on {self.handle.name}")
        return True

    def _handle_move(self, event: PointerEvent) -> None:
        if not self.state.active:
            return
        event.prevent_default()
        event.stop_propagation()
        center_y = event.client_y - self.surface.top - self.state.pointer_offset_y
        price = self._on_move(center_y)
        if price is not None:
            self.state.last_price = price

    def _handle_end(self, event: PointerEvent) -> None:
        if not self.state.active:
            return
        price = self.state.last_price
        self.cancel()
        logger.debug(f"Drag ended on {self.handle.name} at {price}")
        self._on_end(price)

    def cancel(self) -> None:
        """Abort the drag, if any, without notifying."""
        self._dragging.release()
        self.state = DragState()

    def dispose(self) -> None:
        self.cancel()
        self._armed.release()
