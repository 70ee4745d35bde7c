"""Retained-mode drawing surface hosting overlay elements and pointer events.

The surface plays the part of the chart container in a page: it owns the
visual elements the overlays create, dispatches pointer/touch events to the
listeners registered on the container, the document or a single element, and
runs a millisecond timer queue driven by the host.
"""

import heapq
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

Handler = Callable[['PointerEvent'], None]


@dataclass
class PointerEvent:
    """A mouse or touch event in client (page) coordinates."""
    type: str
    client_x: float = 0.0
    client_y: float = 0.0
    button: int = 0
    touches: int = 0
    target: Any = None
    current_target: Any = None
    default_prevented: bool = False
    propagation_stopped: bool = False

    @property
    def is_touch(self) -> bool:
        return self.type.startswith('touch')

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class Subscription:
    """One listener registration; `release` detaches it."""

    def __init__(self, target: 'EventTarget', event_type: str, handler: Handler):
        self.target = target
        self.event_type = event_type
        self.handler = handler
        self.active = True

    def release(self) -> None:
        if self.active:
            self.target.remove_listener(self.event_type, self.handler)
            self.active = False


class ListenerScope:
    """A group of subscriptions acquired and released together."""

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def listen(self, target: 'EventTarget', event_type: str, handler: Handler) -> Subscription:
        subscription = target.add_listener(event_type, handler)
        self._subscriptions.append(subscription)
        return subscription

    def release(self) -> None:
        while self._subscriptions:
            self._subscriptions.pop().release()

    def __len__(self) -> int:
        return sum(1 for s in self._subscriptions if s.active)

    def __bool__(self) -> bool:
        return len(self) > 0


class EventTarget:
    """Something listeners can be attached to."""

    def __init__(self, name: str, parent: Optional['EventTarget'] = None):
        self.name = name
        self.parent = parent
        self._listeners: Dict[str, List[Handler]] = defaultdict(list)

    def add_listener(self, event_type: str, handler: Handler) -> Subscription:
        self._listeners[event_type].append(handler)
        return Subscription(self, event_type, handler)

    def remove_listener(self, event_type: str, handler: Handler) -> None:
        handlers = self._listeners.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def remove_all_listeners(self) -> None:
        self._listeners.clear()

    def listener_count(self, event_type: Optional[str] = None) -> int:
        if event_type is not None:
            return len(self._listeners.get(event_type, ()))
        return sum(len(h) for h in self._listeners.values())

    def handle(self, event: PointerEvent) -> None:
        event.current_target = self
        # Copy so handlers may unsubscribe while being dispatched
        for handler in list(self._listeners.get(event.type, ())):
            handler(event)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class Element(EventTarget):
    """A visual primitive owned by exactly one overlay.

    Geometry and style live in `attrs`; which keys are meaningful depends on
    the kind:

    * ``line``: x1, y1, x2, y2, color, width, dash
    * ``circle``: cx, cy, r, color
    * ``label``: top (centre, container coordinates), left or right offset,
      anchor, text, title, background, color, font_size, padding
    * ``zone``: top, height, left, right, background, border_color
    """

    def __init__(self, kind: str, owner: str, name: str, parent: EventTarget, **attrs):
        super().__init__(f"{owner}.{name}", parent)
        self.kind = kind
        self.owner = owner
        self.attrs: Dict[str, Any] = dict(attrs)
        self.visible = False
        self.removed = False

    def set(self, **attrs) -> 'Element':
        self.attrs.update(attrs)
        return self

    def get(self, key: str, default: Any = None) -> Any:
        return self.attrs.get(key, default)

    def show(self) -> 'Element':
        self.visible = True
        return self

    def hide(self) -> 'Element':
        self.visible = False
        return self

    @property
    def text(self) -> Optional[str]:
        return self.attrs.get('text')


class Timer:
    """Handle of a scheduled callback."""

    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self.cancelled = True

    @property
    def pending(self) -> bool:
        return not (self.cancelled or self.fired)


@dataclass
class _TimerEntry:
    due: float
    seq: int
    timer: Timer = field(compare=False)

    def __lt__(self, other: '_TimerEntry') -> bool:
        return (self.due, self.seq) < (other.due, other.seq)


class Surface:
    """The chart container: elements, event targets, geometry and timers."""

    def __init__(
        self,
        width: float = 800.0,
        height: float = 450.0,
        top: float = 0.0,
        left: float = 0.0,
        viewport_width: Optional[float] = None
    ):
        """Initialize the surface.

        Args:
            width: Container width in pixels
            height: Container height in pixels
            top: Client Y of the container's top edge
            left: Client X of the container's left edge
            viewport_width: Width of the page viewport, the container width by default
        """
        self.width = width
        self.height = height
        self.top = top
        self.left = left
        self._viewport_width = viewport_width

        self.document = EventTarget('document')
        self.container = EventTarget('container', parent=self.document)
        self.elements: List[Element] = []

        self.now = 0.0
        self._timers: List[_TimerEntry] = []
        self._seq = count()

        self._pressed_target: Optional[EventTarget] = None
        self._touch_target: Optional[EventTarget] = None

    @property
    def viewport_width(self) -> float:
        return self._viewport_width if self._viewport_width is not None else self.width

    @viewport_width.setter
    def viewport_width(self, value: Optional[float]) -> None:
        self._viewport_width = value

    # Elements

    def create_element(self, kind: str, owner: str, name: str, **attrs) -> Element:
        element = Element(kind, owner, name, self.container, **attrs)
        self.elements.append(element)
        return element

    def remove_element(self, element: Element) -> None:
        element.remove_all_listeners()
        element.hide()
        element.removed = True
        if element in self.elements:
            self.elements.remove(element)

    def elements_of(self, owner: str) -> List[Element]:
        return [e for e in self.elements if e.owner == owner]

    def visible_elements(self) -> List[Element]:
        return [e for e in self.elements if e.visible]

    def client_center_y(self, element: Element) -> float:
        """Client Y of an element's vertical centre."""
        if element.kind == 'line':
            return self.top + element.get('y1', 0.0)
        if element.kind == 'circle':
            return self.top + element.get('cy', 0.0)
        if element.kind == 'zone':
            return self.top + element.get('top', 0.0) + element.get('height', 0.0) / 2
        return self.top + element.get('top', 0.0)

    def listener_count(self) -> int:
        """Total number of listeners on the document, container and elements."""
        return (
            self.document.listener_count()
            + self.container.listener_count()
            + sum(e.listener_count() for e in self.elements)
        )

    # Events

    def dispatch(self, event: PointerEvent, target: Optional[EventTarget] = None, bubbles: bool = True) -> PointerEvent:
        """Deliver an event to `target` (the container by default) and its ancestors."""
        target = target or self.container
        event.target = target
        node: Optional[EventTarget] = target
        while node is not None:
            node.handle(event)
            if not bubbles or event.propagation_stopped:
                break
            node = node.parent
        return event

    def mouse_down(self, client_y: float, target: Optional[EventTarget] = None, button: int = 0, client_x: float = 0.0) -> PointerEvent:
        self._pressed_target = target or self.container
        return self.dispatch(PointerEvent('mousedown', client_x, client_y, button=button), target)

    def mouse_move(self, client_y: float, target: Optional[EventTarget] = None, client_x: float = 0.0) -> PointerEvent:
        return self.dispatch(PointerEvent('mousemove', client_x, client_y), target)

    def mouse_up(self, client_y: float, target: Optional[EventTarget] = None, button: int = 0, client_x: float = 0.0) -> PointerEvent:
        """Release the button; a click follows when pressed and released on the same target."""
        target = target or self.container
        event = self.dispatch(PointerEvent('mouseup', client_x, client_y, button=button), target)
        if self._pressed_target is target:
            self.dispatch(PointerEvent('click', client_x, client_y, button=button), target)
        self._pressed_target = None
        return event

    def click(self, client_y: float, target: Optional[EventTarget] = None, client_x: float = 0.0) -> PointerEvent:
        return self.dispatch(PointerEvent('click', client_x, client_y), target)

    def mouse_leave(self) -> PointerEvent:
        return self.dispatch(PointerEvent('mouseleave'), self.container, bubbles=False)

    def touch_start(self, client_y: float, target: Optional[EventTarget] = None, touches: int = 1, client_x: float = 0.0) -> PointerEvent:
        self._touch_target = target or self.container
        return self.dispatch(PointerEvent('touchstart', client_x, client_y, touches=touches), self._touch_target)

    def touch_move(self, client_y: float, touches: int = 1, client_x: float = 0.0) -> PointerEvent:
        # Touch events keep targeting the element the touch started on
        return self.dispatch(PointerEvent('touchmove', client_x, client_y, touches=touches), self._touch_target)

    def touch_end(self, client_y: float = 0.0, client_x: float = 0.0) -> PointerEvent:
        event = self.dispatch(PointerEvent('touchend', client_x, client_y, touches=0), self._touch_target)
        self._touch_target = None
        return event

    # Timers

    def set_timeout(self, delay_ms: float, callback: Callable[[], None]) -> Timer:
        timer = Timer(self.now + delay_ms, callback)
        heapq.heappush(self._timers, _TimerEntry(timer.due, next(self._seq), timer))
        return timer

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing every timer that becomes due.

        Returns:
            int: Number of callbacks fired
        """
        deadline = self.now + ms
        fired = 0
        while self._timers and self._timers[0].due <= deadline:
            entry = heapq.heappop(self._timers)
            self.now = entry.due
            if entry.timer.cancelled:
                continue
            entry.timer.fired = True
            entry.timer.callback()
            fired += 1
        self.now = deadline
        return fired

    def pending_timers(self) -> int:
        return sum(1 for e in self._timers if e.timer.pending)
