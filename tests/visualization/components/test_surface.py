"""Unit tests for the drawing surface."""

import pytest

from klinechart.visualization.components.surface import ListenerScope, PointerEvent, Surface


@pytest.fixture
def bare_surface():
    """Create a surface placed 100px down the page."""
    return Surface(width=480, height=250, top=100)


def test_events_bubble_to_document(bare_surface):
    """Test that element events reach the container and the document."""
    element = bare_surface.create_element('label', 'test', 'label', top=50)
    seen = []
    bare_surface.container.add_listener('mousedown', lambda e: seen.append('container'))
    bare_surface.document.add_listener('mousedown', lambda e: seen.append('document'))
    element.add_listener('mousedown', lambda e: seen.append('element'))

    bare_surface.mouse_down(150, target=element)

    assert seen == ['element', 'container', 'document']


def test_stop_propagation(bare_surface):
    """Test that stopping propagation keeps ancestors from seeing the event."""
    element = bare_surface.create_element('label', 'test', 'label')
    seen = []
    element.add_listener('mousedown', lambda e: e.stop_propagation())
    bare_surface.container.add_listener('mousedown', lambda e: seen.append(e))

    bare_surface.mouse_down(150, target=element)

    assert seen == []


def test_mouse_up_synthesizes_click_on_same_target(bare_surface):
    """Test that a press and release on the same target produce a click."""
    clicks = []
    bare_surface.container.add_listener('click', clicks.append)

    bare_surface.mouse_down(150)
    bare_surface.mouse_up(160)
    assert len(clicks) == 1

    element = bare_surface.create_element('label', 'test', 'label')
    bare_surface.mouse_down(150, target=element)
    bare_surface.mouse_up(160)
    assert len(clicks) == 1


def test_mouse_leave_does_not_bubble(bare_surface):
    """Test that mouseleave stays on the container."""
    seen = []
    bare_surface.document.add_listener('mouseleave', seen.append)
    bare_surface.container.add_listener('mouseleave', seen.append)

    bare_surface.mouse_leave()

    assert len(seen) == 1


def test_touch_events_keep_start_target(bare_surface):
    """Test that touch moves go to the element the touch started on."""
    element = bare_surface.create_element('label', 'test', 'label')
    targets = []
    element.add_listener('touchmove', lambda e: targets.append(e.target))

    bare_surface.touch_start(150, target=element)
    bare_surface.touch_move(170)
    bare_surface.touch_end()

    assert targets == [element]


def test_listener_scope_release(bare_surface):
    """Test that releasing a scope removes all of its listeners."""
    scope = ListenerScope()
    scope.listen(bare_surface.document, 'mousemove', lambda e: None)
    scope.listen(bare_surface.container, 'click', lambda e: None)
    assert len(scope) == 2
    assert bare_surface.listener_count() == 2

    scope.release()

    assert not scope
    assert bare_surface.listener_count() == 0


def test_handler_may_unsubscribe_during_dispatch(bare_surface):
    """Test that a handler removing itself does not skip the others."""
    calls = []

    def once(event):
        calls.append('once')
        subscription.release()

    subscription = bare_surface.container.add_listener('click', once)
    bare_surface.container.add_listener('click', lambda e: calls.append('other'))

    bare_surface.click(150)
    bare_surface.click(150)

    assert calls == ['once', 'other', 'other']


def test_client_center_y(bare_surface):
    """Test element centres in client coordinates."""
    label = bare_surface.create_element('label', 'test', 'label', top=40)
    line = bare_surface.create_element('line', 'test', 'line', y1=70)
    zone = bare_surface.create_element('zone', 'test', 'zone', top=20, height=60)

    assert bare_surface.client_center_y(label) == 140
    assert bare_surface.client_center_y(line) == 170
    assert bare_surface.client_center_y(zone) == 150


def test_remove_element(bare_surface):
    """Test that removed elements drop their listeners."""
    element = bare_surface.create_element('label', 'test', 'label')
    element.add_listener('mousedown', lambda e: None)

    bare_surface.remove_element(element)

    assert element.removed
    assert element not in bare_surface.elements
    assert bare_surface.listener_count() == 0


def test_timers_fire_in_order(bare_surface):
    """Test the timer queue."""
    fired = []
    bare_surface.set_timeout(300, lambda: fired.append('b'))
    bare_surface.set_timeout(100, lambda: fired.append('a'))
    cancelled = bare_surface.set_timeout(200, lambda: fired.append('x'))
    cancelled.cancel()

    assert bare_surface.advance(250) == 1
    assert fired == ['a']
    assert bare_surface.pending_timers() == 1

    bare_surface.advance(50)
    assert fired == ['a', 'b']
    assert bare_surface.now == 300


def test_viewport_defaults_to_width():
    """Test the viewport width fallback."""
    surface = Surface(width=480)
    assert surface.viewport_width == 480

    surface.viewport_width = 1024
    assert surface.viewport_width == 1024


def test_pointer_event_flags():
    """Test pointer event helpers."""
    event = PointerEvent('touchmove', client_y=10, touches=1)

    event.prevent_default()

    assert event.is_touch
    assert event.default_prevented
    assert not PointerEvent('mousemove').is_touch
