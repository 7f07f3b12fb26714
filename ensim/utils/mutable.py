"""Change notification for objects that presentation layers display.

An object that changes in a way a user interface should redraw (a name
change, a termination added to an ensemble, a probe attached to a
simulator) fires a ChangeEvent to its registered listeners. Listeners are
plain callables or objects with a ``changed(event)`` method.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ChangeEvent:
    """Something about ``obj`` changed; re-read all of its displayed state."""
    obj: Any


@dataclass(frozen=True)
class NameChangeEvent(ChangeEvent):
    """Only the name of ``obj`` changed."""
    old_name: str = ""
    new_name: str = ""


class VisiblyMutable:
    """Mixin holding a listener list.

    Subclasses call ``fire_change()`` once per logical change. Listeners
    are not copied by ``clone()`` implementations; call
    ``_reset_listeners()`` on the copy.
    """

    def _listener_list(self):
        try:
            return self._listeners
        except AttributeError:
            self._listeners = []
            return self._listeners

    def _reset_listeners(self):
        self._listeners = []

    def add_change_listener(self, listener):
        """Register ``listener``. Registering the same listener twice is a no-op."""
        listeners = self._listener_list()
        if listener not in listeners:
            listeners.append(listener)

    def remove_change_listener(self, listener):
        """Deregister ``listener``. Unknown listeners are ignored."""
        listeners = self._listener_list()
        if listener in listeners:
            listeners.remove(listener)

    @property
    def change_listeners(self):
        return tuple(self._listener_list())

    def fire_change(self, event=None):
        """Notify every listener of ``event`` (a ChangeEvent on self by default)."""
        if event is None:
            event = ChangeEvent(self)
        # copy: a listener may deregister itself while being notified
        for listener in list(self._listener_list()):
            if hasattr(listener, "changed"):
                listener.changed(event)
            else:
                listener(event)

    def fire_name_change(self, old_name, new_name):
        self.fire_change(NameChangeEvent(self, old_name, new_name))
