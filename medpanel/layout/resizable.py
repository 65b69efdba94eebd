"""
Pane resizing for the three-column dashboard.

Widths are percentages of the container. A drag remembers where the pointer
went down, how wide the container was at that moment and the pane width at
that moment; every pointer move recomputes the width from those three values
so rounding never accumulates.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional


logger = logging.getLogger(__name__)

Listener = Callable[..., object]


class PointerEvents:
    """Document-level listener registry; a resizer only subscribes while a drag is active."""

    def __init__(self) -> None:
        self._listeners: Dict[str, List[Listener]] = {}

    def add_listener(self, event: str, listener: Listener) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def remove_listener(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        try:
            listeners.remove(listener)
        except ValueError:
            pass
        if not listeners:
            del self._listeners[event]

    def dispatch(self, event: str, *args) -> None:
        for listener in list(self._listeners.get(event, [])):
            listener(*args)

    def listener_count(self, event: Optional[str] = None) -> int:
        if event is not None:
            return len(self._listeners.get(event, []))
        return sum(len(v) for v in self._listeners.values())


@dataclass(frozen=True)
class _DragState:
    origin_x: float
    container_width: float
    start_width: float


class PanelResizer:

    def __init__(
        self,
        initial_width: float,
        min_width: float,
        max_width: float,
        threshold: float = 0.1,
        direction: int = 1,
        on_change: Optional[Callable[[float], None]] = None,
        events: Optional[PointerEvents] = None,
    ) -> None:
        if min_width > max_width:
            raise ValueError("min_width must not exceed max_width")
        self.min_width = min_width
        self.max_width = max_width
        self.threshold = threshold
        # -1 for a divider on the pane's left edge: dragging right shrinks the pane
        self.direction = 1 if direction >= 0 else -1
        self.on_change = on_change
        self.events = events or PointerEvents()
        self._width = self.clamp(initial_width)
        self._drag: Optional[_DragState] = None

    @property
    def width(self) -> float:
        return self._width

    @property
    def dragging(self) -> bool:
        return self._drag is not None

    def clamp(self, width: float) -> float:
        return min(max(width, self.min_width), self.max_width)

    def begin_drag(self, pointer_x: float, container_width: float) -> None:
        if container_width <= 0:
            logger.debug("Ignoring drag start on a container with no width")
            return
        if self._drag is not None:
            self.end_drag()
        self._drag = _DragState(pointer_x, container_width, self._width)
        self.events.add_listener("move", self.drag_to)
        self.events.add_listener("up", self.end_drag)

    def drag_to(self, pointer_x: float) -> bool:
        """Apply a pointer move; returns True when the width actually changed."""
        drag = self._drag
        if drag is None:
            return False
        delta_percent = (pointer_x - drag.origin_x) / drag.container_width * 100
        new_width = self.clamp(drag.start_width + self.direction * delta_percent)
        if abs(new_width - self._width) <= self.threshold:
            return False
        self._width = new_width
        if self.on_change is not None:
            self.on_change(new_width)
        return True

    def end_drag(self, *_args) -> None:
        if self._drag is None:
            return
        self._drag = None
        self.events.remove_listener("move", self.drag_to)
        self.events.remove_listener("up", self.end_drag)

    def set_width(self, width: float) -> float:
        self._width = self.clamp(width)
        if self.on_change is not None:
            self.on_change(self._width)
        return self._width

    def close(self) -> None:
        self.end_drag()


class PaneLayout:
    """Left, middle and right panes split by two dividers; the middle pane takes the rest."""

    LEFT_DEFAULT = 30.0
    RIGHT_DEFAULT = 35.0
    MIN_PANE = 20.0
    MAX_PANE = 50.0

    def __init__(
        self,
        left: float = LEFT_DEFAULT,
        right: float = RIGHT_DEFAULT,
        min_pane: float = MIN_PANE,
        max_pane: float = MAX_PANE,
        events: Optional[PointerEvents] = None,
    ) -> None:
        self.events = events or PointerEvents()
        self.left = PanelResizer(left, min_pane, max_pane, events=self.events)
        self.right = PanelResizer(right, min_pane, max_pane, direction=-1, events=self.events)

    @property
    def middle_width(self) -> float:
        return 100.0 - self.left.width - self.right.width

    def widths(self) -> Dict[str, float]:
        return {"left": self.left.width, "middle": self.middle_width, "right": self.right.width}

    def restore(self, left: float, right: float) -> Dict[str, float]:
        self.left.set_width(left)
        self.right.set_width(right)
        return self.widths()

    def close(self) -> None:
        self.left.close()
        self.right.close()
