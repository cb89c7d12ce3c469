"""Hash-fragment router.

Routes are registered in order and compiled once into literal and capture
segments. A capture segment is written ``{name}``::

    router.register("/", "home", exact=True)
    router.register("/profile/{username}", "profile", exact=True)

Patterns without captures match a path exactly (``exact=True``) or as a
string prefix (``exact=False``). Patterns with captures need the same number
of segments as the path. The first registered match wins.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from nerddle.guard import Requirement

logger = logging.getLogger(__name__)

PathListener = Callable[[str], None]


def path_from_hash(hash_value: str) -> str:
    """Convert a location hash such as ``#/blogs`` to a route path."""
    path = hash_value[1:] if hash_value.startswith("#") else hash_value
    return path or "/"


class HashLocation:
    """In-process stand-in for ``window.location.hash``.

    ``assign`` changes the hash and notifies listeners, the way a browser
    fires ``hashchange``. Back/forward navigation is simulated the same way.
    """

    def __init__(self, hash_value: str = "") -> None:
        self.hash = hash_value
        self._listeners: list[Callable[[str], None]] = []

    def add_listener(self, listener: Callable[[str], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def assign(self, hash_value: str) -> None:
        if not hash_value.startswith("#"):
            hash_value = f"#{hash_value}"
        if hash_value == self.hash:
            return
        self.hash = hash_value
        for listener in list(self._listeners):
            listener(hash_value)


@dataclass(frozen=True)
class Segment:
    """One compiled pattern segment: a literal or a named capture."""

    value: str
    capture: bool = False


def compile_pattern(pattern: str) -> tuple[Segment, ...]:
    segments = []
    for part in pattern.split("/"):
        if part.startswith("{") and part.endswith("}") and len(part) > 2:
            segments.append(Segment(part[1:-1], capture=True))
        else:
            segments.append(Segment(part))
    return tuple(segments)


@dataclass(frozen=True)
class Route:
    """A registered route."""

    pattern: str
    name: str
    exact: bool
    requires: Requirement | None = None
    segments: tuple[Segment, ...] = field(default=(), compare=False)

    @property
    def has_captures(self) -> bool:
        return any(segment.capture for segment in self.segments)

    def match(self, path: str) -> dict[str, str] | None:
        """Return the captured parameters if path matches, else None."""
        if not self.has_captures:
            if self.exact:
                return {} if path == self.pattern else None
            return {} if path.startswith(self.pattern) else None

        parts = path.split("/")
        if len(parts) != len(self.segments):
            return None

        params: dict[str, str] = {}
        for segment, part in zip(self.segments, parts, strict=True):
            if segment.capture:
                params[segment.value] = part
            elif segment.value != part:
                return None
        return params


@dataclass(frozen=True)
class RouteMatch:
    """A route together with the parameters bound from the path."""

    route: Route
    params: dict[str, str]
    path: str


class Router:
    """Navigation state machine driven by a HashLocation."""

    def __init__(self, location: HashLocation | None = None) -> None:
        self.location = location or HashLocation()
        self.routes: list[Route] = []
        self._listeners: list[PathListener] = []
        self._current_path = path_from_hash(self.location.hash)
        self.location.add_listener(self._on_location_change)

    @property
    def current_path(self) -> str:
        return self._current_path

    def register(
        self,
        pattern: str,
        name: str,
        *,
        exact: bool,
        requires: Requirement | None = None,
    ) -> Route:
        """Add a route after all previously registered ones."""
        route = Route(
            pattern=pattern,
            name=name,
            exact=exact,
            requires=requires,
            segments=compile_pattern(pattern),
        )
        self.routes.append(route)
        return route

    def subscribe(self, listener: PathListener) -> Callable[[], None]:
        """Call listener with the new path after every path change.

        Returns a function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def navigate(self, path: str) -> None:
        """Change the location hash to path and notify subscribers once.

        Navigating to the current path does nothing. A subscriber may
        navigate again while being notified; the last navigation wins.
        """
        if path_from_hash(path) == self._current_path:
            return
        logger.debug("Navigating %s -> %s", self._current_path, path)
        # Path updates arrive through the location listener
        self.location.assign(path)
        location_path = path_from_hash(self.location.hash)
        if location_path != self._current_path:
            self._set_path(location_path)

    def _on_location_change(self, hash_value: str) -> None:
        path = path_from_hash(hash_value)
        if path == self._current_path:
            return
        logger.debug("Location changed to %s", path)
        self._set_path(path)

    def _set_path(self, path: str) -> None:
        self._current_path = path
        for listener in list(self._listeners):
            listener(path)

    def match(self, path: str | None = None) -> RouteMatch | None:
        """Find the first registered route matching path (default: the current path)."""
        path = self._current_path if path is None else path
        for route in self.routes:
            params = route.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params, path=path)
        return None
