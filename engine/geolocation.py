"""
Geocoin — engine/geolocation.py
Position sources and a cancellable watcher over them.
=====================================================
Stack:       Python 3.14.3

Architecture notes
------------------
- A PositionSource delivers (lat, lng) updates through callbacks and hands
  back a Subscription that can be cancelled.
- PositionWatcher.start()/stop() are idempotent.
- Every start() opens a new generation. Callbacks carry the generation they
  were issued under and are dropped unless it is still current, so an update
  already in flight when stop() runs never reaches the game.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Protocol

from world.board import LatLng

PositionFn = Callable[[LatLng], None]
ErrorFn = Callable[[Exception], None]


class PositionUnavailable(RuntimeError):
    """The position source was denied or could not produce a fix."""


class Subscription(Protocol):
    def cancel(self) -> None: ...


class PositionSource(Protocol):
    def subscribe(self, on_position: PositionFn, on_error: ErrorFn) -> Subscription: ...


class ScriptedPositionSource:
    """
    A hand-driven source. push() and fail() deliver to every open
    subscription, in subscription order. A cached fix, when set, is delivered
    synchronously from inside subscribe(), the way a platform hands back its
    last known position.

    Usage:
        source = ScriptedPositionSource()
        watcher = PositionWatcher(source, on_position=print)
        watcher.start()
        source.push(LatLng(36.99, -122.06))
    """

    class _Handle:
        def __init__(self, source: "ScriptedPositionSource", on_position: PositionFn, on_error: ErrorFn):
            self.source = source
            self.on_position = on_position
            self.on_error = on_error
            self.cancelled = False

        def cancel(self) -> None:
            self.cancelled = True
            if self in self.source.handles:
                self.source.handles.remove(self)

    def __init__(self, cached: Optional[LatLng] = None) -> None:
        self.handles: List[ScriptedPositionSource._Handle] = []
        self.cached = cached

    def subscribe(self, on_position: PositionFn, on_error: ErrorFn) -> "ScriptedPositionSource._Handle":
        handle = self._Handle(self, on_position, on_error)
        self.handles.append(handle)
        if self.cached is not None:
            on_position(self.cached)
        return handle

    def push(self, position: LatLng) -> None:
        for handle in list(self.handles):
            handle.on_position(position)

    def fail(self, error: Optional[Exception] = None) -> None:
        err = error or PositionUnavailable("Position unavailable")
        for handle in list(self.handles):
            handle.on_error(err)


class _PendingSubscription:
    def cancel(self) -> None:
        pass


_PENDING = _PendingSubscription()


class PositionWatcher:
    def __init__(
        self,
        source: PositionSource,
        on_position: PositionFn,
        on_error: Optional[ErrorFn] = None,
    ) -> None:
        self.source = source
        self.on_position = on_position
        self.on_error = on_error
        self.generation = 0
        self._subscription: Optional[Subscription] = None

    @property
    def active(self) -> bool:
        return self._subscription is not None

    def start(self) -> None:
        if self.active:
            return
        self.generation += 1
        generation = self.generation
        # Active while subscribe() runs so a synchronous first fix is not dropped.
        self._subscription = _PENDING
        subscription = self.source.subscribe(
            lambda position: self._deliver(generation, position),
            lambda error: self._fail(generation, error),
        )
        if self._is_current(generation):
            self._subscription = subscription
        else:
            subscription.cancel()

    def stop(self) -> None:
        if not self.active:
            return
        self.generation += 1
        subscription, self._subscription = self._subscription, None
        subscription.cancel()

    def _is_current(self, generation: int) -> bool:
        return self.active and generation == self.generation

    def _deliver(self, generation: int, position: LatLng) -> None:
        if not self._is_current(generation):
            return
        self.on_position(position)

    def _fail(self, generation: int, error: Exception) -> None:
        if not self._is_current(generation):
            return
        self.stop()
        if self.on_error is not None:
            self.on_error(error)
