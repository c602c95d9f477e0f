"""
Fixed-capacity telemetry for scrolling graphs.

Every channel is a ring buffer of (time, value) samples that overwrites
its oldest sample once full, so a graph always shows the most recent
window in chronological order. The recorder samples a vehicle at a fixed
interval of simulated time (150 ms by default) rather than every frame,
keeping the window a predictable length regardless of frame rate.
"""

from typing import Generic, List, Optional, Sequence, Tuple, TypeVar

import numpy as np
from numpy.typing import NDArray

from fuzzyquad.quadrotor import Quadrotor

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Circular buffer keeping the last ``capacity`` items pushed."""

    def __init__(self, capacity: int):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self._items: List[Optional[T]] = [None] * capacity
        self._next = 0
        self._count = 0

    def push(self, item: T) -> None:
        """Append an item, dropping the oldest one when full."""
        self._items[self._next] = item
        self._next = (self._next + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)

    def get(self, i: int) -> T:
        """Item i in chronological order (0 = oldest retained)."""
        if not 0 <= i < self._count:
            raise IndexError(f"index {i} out of range for {self._count} items")
        start = (self._next - self._count) % self.capacity
        return self._items[(start + i) % self.capacity]

    def values(self) -> List[T]:
        """All retained items, oldest first."""
        return [self.get(i) for i in range(self._count)]

    @property
    def full(self) -> bool:
        return self._count == self.capacity

    def clear(self) -> None:
        self._items = [None] * self.capacity
        self._next = 0
        self._count = 0

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"RingBuffer(capacity={self.capacity}, len={self._count})"


class TelemetryGraph:
    """
    A set of (time, value) channels shown together, e.g. the actual and
    wanted speed of one rotor.
    """

    def __init__(self, caption: str, channels: Sequence[str], capacity: int = 30):
        if not channels:
            raise ValueError("TelemetryGraph requires at least one channel")
        self.caption = caption
        self.channels = tuple(channels)
        self.buffers = {name: RingBuffer(capacity)
                        for name in self.channels}

    def add(self, channel: str, t: float, value: float) -> None:
        self.buffers[channel].push((float(t), float(value)))

    def series(self, channel: str) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """Times and values of a channel as arrays, oldest first."""
        samples = self.buffers[channel].values()
        if not samples:
            return np.zeros(0), np.zeros(0)
        t, v = zip(*samples)
        return np.array(t), np.array(v)


class TelemetryRecorder:
    """
    Samples a :class:`Quadrotor` into telemetry graphs.

    Graphs:
        "Motor 0" .. "Motor 3": channels "actual", "wanted" [rad/s]
        "Position": channels "x", "y", "z" [m]
        "Velocity": channels "vx", "vy", "vz", world frame [m/s]
        "Attitude": channels "roll", "pitch", "yaw" [rad]
        "Angular velocity": channels "p", "q", "r", body frame [rad/s]
    """

    MOTOR_CHANNELS = ("actual", "wanted")

    # Graph name -> (channels, vehicle accessor)
    STATE_GRAPHS = {
        "Position": (("x", "y", "z"), "position"),
        "Velocity": (("vx", "vy", "vz"), "linear_velocity"),
        "Attitude": (("roll", "pitch", "yaw"), "euler"),
        "Angular velocity": (("p", "q", "r"), "angular_velocity"),
    }

    def __init__(self, interval: float = 0.15, capacity: int = 30):
        if interval < 0.0:
            raise ValueError(f"interval must be >= 0, got {interval}")
        self.interval = interval
        self.graphs = {
            f"Motor {i}": TelemetryGraph(f"Motor {i}", self.MOTOR_CHANNELS, capacity)
            for i in range(4)
        }
        for name, (channels, _) in self.STATE_GRAPHS.items():
            self.graphs[name] = TelemetryGraph(name, channels, capacity)
        self._last_sample: Optional[float] = None

    def record(self, quad: Quadrotor) -> bool:
        """
        Take a sample if at least ``interval`` has passed since the last one.

        Returns:
            True if a sample was taken
        """
        t = quad.time
        if self._last_sample is not None and t - self._last_sample < self.interval:
            return False
        self._last_sample = t

        for i in range(4):
            graph = self.graphs[f"Motor {i}"]
            graph.add("actual", t, quad.motor_speed(i))
            graph.add("wanted", t, quad.wanted_motor_speed(i))
        for name, (channels, accessor) in self.STATE_GRAPHS.items():
            graph = self.graphs[name]
            for channel, value in zip(channels, getattr(quad, accessor)):
                graph.add(channel, t, value)
        return True

    def motor_graphs(self) -> List[TelemetryGraph]:
        return [self.graphs[f"Motor {i}"] for i in range(4)]
