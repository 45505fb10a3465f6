"""
ConnectionData - Pure Python data model for an undirected connection.

Endpoints are stored in sorted order so that A-B and B-A compare and
hash equal.
"""

from dataclasses import dataclass

from .component import ComponentId


@dataclass(frozen=True)
class ConnectionData:
    """An unordered pair of two distinct component ids."""

    first: ComponentId
    second: ComponentId

    def __post_init__(self):
        if self.first == self.second:
            raise ValueError(f"Cannot connect component '{self.first}' to itself.")
        if self.first > self.second:
            # Frozen dataclass: normalize through object.__setattr__
            first, second = self.second, self.first
            object.__setattr__(self, "first", first)
            object.__setattr__(self, "second", second)

    @classmethod
    def between(cls, a: str, b: str) -> "ConnectionData":
        """Build the canonical connection for two endpoints."""
        return cls(ComponentId(a), ComponentId(b))

    def connects_component(self, component_id: str) -> bool:
        """Check if this connection touches the given component."""
        return self.first == component_id or self.second == component_id

    def other(self, component_id: str) -> ComponentId:
        """Return the endpoint opposite ``component_id``."""
        if component_id == self.first:
            return self.second
        if component_id == self.second:
            return self.first
        raise ValueError(f"Component '{component_id}' is not an endpoint of {self!r}")

    def endpoints(self) -> tuple[ComponentId, ComponentId]:
        return (self.first, self.second)

    def to_list(self) -> list[str]:
        return [str(self.first), str(self.second)]

    @classmethod
    def from_list(cls, data) -> "ConnectionData":
        if not isinstance(data, (list, tuple)) or len(data) != 2:
            raise ValueError(f"Connection must be a pair of component ids, got {data!r}")
        return cls.between(data[0], data[1])

    def __repr__(self) -> str:
        return f"ConnectionData({self.first} <-> {self.second})"
