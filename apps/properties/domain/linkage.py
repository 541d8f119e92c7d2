"""
Property Linkage

Some properties share one physical calendar: booking the whole venue
blocks every unit inside it, and booking a unit blocks the whole venue.
Links are declared pairwise; this module closes them into groups once
(union-find), so availability checks look a group up in O(1) instead of
walking links on every request.
"""

from dataclasses import dataclass, field
from typing import Dict, FrozenSet, Iterable

from apps.properties.domain.exceptions import PropertyNotFoundError
from shared.domain.value_objects import Money


@dataclass(frozen=True)
class Property:
    """Bookable property as seen by the availability and pricing engine"""
    id: str
    nightly_rate: Money
    max_guests: int
    title: str = ''
    linked_property_ids: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        if self.max_guests < 1:
            raise ValueError("Property must accept at least one guest")


class _DisjointSet:
    """Union-find with path halving and union by size"""

    def __init__(self):
        self._parent: Dict[str, str] = {}
        self._size: Dict[str, int] = {}

    def add(self, item: str):
        if item not in self._parent:
            self._parent[item] = item
            self._size[item] = 1

    def find(self, item: str) -> str:
        parent = self._parent
        while parent[item] != item:
            parent[item] = parent[parent[item]]
            item = parent[item]
        return item

    def union(self, a: str, b: str):
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if self._size[root_a] < self._size[root_b]:
            root_a, root_b = root_b, root_a
        self._parent[root_b] = root_a
        self._size[root_a] += self._size[root_b]

    def __iter__(self):
        return iter(self._parent)


class LinkageGroups:
    """
    Precomputed partition of properties into shared-calendar groups

    Every known property belongs to exactly one group (possibly just
    itself). Group ids are the smallest member id, so they are stable
    across rebuilds with the same links.
    """

    def __init__(self, properties: Iterable[Property]):
        properties = list(properties)
        known = {p.id for p in properties}
        dsu = _DisjointSet()

        for prop in properties:
            dsu.add(prop.id)
        for prop in properties:
            for linked_id in prop.linked_property_ids:
                if linked_id not in known:
                    raise PropertyNotFoundError(
                        f"Property {prop.id} is linked to unknown property {linked_id}",
                        property_id=linked_id,
                    )
                dsu.union(prop.id, linked_id)

        members: Dict[str, set] = {}
        for property_id in dsu:
            members.setdefault(dsu.find(property_id), set()).add(property_id)

        self._group_of: Dict[str, str] = {}
        self._members: Dict[str, FrozenSet[str]] = {}
        for group in members.values():
            group_id = min(group)
            self._members[group_id] = frozenset(group)
            for property_id in group:
                self._group_of[property_id] = group_id

    def group_id(self, property_id: str) -> str:
        try:
            return self._group_of[property_id]
        except KeyError:
            raise PropertyNotFoundError(
                f"Property {property_id} not found",
                property_id=property_id,
            ) from None

    def members(self, property_id: str) -> FrozenSet[str]:
        """All properties sharing a calendar with the given one, itself included"""
        return self._members[self.group_id(property_id)]

    def group_ids(self):
        return list(self._members)

    def __contains__(self, property_id) -> bool:
        return property_id in self._group_of

    def __len__(self) -> int:
        return len(self._members)

    def __repr__(self):
        return f"LinkageGroups({sorted(sorted(m) for m in self._members.values())})"
