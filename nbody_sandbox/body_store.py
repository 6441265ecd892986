#!/usr/bin/env python3
"""
Body storage for the gravity sandbox.

BodyStore is a dense list of Body records with stable integer ids. Ids are
never reused, so a CollisionEvent or a UI selection can refer to a body
without holding on to the record itself.
"""
import itertools
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .data_models import Body, BodyView


class BodyStore:
    """Owns every live Body; insertion order is iteration order."""

    def __init__(self) -> None:
        self._bodies: List[Body] = []
        self._by_id: Dict[int, Body] = {}
        self._ids = itertools.count()

    def __len__(self) -> int:
        return len(self._bodies)

    def __iter__(self) -> Iterator[Body]:
        return iter(self._bodies)

    def __contains__(self, body_id: int) -> bool:
        return body_id in self._by_id

    def add(self, body: Body) -> Body:
        """Assign a fresh id and store the body."""
        body.id = next(self._ids)
        self._bodies.append(body)
        self._by_id[body.id] = body
        return body

    def extend(self, bodies: Iterable[Body]) -> List[Body]:
        return [self.add(b) for b in bodies]

    def get(self, body_id: int) -> Optional[Body]:
        return self._by_id.get(body_id)

    def remove(self, body_id: int) -> Optional[Body]:
        body = self._by_id.pop(body_id, None)
        if body is not None:
            self._bodies.remove(body)
        return body

    def remove_many(self, body_ids: Iterable[int]) -> None:
        doomed = set(body_ids)
        if not doomed:
            return
        for body_id in doomed:
            self._by_id.pop(body_id, None)
        self._bodies = [b for b in self._bodies if b.id not in doomed]

    def clear(self) -> None:
        self._bodies.clear()
        self._by_id.clear()

    def pairs(self) -> Iterator[Tuple[Body, Body]]:
        """Every unordered pair, over a copy so callers may mutate the store."""
        return itertools.combinations(list(self._bodies), 2)

    def snapshot(self) -> List[BodyView]:
        return [b.view() for b in self._bodies]

    def total_mass(self) -> float:
        return sum(b.mass for b in self._bodies)

    def total_momentum(self) -> Tuple[float, float]:
        px = sum(b.velocity[0] * b.mass for b in self._bodies)
        py = sum(b.velocity[1] * b.mass for b in self._bodies)
        return (px, py)
