# gap_roadmap/roadmap/prioritizer.py
"""
Dependency resolution and final priority assignment.

The dependency graph has an edge from each item to every item it
depends on. Ordering is a DFS topological sort seeded in priority-score
order; cycles are reported as full chains, never raised.
"""

import logging
from typing import Iterable, Iterator

from gap_roadmap.models.evidence import Priority
from gap_roadmap.models.roadmap import RoadmapItem, ScoredFeature

logger = logging.getLogger(__name__)

PRIORITIES: tuple[Priority, ...] = ("P0", "P1", "P2", "P3")


def more_urgent(a: Priority, b: Priority | None) -> Priority:
    if b is None:
        return a
    return a if PRIORITIES.index(a) <= PRIORITIES.index(b) else b


class Prioritizer:
    """Turns scored candidates into dependency-ordered roadmap items."""

    def assign_priorities(self, scored: Iterable[ScoredFeature]) -> list[RoadmapItem]:
        """
        Convert scored candidates into roadmap items.

        The final priority is the more urgent of the scored priority and
        any priority declared at the source (a P0 requirement stays P0
        even if it scores lower).
        """
        items = []
        for feature in scored:
            items.append(RoadmapItem(
                id=feature.id,
                title=feature.title,
                description=feature.description,
                type=feature.kind,
                priority=more_urgent(feature.priority, feature.declared_priority),
                priority_score=feature.priority_score,
                effort=feature.effort,
                dependencies=list(feature.dependencies),
                tags=list(feature.tags),
            ))
        return items

    def resolve_dependencies(self, items: list[RoadmapItem]) -> list[RoadmapItem]:
        """
        Order items so every item comes after its dependencies.

        Items are visited by priority score (descending, ties in input
        order). Unknown dependency ids are ignored; edges that close a
        cycle are skipped so the result is still a total order.
        """
        by_id = {item.id: item for item in items}
        rank = {item.id: index for index, item in enumerate(
            sorted(items, key=lambda i: -i.priority_score)
        )}
        state: dict[str, str] = {}
        ordered: list[RoadmapItem] = []

        def enter(item: RoadmapItem) -> tuple[RoadmapItem, Iterator[str]]:
            state[item.id] = "visiting"
            known = [d for d in item.dependencies if d in by_id]
            unknown = [d for d in item.dependencies if d not in by_id]
            if unknown:
                logger.warning(f"{item.id} depends on unknown items: {', '.join(unknown)}")
            return item, iter(sorted(known, key=rank.__getitem__))

        for root in sorted(items, key=lambda i: rank[i.id]):
            if root.id in state:
                continue
            # Explicit stack: dependency chains can be longer than the recursion limit
            stack = [enter(root)]
            while stack:
                item, deps = stack[-1]
                for dep_id in deps:
                    dep_state = state.get(dep_id)
                    if dep_state == "visiting":
                        logger.warning(f"Skipping cyclic dependency {item.id} -> {dep_id}")
                    elif dep_state is None:
                        stack.append(enter(by_id[dep_id]))
                        break
                else:
                    stack.pop()
                    state[item.id] = "done"
                    ordered.append(item)
        return ordered

    def detect_circular_dependencies(self, items: list[RoadmapItem]) -> list[list[str]]:
        """
        Find dependency cycles.

        Returns:
            Each cycle as a closed chain, e.g. ["A", "B", "C", "A"].
            [] for an acyclic graph. Rotations of the same cycle are
            reported once.
        """
        known = {item.id for item in items}
        graph = {item.id: [d for d in item.dependencies if d in known] for item in items}
        state: dict[str, str] = {}
        path: list[str] = []
        cycles: list[list[str]] = []
        seen: set[tuple[str, ...]] = set()

        for item in items:
            if item.id in state:
                continue
            state[item.id] = "visiting"
            path.append(item.id)
            stack = [iter(graph[item.id])]
            while stack:
                node = path[-1]
                for dep in stack[-1]:
                    if state.get(dep) == "visiting":
                        cycle = path[path.index(dep):]
                        start = cycle.index(min(cycle))
                        key = tuple(cycle[start:] + cycle[:start])
                        if key not in seen:
                            seen.add(key)
                            cycles.append(cycle + [dep])
                    elif dep not in state:
                        state[dep] = "visiting"
                        path.append(dep)
                        stack.append(iter(graph[dep]))
                        break
                else:
                    stack.pop()
                    path.pop()
                    state[node] = "done"

        if cycles:
            logger.warning(f"Found {len(cycles)} circular dependencies")
        return cycles

    @staticmethod
    def group_by_priority(items: Iterable[RoadmapItem]) -> dict[str, list[RoadmapItem]]:
        groups: dict[str, list[RoadmapItem]] = {p: [] for p in PRIORITIES}
        for item in items:
            groups[item.priority].append(item)
        return groups

    @staticmethod
    def find_ready_items(
        items: list[RoadmapItem], completed_ids: set[str] | None = None
    ) -> list[RoadmapItem]:
        """Pending items whose known dependencies are all completed."""
        known = {item.id for item in items}
        done = set(completed_ids or ()) | {i.id for i in items if i.status == "completed"}
        return [
            item for item in items
            if item.status != "completed"
            and all(dep in done for dep in item.dependencies if dep in known)
        ]
