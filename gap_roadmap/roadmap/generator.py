# gap_roadmap/roadmap/generator.py
"""
Roadmap generation: score candidates, order by dependencies, bucket into
phases, attach a timeline, and derive risks, dependency edges, success
criteria and recommendations.

Phasing strategies:
  - priority: P0 -> phase 1 ... P3 -> phase 4, never before a dependency
  - dependency: phase = 1 + max(phase of dependencies)
  - timeline: fill phases up to an hours budget
    (team_size * weekly_hours_per_dev * weeks_per_phase)
"""

import logging
import math
from datetime import datetime, timezone
from typing import Sequence

from gap_roadmap import __version__
from gap_roadmap.candidates import candidates_from_gaps
from gap_roadmap.config.schema import EffortConfig, GapRoadmapConfig, RoadmapConfig
from gap_roadmap.models.context import ProjectContext
from gap_roadmap.models.gaps import FeatureGap, SpecGap
from gap_roadmap.models.roadmap import (
    DependencyEdge,
    DesirableFeature,
    Milestone,
    Phase,
    Roadmap,
    RoadmapItem,
    RoadmapMetadata,
    RoadmapRisk,
    RoadmapSummary,
    ScoringCandidate,
    Timeline,
)
from gap_roadmap.roadmap.prioritizer import PRIORITIES, Prioritizer
from gap_roadmap.scoring.engine import ScoringEngine

logger = logging.getLogger(__name__)

PRIORITY_PHASE_NAMES = {
    "P0": "Critical Fixes",
    "P1": "Core Features",
    "P2": "Enhancements",
    "P3": "Polish",
}


def _count(n: int, noun: str) -> str:
    if n == 1:
        return f"1 {noun}"
    plural = noun[:-1] + "ies" if noun.endswith("y") else noun + "s"
    return f"{n} {plural}"


class RoadmapGenerator:
    """Builds a phased Roadmap from gaps and candidate features."""

    def __init__(
        self,
        config: RoadmapConfig | None = None,
        effort: EffortConfig | None = None,
        engine: ScoringEngine | None = None,
        prioritizer: Prioritizer | None = None,
    ):
        self.config = config or RoadmapConfig()
        self.effort = effort or EffortConfig()
        self.engine = engine or ScoringEngine()
        self.prioritizer = prioritizer or Prioritizer()

    @classmethod
    def from_config(cls, config: GapRoadmapConfig) -> "RoadmapGenerator":
        return cls(
            config=config.roadmap,
            effort=config.effort,
            engine=ScoringEngine.from_config(config),
        )

    # -- phasing -----------------------------------------------------------

    def create_phases(
        self, items: list[RoadmapItem], config: RoadmapConfig | None = None
    ) -> list[Phase]:
        """
        Bucket items into numbered phases.

        Every item lands in a phase no earlier than any of its
        dependencies. Empty phases are dropped and the rest renumbered
        from 1. Item.phase is set on the given items.

        Args:
            items: Roadmap items (any order)
            config: Overrides the generator's RoadmapConfig

        Returns:
            Phases in order, items within a phase in dependency order
        """
        config = config or self.config
        ordered = self.prioritizer.resolve_dependencies(items)
        position = {item.id: index for index, item in enumerate(ordered)}
        phase_of: dict[str, int] = {}

        def dependency_phase(item: RoadmapItem) -> int:
            # Only dependencies ordered earlier count; later ones are cycle edges
            return max(
                (phase_of[d] for d in item.dependencies if d in phase_of and position[d] < position[item.id]),
                default=0,
            )

        if config.strategy == "timeline":
            budget = config.team_size * self.effort.weekly_hours_per_dev * config.weeks_per_phase
            used: dict[int, float] = {}
            current = 1
            for item in ordered:
                phase = max(current, dependency_phase(item), 1)
                while used.get(phase, 0) > 0 and used[phase] + item.effort.hours > budget:
                    phase += 1
                used[phase] = used.get(phase, 0) + item.effort.hours
                phase_of[item.id] = phase
                current = phase
        else:
            for item in ordered:
                deps = dependency_phase(item)
                if config.strategy == "dependency":
                    phase_of[item.id] = deps + 1
                else:
                    phase_of[item.id] = max(PRIORITIES.index(item.priority) + 1, deps)

        for item in ordered:
            phase_of[item.id] = min(phase_of[item.id], config.max_phases)

        for item in ordered:
            required = dependency_phase(item)
            if phase_of[item.id] < required:
                logger.warning(
                    f"Moving {item.id} from phase {phase_of[item.id]} to {required} "
                    f"to follow its dependencies"
                )
                phase_of[item.id] = required

        renumber = {old: new for new, old in enumerate(sorted(set(phase_of.values())), start=1)}
        phases = [Phase(number=n) for n in range(1, len(renumber) + 1)]
        for item in ordered:
            item.phase = renumber[phase_of[item.id]]
            phases[item.phase - 1].items.append(item)

        capacity = config.team_size * self.effort.weekly_hours_per_dev
        for phase in phases:
            phase.total_hours = round(sum(i.effort.hours for i in phase.items), 1)
            phase.estimated_weeks = math.ceil(phase.total_hours / capacity) if phase.total_hours else 0
            phase.name = self._phase_name(phase, config.strategy)
            phase.goal = self._phase_goal(phase)
        return phases

    @staticmethod
    def _phase_name(phase: Phase, strategy: str) -> str:
        if strategy == "dependency":
            return "Foundations" if phase.number == 1 else f"Dependency Level {phase.number}"
        if strategy == "timeline":
            return f"Iteration {phase.number}"
        most_urgent = min((PRIORITIES.index(i.priority) for i in phase.items), default=3)
        return PRIORITY_PHASE_NAMES[PRIORITIES[most_urgent]]

    @staticmethod
    def _phase_goal(phase: Phase) -> str:
        gaps = sum(1 for i in phase.items if i.type == "gap")
        features = len(phase.items) - gaps
        parts = []
        if gaps:
            parts.append(f"close {gaps} gap{'s' if gaps != 1 else ''}")
        if features:
            parts.append(f"deliver {features} feature{'s' if features != 1 else ''}")
        return (" and ".join(parts) or "no work").capitalize() + f" ({phase.total_hours:g}h)"

    # -- timeline ----------------------------------------------------------

    def estimate_timeline(self, roadmap: Roadmap, team_size: int | None = None) -> Timeline:
        """
        Calendar estimate for a roadmap.

        Phase weeks use linear capacity (team_size * weekly hours);
        team_estimates apply the communication-overhead multipliers.
        """
        team_size = team_size or self.config.team_size
        weekly = self.effort.weekly_hours_per_dev
        capacity = team_size * weekly

        phase_weeks = [math.ceil(p.total_hours / capacity) if p.total_hours else 0 for p in roadmap.phases]
        milestones: list[Milestone] = []
        week = 0
        for phase, weeks in zip(roadmap.phases, phase_weeks):
            week += weeks
            milestones.append(Milestone(phase=phase.number, name=f"{phase.name} complete", week=week))

        total_hours = round(sum(p.total_hours for p in roadmap.phases), 1)
        team_estimates = {
            size: math.ceil(total_hours / weekly * multiplier)
            for size, multiplier in sorted(self.effort.team_multipliers.items())
        }
        path, path_hours = self._critical_path(roadmap.all_items)

        return Timeline(
            team_size=team_size,
            total_hours=total_hours,
            total_weeks=sum(phase_weeks),
            phase_weeks=phase_weeks,
            milestones=milestones,
            team_estimates=team_estimates,
            critical_path=path,
            critical_path_hours=path_hours,
        )

    def _critical_path(self, items: list[RoadmapItem]) -> tuple[list[str], float]:
        """Longest dependency chain by hours (cycle edges ignored)."""
        ordered = self.prioritizer.resolve_dependencies(list(items))
        position = {item.id: index for index, item in enumerate(ordered)}
        best: dict[str, float] = {}
        previous: dict[str, str | None] = {}

        for item in ordered:
            deps = [d for d in item.dependencies if d in best and position[d] < position[item.id]]
            parent = max(deps, key=lambda d: (best[d], -position[d]), default=None)
            best[item.id] = item.effort.hours + (best[parent] if parent else 0)
            previous[item.id] = parent

        if not best:
            return [], 0.0
        end = max(best, key=lambda i: (best[i], -position[i]))
        path = []
        node: str | None = end
        while node is not None:
            path.append(node)
            node = previous[node]
        return list(reversed(path)), round(best[end], 1)

    # -- end to end --------------------------------------------------------

    def generate_roadmap(
        self,
        gaps: Sequence[SpecGap | FeatureGap],
        features: Sequence[DesirableFeature],
        context: ProjectContext | None = None,
        config: RoadmapConfig | None = None,
        now: datetime | None = None,
    ) -> Roadmap:
        """
        Score, prioritize and phase gaps plus candidate features.

        Cycles and unknown dependencies are reported in
        metadata.warnings rather than failing the run.
        """
        config = config or self.config
        context = context or ProjectContext()
        now = now or datetime.now(timezone.utc)

        candidates: list[ScoringCandidate] = candidates_from_gaps(gaps)
        if config.include_features:
            candidates.extend(ScoringCandidate.from_feature(f) for f in features)

        unique: dict[str, ScoringCandidate] = {}
        warnings: list[str] = []
        for candidate in candidates:
            if candidate.id in unique:
                warnings.append(f"Duplicate item id {candidate.id} ignored")
                continue
            unique[candidate.id] = candidate

        scored = self.engine.score_features(list(unique.values()), context)
        items = self.prioritizer.assign_priorities(scored)

        cycles = self.prioritizer.detect_circular_dependencies(items)
        warnings.extend(f"Circular dependency: {' -> '.join(c)}" for c in cycles)
        for item in items:
            for dep in item.dependencies:
                if dep not in unique:
                    warnings.append(f"{item.id} depends on unknown item {dep}")

        phases = self.create_phases(items, config)
        roadmap = Roadmap(
            metadata=RoadmapMetadata(
                generated_at=now,
                project_name=context.name,
                project_path=context.path,
                version=__version__,
                strategy=config.strategy,
                team_size=config.team_size,
                spec_gaps=sum(1 for g in gaps if isinstance(g, SpecGap)),
                feature_gaps=sum(1 for g in gaps if isinstance(g, FeatureGap)),
                features_considered=len(features) if config.include_features else 0,
                warnings=warnings,
                cycles=cycles,
            ),
            phases=phases,
            all_items=[item for phase in phases for item in phase.items],
        )
        roadmap.timeline = self.estimate_timeline(roadmap, config.team_size)
        self.annotate(roadmap, config)
        logger.info(
            f"Generated roadmap: {len(roadmap.all_items)} items in {len(phases)} phases "
            f"({config.strategy} strategy)"
        )
        return roadmap

    def summarize(self, roadmap: Roadmap) -> RoadmapSummary:
        items = roadmap.all_items
        by_priority = {p: sum(1 for i in items if i.priority == p) for p in PRIORITIES}
        by_type = {t: sum(1 for i in items if i.type == t) for t in ("gap", "feature")}
        total_hours = round(sum(i.effort.hours for i in items), 1)

        ready = self.prioritizer.find_ready_items(items)
        next_steps = [
            f"Start with {item.title} ({item.priority}, {item.effort.hours:g}h)"
            for item in ready
            if item.phase == (ready[0].phase if ready else 0)
        ][:5]

        overview = (
            f"{len(items)} items across {len(roadmap.phases)} phases, "
            f"{total_hours:g} hours of estimated work. "
            f"{by_priority['P0']} critical (P0) and {by_priority['P1']} high-priority (P1) items."
        )
        return RoadmapSummary(
            overview=overview,
            total_items=len(items),
            total_hours=total_hours,
            by_priority=by_priority,
            by_type=by_type,
            next_steps=next_steps,
        )

    # -- annotations -------------------------------------------------------

    def identify_risks(self, roadmap: Roadmap, config: RoadmapConfig | None = None) -> list[RoadmapRisk]:
        """
        Delivery risks of the pending work.

        Flags items above config.large_item_hours, items with more than
        config.max_dependencies dependencies, and dependency cycles.
        """
        config = config or self.config
        pending = [i for i in roadmap.all_items if i.status != "completed"]
        risks: list[RoadmapRisk] = []

        large = [i for i in pending if i.effort.hours > config.large_item_hours]
        if large:
            risks.append(RoadmapRisk(
                category="schedule",
                description=(
                    f"{_count(len(large), 'item')} over {config.large_item_hours:g}h "
                    f"may take longer than estimated"
                ),
                impact="high",
                likelihood="medium",
                mitigation="Break large items into smaller tasks and add buffer time",
                affected_items=[i.id for i in large],
                affected_phases=sorted({i.phase for i in large}),
            ))

        tangled = [i for i in pending if len(i.dependencies) > config.max_dependencies]
        if tangled:
            risks.append(RoadmapRisk(
                category="technical",
                description=(
                    f"{_count(len(tangled), 'item')} with more than "
                    f"{config.max_dependencies} dependencies may cause delays"
                ),
                impact="medium",
                likelihood="medium",
                mitigation="Track the critical path and start independent items in parallel",
                affected_items=[i.id for i in tangled],
                affected_phases=sorted({i.phase for i in tangled}),
            ))

        if roadmap.metadata.cycles:
            in_cycles = list(dict.fromkeys(node for cycle in roadmap.metadata.cycles for node in cycle))
            phase_of = {i.id: i.phase for i in roadmap.all_items}
            risks.append(RoadmapRisk(
                category="technical",
                description=(
                    f"{_count(len(roadmap.metadata.cycles), 'circular dependency')} found; "
                    f"the order of the affected items is arbitrary"
                ),
                impact="high",
                likelihood="high",
                mitigation="Remove one dependency from each cycle",
                affected_items=in_cycles,
                affected_phases=sorted({phase_of[n] for n in in_cycles if n in phase_of}),
            ))
        return risks

    @staticmethod
    def extract_dependencies(items: list[RoadmapItem]) -> list[DependencyEdge]:
        """Flat edge list; dependencies on unknown items are left out."""
        by_id = {item.id: item for item in items}
        return [
            DependencyEdge(
                dependent=item.id,
                depends_on=dep,
                reason=f"{item.title} requires {by_id[dep].title} to be complete",
            )
            for item in items
            for dep in item.dependencies
            if dep in by_id
        ]

    @staticmethod
    def success_criteria(items: list[RoadmapItem]) -> list[str]:
        criteria = []
        p0 = sum(1 for i in items if i.priority == "P0")
        if p0:
            criteria.append(f"All {p0} P0 critical {'issue' if p0 == 1 else 'issues'} resolved")
        p1 = sum(1 for i in items if i.priority == "P1")
        if p1:
            criteria.append(f"{_count(p1, 'P1 high-priority item')} delivered")
        criteria += [
            "All tests passing with more than 80% coverage",
            "Documentation updated and accurate",
            "Production deployment successful",
        ]
        return criteria

    @staticmethod
    def recommendations(roadmap: Roadmap) -> list[str]:
        items = roadmap.all_items
        recommendations = []
        if sum(1 for i in items if i.priority == "P0") > 3:
            recommendations.append("Address the P0 items before adding new features")
        if items and sum(1 for i in items if i.type == "gap") > len(items) / 2:
            recommendations.append("Focus on gap fixes to improve reliability before adding features")
        if roadmap.metadata.cycles:
            recommendations.append("Resolve circular dependencies before scheduling the affected items")
        recommendations += [
            "Review the roadmap quarterly and adjust priorities based on progress",
            "Track velocity to improve future estimates",
        ]
        return recommendations

    def annotate(self, roadmap: Roadmap, config: RoadmapConfig | None = None) -> Roadmap:
        """Fill summary, risks, dependency edges, success criteria and recommendations."""
        config = config or self.config
        roadmap.summary = self.summarize(roadmap)
        roadmap.risks = self.identify_risks(roadmap, config) if config.include_risks else []
        roadmap.dependencies = (
            self.extract_dependencies(roadmap.all_items) if config.include_dependencies else []
        )
        roadmap.success_criteria = self.success_criteria(roadmap.all_items)
        roadmap.recommendations = self.recommendations(roadmap)
        return roadmap

    def reconcile(self, roadmap: Roadmap, previous: Roadmap | None) -> Roadmap:
        """
        Carry state forward from the previous run.

        Gaps that are no longer detected are kept as completed items in
        their previous phase, clamped to the current phase count and
        pulled forward so they never come after an item that depends on
        them. Assignees carry over, and manually completed features stay
        completed. A gap that is detected again stays pending.
        """
        if previous is None:
            return roadmap

        old_items = previous.item_map()
        current = roadmap.item_map()
        for item in roadmap.all_items:
            old = old_items.get(item.id)
            if old is None:
                continue
            if item.assignee is None:
                item.assignee = old.assignee
            if item.type == "feature" and old.status == "completed":
                item.status = "completed"

        resolved = [
            old.model_copy(update={"status": "completed"})
            for old in previous.all_items
            if old.type == "gap" and old.id not in current
        ]
        if not resolved:
            return roadmap

        phases = [phase.model_copy(update={"items": list(phase.items)}) for phase in roadmap.phases]
        if not phases:
            phases = [Phase(number=1, name="Completed", goal="Previously detected gaps now resolved")]

        latest = {item.id: max(1, min(item.phase, len(phases))) for item in resolved}
        for item in roadmap.all_items:
            for dep in item.dependencies:
                if dep in latest:
                    latest[dep] = min(latest[dep], max(item.phase, 1))
        changed = True
        while changed:
            changed = False
            for item in resolved:
                for dep in item.dependencies:
                    if dep in latest and latest[dep] > latest[item.id]:
                        latest[dep] = latest[item.id]
                        changed = True

        touched: set[int] = set()
        for item in resolved:
            item.phase = latest[item.id]
            phases[item.phase - 1].items.append(item)
            touched.add(item.phase)
        capacity = roadmap.metadata.team_size * self.effort.weekly_hours_per_dev
        for phase in phases:
            if phase.number in touched:
                phase.total_hours = round(sum(i.effort.hours for i in phase.items), 1)
                phase.estimated_weeks = math.ceil(phase.total_hours / capacity)
                if roadmap.phases:
                    phase.goal = self._phase_goal(phase)
        logger.info(f"{len(resolved)} previously detected gaps are now resolved")

        updated = Roadmap(
            metadata=roadmap.metadata,
            phases=phases,
            all_items=[item for phase in phases for item in phase.items],
        )
        if roadmap.timeline is not None:
            updated.timeline = self.estimate_timeline(updated, roadmap.metadata.team_size)
        return self.annotate(updated)
