"""
Leader election.

Phases run Stable -> Lost -> Electing -> Announcing -> Stable, or end in
Leaderless when nobody is eligible. `SwarmState.election_in_progress` is
raised on entry to Lost and cleared only when the machine settles, so a
second trigger while one election is pending is dropped.
"""
import logging
from dataclasses import dataclass, field
from enum import Enum

from ..tasks.allocator import allocate_tasks
from .state import ElectionEvent, EventKind, Health, Role, SimContext, SwarmState

logger = logging.getLogger(__name__)


class ElectionPhase(str, Enum):
    STABLE = "stable"
    LOST = "lost"
    ELECTING = "electing"
    ANNOUNCING = "announcing"
    LEADERLESS = "leaderless"


class LossReason(str, Enum):
    DESTROYED = "master_destroyed"
    HEARTBEAT_TIMEOUT = "heartbeat_timeout"
    HANDOFF = "low_battery_handoff"


def is_eligible(agent, min_battery: float = 10.0) -> bool:
    return agent.health not in (Health.DESTROYED, Health.CRITICAL) and agent.battery > min_battery


def rank_candidates(candidates, min_battery: float = 10.0) -> list:
    """Eligible candidates, highest battery first, ties by ascending id."""
    eligible = [c for c in candidates if is_eligible(c, min_battery)]
    return sorted(eligible, key=lambda c: (-c.battery, c.id))


def detect_master_loss(state: SwarmState, ctx: SimContext, heartbeat_timeout: float,
                       handoff_threshold: float, min_battery: float = 10.0) -> LossReason | None:
    if state.election_in_progress:
        return None
    silent_for = ctx.now - ctx.last_master_heartbeat

    if state.master_id is None:
        # leaderless: retry only once someone could actually win
        if silent_for > heartbeat_timeout and rank_candidates(state.agents, min_battery):
            return LossReason.HEARTBEAT_TIMEOUT
        return None

    master = state.master
    if master is None:
        return LossReason.HEARTBEAT_TIMEOUT if silent_for > heartbeat_timeout else None
    if not master.alive:
        return LossReason.DESTROYED
    if master.battery < handoff_threshold:
        # hand off only when someone else could take over
        others = [a for a in state.agents if a.id != master.id]
        if rank_candidates(others, min_battery):
            return LossReason.HANDOFF
    return None


@dataclass
class ElectionOutcome:
    state: SwarmState
    events: list[ElectionEvent] = field(default_factory=list)
    winner_id: str | None = None
    phase: ElectionPhase = ElectionPhase.STABLE


class ElectionProtocol:
    def __init__(self, min_battery: float = 10.0, vote_log_size: int = 3):
        self.min_battery = min_battery
        self.vote_log_size = vote_log_size
        self.phase = ElectionPhase.STABLE
        self.reason: LossReason | None = None

    def trigger(self, state: SwarmState, now: float, reason: LossReason,
                lost_id: str | None = None, details: str | None = None):
        """
        Enter Lost. Returns (state, [master_lost event]) or None when an
        election is already under way.
        """
        if state.election_in_progress:
            logger.debug("election already in progress, ignoring %s", reason.value)
            return None
        self.phase = ElectionPhase.LOST
        self.reason = reason
        lost_id = lost_id or state.master_id
        if details is None and lost_id is None:
            details = "Swarm has no master - initiating election"
        elif details is None:
            details = f"Master {lost_id} lost - initiating election"
        event = ElectionEvent(now, EventKind.MASTER_LOST, details, candidate_id=lost_id, reason=reason.value)
        logger.info(details)
        return state.copy(election_in_progress=True), [event]

    def run(self, state: SwarmState, now: float) -> ElectionOutcome:
        self.phase = ElectionPhase.ELECTING
        state = state.copy()
        events = []

        candidates = state.live_agents()
        outgoing = state.master_id if self.reason is LossReason.HANDOFF else None
        if outgoing is not None:
            candidates = [c for c in candidates if c.id != outgoing]
        ranked = rank_candidates(candidates, self.min_battery)

        if not ranked:
            return self._no_winner(state, now, outgoing)

        events.append(ElectionEvent(now, EventKind.ELECTION_START, f"Election started with {len(ranked)} candidates"))
        for i, c in enumerate(ranked[: self.vote_log_size]):
            events.append(
                ElectionEvent(
                    now,
                    EventKind.VOTE,
                    f"Candidate {i + 1}: {c.id} (Battery: {c.battery:.1f}%)",
                    candidate_id=c.id,
                )
            )
        winner = ranked[0]
        events.append(
            ElectionEvent(
                now,
                EventKind.ELECTION_COMPLETE,
                f"Election complete: {winner.id} elected as new master",
                winner_id=winner.id,
                reason=f"Highest battery ({winner.battery:.1f}%)",
            )
        )

        self.phase = ElectionPhase.ANNOUNCING
        for a in state.agents:
            if a.id == winner.id:
                a.role = Role.MASTER
                a.last_heartbeat = now
            elif a.role is Role.MASTER:
                a.role = Role.SLAVE
        state.master_id = winner.id
        events.append(
            ElectionEvent(now, EventKind.MASTER_ANNOUNCE, f"{winner.id} broadcasting I_AM_MASTER to swarm", winner_id=winner.id)
        )

        agents, targets, assignments = allocate_tasks(state.agents, winner.id, state.targets)
        state.agents, state.targets = agents, targets
        for target_id, agent_id in assignments:
            events.append(
                ElectionEvent(now, EventKind.TARGET_ASSIGNED, f"{agent_id} assigned to {target_id}", candidate_id=agent_id)
            )

        state.election_in_progress = False
        self.phase = ElectionPhase.STABLE
        logger.info("%s elected master (battery %.1f%%)", winner.id, winner.battery)
        return ElectionOutcome(state, events, winner.id, self.phase)

    def _no_winner(self, state: SwarmState, now: float, outgoing: str | None) -> ElectionOutcome:
        state.election_in_progress = False
        keeper = state.agent(outgoing)
        if keeper is not None and keeper.alive:
            # nobody can take over; the tired master keeps the role
            details = f"No eligible successor - {outgoing} retains leadership"
            logger.warning(details)
            self.phase = ElectionPhase.STABLE
            event = ElectionEvent(now, EventKind.ELECTION_COMPLETE, details, reason="no_eligible_candidates")
            return ElectionOutcome(state, [event], None, self.phase)

        for a in state.agents:
            if a.role is Role.MASTER:
                a.role = Role.SLAVE
        state.master_id = None
        details = "No eligible candidates - swarm has no leader"
        logger.warning(details)
        self.phase = ElectionPhase.LEADERLESS
        event = ElectionEvent(now, EventKind.ELECTION_COMPLETE, details, reason="no_eligible_candidates")
        return ElectionOutcome(state, [event], None, self.phase)
