import logging
from dataclasses import dataclass, field

import numpy as np

from ..comms.messages import HeartbeatMessage
from ..comms.network import MeshNetwork
from ..config import load_config
from ..policies.boids import BoidsPolicy
from ..policies.phone import PhonePolicy
from ..tasks.allocator import allocate_tasks
from .agent import step_agent
from .battery import BatteryModel
from .clock import SimClock
from .election import ElectionPhase, ElectionProtocol, LossReason, detect_master_loss
from .env import SwarmEnv, build_agents, build_jamming_zones, build_targets, make_phone_agent
from .events import EventLog
from .formation import generate_formation
from .geometry import distance
from .metrics import swarm_metrics
from .state import (
    ElectionEvent,
    EventKind,
    FormationType,
    Health,
    PhoneMotion,
    Role,
    SimContext,
    SwarmState,
    TargetStatus,
)

logger = logging.getLogger(__name__)

TICK_TIMER = "tick"
HEARTBEAT_TIMER = "heartbeat"


@dataclass
class TickResult:
    state: SwarmState
    events: list[ElectionEvent] = field(default_factory=list)
    loss: LossReason | None = None


class Simulator:
    """
    Owns the SwarmState and is its only writer.

    `tick` and `heartbeat` are transitions: they read a state and return a
    new one. The timer callbacks commit their results, so a tick, a
    heartbeat and a deferred election never interleave on one snapshot.
    """

    def __init__(self, state: SwarmState, cfg=None, env=None, network=None, policy=None,
                 phone_policy=None, battery=None, start: float = 0.0):
        self.cfg = cfg if cfg is not None else load_config(None)
        cfg = self.cfg
        area = cfg["area"]
        timing = cfg["timing"]

        self.state = state
        self.env = env or SwarmEnv(
            bounds=[0.0, area["width"], 0.0, area["height"]],
            margin=area["margin"],
            jamming_zones=state.jamming_zones,
            avoid_strength=cfg["jamming"]["avoid_strength"],
        )
        self.network = network or MeshNetwork(
            max_range=cfg["mesh"]["range"],
            signal_reduction=cfg["mesh"]["signal_reduction"],
            jam_latency_factor=cfg["mesh"]["jam_latency_factor"],
        )
        self.policy = policy or BoidsPolicy(**cfg["boids"])
        self.phone_policy = phone_policy or PhonePolicy(speed=cfg["phone"]["speed"], yaw_rate=cfg["phone"]["yaw_rate"])
        self.battery = battery or BatteryModel(**cfg["battery"])
        self.election = ElectionProtocol(
            min_battery=cfg["election"]["min_battery"],
            vote_log_size=cfg["election"]["vote_log_size"],
        )

        self.tick_ms = timing["tick"]
        self.heartbeat_ms = timing["heartbeat"]
        self.heartbeat_timeout = timing["heartbeat_timeout"]
        self.kill_election_delay = timing["kill_election_delay"]
        self.election_delay = timing["election_delay"]
        self.handoff_threshold = cfg["election"]["handoff_threshold"]
        self.formation_spacing = cfg["formation"]["spacing"]
        self.completion_radius = cfg["targets"]["completion_radius"]

        self.clock = SimClock(start)
        self.events = EventLog(cfg["events"]["max_events"])
        self.ctx = SimContext(now=start, last_master_heartbeat=start, master_started_at=start)
        self.last_heartbeat: HeartbeatMessage | None = None
        self.paused = False
        self._arm_timers()

    @classmethod
    def from_config(cls, cfg=None, seed=None):
        cfg = cfg if cfg is not None else load_config(None)
        rng = np.random.default_rng(seed if seed is not None else cfg.get("seed"))
        bounds = [0.0, cfg["area"]["width"], 0.0, cfg["area"]["height"]]
        agents = build_agents(cfg, bounds, rng)
        targets = build_targets(cfg, bounds, rng)
        zones = build_jamming_zones(cfg, bounds, rng)
        state = SwarmState(
            agents=agents,
            master_id=agents[0].id if agents else None,
            formation=FormationType(cfg["formation"]["kind"]),
            targets=targets,
            jamming_zones=zones,
        )
        return cls(state, cfg)

    # ----------------------------- transitions -----------------------------

    def tick(self, state: SwarmState, ctx: SimContext, dt_ms: float) -> TickResult:
        now = ctx.now
        prev = state
        links = self.network.build_links(prev.agents, prev.jamming_zones)

        flyers = [a.id for a in prev.agents if a.alive and not a.is_phone]
        slots = dict(zip(flyers, generate_formation(self.env.center, len(flyers), prev.formation, self.formation_spacing)))

        agents = []
        events = []
        for a in prev.agents:
            if not a.alive:
                agents.append(a.copy(neighbors=(), avoidance=np.zeros(2)))
                continue
            goal = slots.get(a.id)
            target = prev.target(a.assigned_target_id)
            if target is not None:
                goal = target.pos
            moved = step_agent(
                a, prev.agents, goal, self.env, self.policy, self.battery, dt_ms,
                links=links.get(a.id, ()),
                phone_policy=self.phone_policy,
                motion=ctx.phone_motion,
            )
            if moved.in_jamming_zone and not a.in_jamming_zone:
                events.append(ElectionEvent(now, EventKind.JAMMING_DETECTED, f"{a.id} entered a jamming zone", candidate_id=a.id))
            if moved.health is Health.DESTROYED:
                logger.info("%s battery exhausted", a.id)
            agents.append(moved)

        new_state = prev.copy(agents=agents, t=now)
        self._complete_targets(new_state)
        loss = detect_master_loss(new_state, ctx, self.heartbeat_timeout, self.handoff_threshold, self.election.min_battery)
        return TickResult(new_state, events, loss)

    def _complete_targets(self, state: SwarmState):
        for t in state.targets:
            if t.status is not TargetStatus.ASSIGNED:
                continue
            agent = state.agent(t.assigned_agent_id)
            if agent is None or not agent.alive:
                continue
            if distance(agent.pos, t.pos) < self.completion_radius:
                t.status = TargetStatus.COMPLETED
                logger.info("%s completed by %s", t.id, agent.id)

    def heartbeat(self, state: SwarmState, now: float):
        master = state.master
        if master is None or not master.alive:
            return state, None
        new_state = state.copy()
        new_state.master.last_heartbeat = now
        return new_state, HeartbeatMessage.from_state(new_state, now)

    # ----------------------------- timers -----------------------------

    def _arm_timers(self):
        self.clock.every(TICK_TIMER, self.tick_ms, self._on_tick)
        self.clock.every(HEARTBEAT_TIMER, self.heartbeat_ms, self._on_heartbeat)

    def _on_tick(self, now: float):
        self.ctx.now = now
        result = self.tick(self.state, self.ctx, self.tick_ms)
        self.state = result.state
        self.events.extend(result.events)
        if result.loss is not None:
            self._schedule_election(result.loss, self.election_delay)

    def _on_heartbeat(self, now: float):
        self.ctx.now = now
        self.state, msg = self.heartbeat(self.state, now)
        if msg is not None:
            self.ctx.last_master_heartbeat = now
            self.last_heartbeat = msg

    def _schedule_election(self, reason: LossReason, delay: float, lost_id: str | None = None) -> bool:
        details = None
        master = self.state.master
        if reason is LossReason.HANDOFF and master is not None:
            details = f"Master {master.id} battery critical ({master.battery:.1f}%) - initiating leadership transfer"
        triggered = self.election.trigger(self.state, self.ctx.now, reason, lost_id=lost_id, details=details)
        if triggered is None:
            return False
        self.state, events = triggered
        self.events.extend(events)
        self.clock.call_later(delay, self._run_election)
        return True

    def _run_election(self, now: float):
        self.ctx.now = now
        outcome = self.election.run(self.state, now)
        self.state = outcome.state
        self.events.extend(outcome.events)
        if outcome.winner_id is not None:
            self.ctx.election_count += 1
            self.ctx.master_started_at = now
            self.ctx.last_master_heartbeat = now
        elif outcome.phase is ElectionPhase.LEADERLESS:
            # wait a full timeout before trying again
            self.ctx.last_master_heartbeat = now

    # ----------------------------- commands -----------------------------

    def kill_master(self) -> bool:
        master = self.state.master
        if master is None:
            logger.info("kill_master: no master to kill")
            return False
        state = self.state.copy(master_id=None)
        victim = state.agent(master.id)
        victim.health = Health.DESTROYED
        victim.battery = 0.0
        victim.role = Role.SLAVE
        self.state = state
        logger.info("master %s destroyed by command", master.id)
        self._schedule_election(LossReason.DESTROYED, self.kill_election_delay, lost_id=master.id)
        return True

    def trigger_election(self, reason: LossReason = LossReason.HANDOFF, delay: float | None = None) -> bool:
        return self._schedule_election(reason, self.election_delay if delay is None else delay)

    def set_formation(self, kind) -> FormationType:
        kind = FormationType(kind)
        self.state = self.state.copy(formation=kind)
        self._announce(f"Formation changed to {kind.value.upper()}")
        return kind

    def start_mission(self) -> bool:
        if self.state.mission_active:
            return False
        agents, targets, assignments = allocate_tasks(self.state.agents, self.state.master_id, self.state.targets)
        self.state = self.state.copy(agents=agents, targets=targets, mission_active=True)
        self._announce("Mission STARTED")
        now = self.clock.now
        self.events.extend(
            ElectionEvent(now, EventKind.TARGET_ASSIGNED, f"{agent_id} assigned to {target_id}", candidate_id=agent_id)
            for target_id, agent_id in assignments
        )
        return True

    def stop_mission(self) -> bool:
        if not self.state.mission_active:
            return False
        self.state = self.state.copy(mission_active=False)
        self._announce("Mission STOPPED")
        return True

    def toggle_mission(self) -> bool:
        if self.state.mission_active:
            self.stop_mission()
        else:
            self.start_mission()
        return self.state.mission_active

    def pause(self) -> bool:
        if self.paused:
            return False
        self.clock.cancel(TICK_TIMER)
        self.clock.cancel(HEARTBEAT_TIMER)
        self.paused = True
        logger.info("simulation paused at %.0f ms", self.clock.now)
        return True

    def resume(self) -> bool:
        if not self.paused:
            return False
        self._arm_timers()
        self.paused = False
        logger.info("simulation resumed at %.0f ms", self.clock.now)
        return True

    def connect_phone(self) -> bool:
        if self.phone_agent is not None:
            return False
        phone = make_phone_agent(self.cfg, self.env.bounds, now=self.clock.now)
        self.state = self.state.copy(agents=[a.copy() for a in self.state.agents] + [phone])
        self._announce("Mobile drone joined swarm (accelerometer control)")
        return True

    def disconnect_phone(self) -> bool:
        self.ctx.phone_motion = None
        if self.phone_agent is None:
            return False
        self.state = self.state.copy(agents=[a.copy() for a in self.state.agents if not a.is_phone])
        self._announce("Mobile drone disconnected from swarm")
        return True

    def update_phone_motion(self, motion) -> bool:
        if self.phone_agent is None:
            return False
        if isinstance(motion, dict):
            motion = PhoneMotion(**motion)
        self.ctx.phone_motion = motion.clamped()
        return True

    def _announce(self, details: str):
        logger.info(details)
        self.events.append(ElectionEvent(self.clock.now, EventKind.MASTER_ANNOUNCE, details))

    # ----------------------------- time & queries -----------------------------

    @property
    def now(self) -> float:
        return self.clock.now

    @property
    def phone_agent(self):
        for a in self.state.agents:
            if a.is_phone:
                return a
        return None

    def advance(self, duration_ms: float):
        self.clock.advance(duration_ms)
        self.ctx.now = self.clock.now

    def run_until(self, t_ms: float):
        self.clock.run_until(t_ms)
        self.ctx.now = self.clock.now

    def step(self):
        self.advance(self.tick_ms)

    def snapshot(self) -> SwarmState:
        return self.state.copy()

    def metrics(self) -> dict:
        return swarm_metrics(self.state, self.ctx)
