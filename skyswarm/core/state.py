from dataclasses import dataclass, field
from enum import Enum

import numpy as np


class Role(str, Enum):
    MASTER = "master"
    SLAVE = "slave"


class TaskType(str, Enum):
    IDLE = "idle"
    SCOUT = "scout"
    OBSERVER = "observer"
    RELAY = "relay"
    ATTACK = "attack"


class Health(str, Enum):
    HEALTHY = "healthy"
    WARNING = "warning"
    CRITICAL = "critical"
    DESTROYED = "destroyed"


class FormationType(str, Enum):
    LINE = "line"
    GRID = "grid"
    CIRCLE = "circle"


class TargetType(str, Enum):
    OBSERVE = "observe"
    ATTACK = "attack"
    RELAY = "relay"


class TargetStatus(str, Enum):
    PENDING = "pending"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


class EventKind(str, Enum):
    MASTER_LOST = "master_lost"
    ELECTION_START = "election_start"
    VOTE = "vote"
    ELECTION_COMPLETE = "election_complete"
    MASTER_ANNOUNCE = "master_announce"
    JAMMING_DETECTED = "jamming_detected"
    TARGET_ASSIGNED = "target_assigned"


@dataclass
class NeighborLink:
    agent_id: str
    distance: float
    signal_strength: float  # 0..100
    latency: float          # ms
    jammed: bool


@dataclass
class AgentState:
    id: str
    pos: np.ndarray      # shape (2,)
    vel: np.ndarray      # shape (2,), units per tick
    battery: float       # 0..100
    role: Role = Role.SLAVE
    task: TaskType = TaskType.IDLE
    health: Health = Health.HEALTHY
    heading: float = 0.0  # degrees
    last_heartbeat: float = 0.0
    is_phone: bool = False
    neighbors: tuple[NeighborLink, ...] = ()
    in_jamming_zone: bool = False
    assigned_target_id: str | None = None
    avoidance: np.ndarray = field(default_factory=lambda: np.zeros(2))

    @property
    def alive(self) -> bool:
        return self.health is not Health.DESTROYED

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.vel))

    def copy(self, **changes) -> "AgentState":
        values = {
            "id": self.id,
            "pos": self.pos.copy(),
            "vel": self.vel.copy(),
            "battery": self.battery,
            "role": self.role,
            "task": self.task,
            "health": self.health,
            "heading": self.heading,
            "last_heartbeat": self.last_heartbeat,
            "is_phone": self.is_phone,
            "neighbors": self.neighbors,
            "in_jamming_zone": self.in_jamming_zone,
            "assigned_target_id": self.assigned_target_id,
            "avoidance": self.avoidance.copy(),
        }
        values.update(changes)
        return AgentState(**values)


@dataclass
class Target:
    id: str
    pos: np.ndarray
    priority: int  # 1..5, higher first
    type: TargetType
    status: TargetStatus = TargetStatus.PENDING
    assigned_agent_id: str | None = None

    def copy(self, **changes) -> "Target":
        values = {
            "id": self.id,
            "pos": self.pos.copy(),
            "priority": self.priority,
            "type": self.type,
            "status": self.status,
            "assigned_agent_id": self.assigned_agent_id,
        }
        values.update(changes)
        return Target(**values)


@dataclass(frozen=True)
class JammingZone:
    id: str
    center: tuple[float, float]
    radius: float
    intensity: float  # 0..100


@dataclass
class SwarmState:
    agents: list[AgentState]
    master_id: str | None
    formation: FormationType = FormationType.CIRCLE
    mission_active: bool = False
    election_in_progress: bool = False
    targets: list[Target] = field(default_factory=list)
    jamming_zones: tuple[JammingZone, ...] = ()
    t: float = 0.0  # ms

    def agent(self, agent_id: str | None) -> AgentState | None:
        if agent_id is None:
            return None
        for a in self.agents:
            if a.id == agent_id:
                return a
        return None

    def target(self, target_id: str | None) -> Target | None:
        if target_id is None:
            return None
        for t in self.targets:
            if t.id == target_id:
                return t
        return None

    @property
    def master(self) -> AgentState | None:
        return self.agent(self.master_id)

    def live_agents(self) -> list[AgentState]:
        return [a for a in self.agents if a.alive]

    def copy(self, **changes) -> "SwarmState":
        """Deep enough that mutating the copy never reaches this state."""
        values = {
            "master_id": self.master_id,
            "formation": self.formation,
            "mission_active": self.mission_active,
            "election_in_progress": self.election_in_progress,
            "jamming_zones": self.jamming_zones,
            "t": self.t,
        }
        values.update(changes)
        if "agents" not in values:
            values["agents"] = [a.copy() for a in self.agents]
        if "targets" not in values:
            values["targets"] = [t.copy() for t in self.targets]
        return SwarmState(**values)


@dataclass(frozen=True)
class ElectionEvent:
    timestamp: float
    kind: EventKind
    details: str
    candidate_id: str | None = None
    winner_id: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class PhoneMotion:
    x: float    # forward/back tilt, -1..1
    y: float    # left/right tilt, -1..1
    yaw: float  # rotation, -1..1
    timestamp: float

    def clamped(self) -> "PhoneMotion":
        def c(v):
            return max(-1.0, min(1.0, float(v)))

        return PhoneMotion(c(self.x), c(self.y), c(self.yaw), self.timestamp)


@dataclass
class SimContext:
    """
    Counters and timestamps that live beside the SwarmState rather than in it.
    """
    now: float = 0.0
    last_master_heartbeat: float = 0.0
    master_started_at: float = 0.0
    election_count: int = 0
    phone_motion: PhoneMotion | None = None
