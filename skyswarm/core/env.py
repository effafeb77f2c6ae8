import numpy as np

from .geometry import clamp_to_bounds, normalize
from .state import AgentState, JammingZone, Role, Target, TargetType, TaskType


AVOID_RADIUS_FACTOR = 1.5


class SwarmEnv:
    """
    Operating area plus the static jamming field laid over it.
    """

    def __init__(self, bounds, margin: float = 20.0, jamming_zones=None, avoid_strength: float = 2.0):
        self.bounds = bounds  # [xmin, xmax, ymin, ymax]
        self.margin = float(margin)
        self.jamming_zones = tuple(jamming_zones or ())
        self.avoid_strength = avoid_strength

    @property
    def center(self) -> np.ndarray:
        xmin, xmax, ymin, ymax = self.bounds
        return np.array([(xmin + xmax) / 2.0, (ymin + ymax) / 2.0])

    def clamp(self, pos) -> np.ndarray:
        return clamp_to_bounds(pos, self.bounds, self.margin)

    def in_jamming_zone(self, pos) -> bool:
        return in_jamming_zone(pos, self.jamming_zones)

    def avoidance_vector(self, pos) -> np.ndarray:
        return avoidance_vector(pos, self.jamming_zones, self.avoid_strength)


def in_jamming_zone(pos, zones) -> bool:
    for zone in zones:
        d = np.hypot(pos[0] - zone.center[0], pos[1] - zone.center[1])
        if d < zone.radius:
            return True
    return False


def avoidance_vector(pos, zones, strength: float = 2.0) -> np.ndarray:
    """
    Push away from every zone center within 1.5x its radius, fading
    linearly to zero at that edge and scaled by zone intensity.
    """
    out = np.zeros(2)
    for zone in zones:
        away = np.array([pos[0] - zone.center[0], pos[1] - zone.center[1]], dtype=float)
        d = float(np.linalg.norm(away))
        reach = zone.radius * AVOID_RADIUS_FACTOR
        if d < reach:
            out += normalize(away) * strength * (1 - d / reach) * (zone.intensity / 100.0)
    return out


# ----------------------------- scenario -----------------------------

def _uniform_in(rng, bounds, margin):
    xmin, xmax, ymin, ymax = bounds
    return rng.uniform([xmin + margin, ymin + margin], [xmax - margin, ymax - margin])


def _count(rng, value) -> int:
    if isinstance(value, (list, tuple)):
        lo, hi = value
        return int(rng.integers(lo, hi + 1))
    return int(value)


def make_agent(agent_id: str, pos, battery: float, heading: float = 0.0, is_phone: bool = False, now: float = 0.0) -> AgentState:
    return AgentState(
        id=agent_id,
        pos=np.array(pos, dtype=float),
        vel=np.zeros(2),
        battery=float(battery),
        heading=float(heading),
        last_heartbeat=now,
        is_phone=is_phone,
    )


def build_agents(cfg: dict, bounds, rng) -> list[AgentState]:
    agent_cfg = cfg["agents"]
    margin = cfg["area"].get("spawn_margin", 100.0)
    agents = []
    for i in range(agent_cfg["count"]):
        battery_range = agent_cfg["master_battery"] if i == 0 else agent_cfg["battery"]
        agent = make_agent(
            f"drone_{i + 1}",
            _uniform_in(rng, bounds, margin),
            battery=rng.uniform(*battery_range),
            heading=rng.uniform(0.0, 360.0),
        )
        if i == 0:
            agent.role = Role.MASTER
        agents.append(agent)
    return agents


def build_targets(cfg: dict, bounds, rng) -> list[Target]:
    target_cfg = cfg["targets"]
    kinds = list(TargetType)
    targets = []
    for i in range(_count(rng, target_cfg["count"])):
        targets.append(
            Target(
                id=f"target_{i + 1}",
                pos=_uniform_in(rng, bounds, target_cfg.get("margin", 80.0)),
                priority=int(rng.integers(1, 6)),
                type=kinds[int(rng.integers(0, len(kinds)))],
            )
        )
    return targets


def build_jamming_zones(cfg: dict, bounds, rng) -> tuple[JammingZone, ...]:
    jam_cfg = cfg["jamming"]
    zones = []
    for i in range(_count(rng, jam_cfg["count"])):
        cx, cy = _uniform_in(rng, bounds, jam_cfg.get("margin", 150.0))
        zones.append(
            JammingZone(
                id=f"jam_{i + 1}",
                center=(float(cx), float(cy)),
                radius=float(rng.uniform(*jam_cfg["radius"])),
                intensity=float(rng.uniform(*jam_cfg["intensity"])),
            )
        )
    return tuple(zones)


def make_phone_agent(cfg: dict, bounds, now: float = 0.0) -> AgentState:
    phone_cfg = cfg["phone"]
    xmin, xmax, ymin, ymax = bounds
    agent = make_agent(
        phone_cfg.get("id", "mobile_drone"),
        [(xmin + xmax) / 2.0, ymax - phone_cfg.get("spawn_offset", 100.0)],
        battery=phone_cfg.get("battery", 85.0),
        is_phone=True,
        now=now,
    )
    agent.task = TaskType.RELAY
    return agent
