import numpy as np

from ..policies.base import Policy
from ..policies.phone import PhonePolicy
from .battery import BatteryModel, health_from_battery
from .geometry import heading_deg
from .state import AgentState


def step_agent(
    agent: AgentState,
    snapshot: list[AgentState],
    goal,
    env,
    policy: Policy,
    battery: BatteryModel,
    dt_ms: float,
    links=(),
    phone_policy: PhonePolicy | None = None,
    motion=None,
) -> AgentState:
    """
    One tick for one live agent. Reads only the previous snapshot and
    returns a fresh AgentState; `agent` itself is left untouched.
    """
    in_zone = env.in_jamming_zone(agent.pos)
    avoidance = env.avoidance_vector(agent.pos)

    if agent.is_phone:
        obs = phone_policy.build_observation(agent, motion=motion)
        vel = phone_policy.act(obs)
        heading = phone_policy.heading(obs)
    else:
        obs = policy.build_observation(agent, snapshot, goal, env)
        vel = policy.act(obs)
        heading = heading_deg(vel)

    moved = agent.copy(
        pos=env.clamp(agent.pos + vel),
        vel=np.asarray(vel, dtype=float),
        heading=heading,
        neighbors=tuple(links),
        in_jamming_zone=in_zone,
        avoidance=avoidance,
    )
    moved.battery = battery.drain(moved, dt_ms)
    moved.health = health_from_battery(moved.battery)
    return moved
