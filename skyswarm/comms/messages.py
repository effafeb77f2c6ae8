from dataclasses import dataclass

from ..core.state import FormationType, SwarmState


@dataclass
class HeartbeatMessage:
    master_id: str
    timestamp: float
    swarm_size: int
    formation: FormationType

    @classmethod
    def from_state(cls, state: SwarmState, now: float):
        return cls(
            master_id=state.master_id,
            timestamp=now,
            swarm_size=len(state.live_agents()),
            formation=state.formation,
        )
