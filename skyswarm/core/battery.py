from dataclasses import dataclass

from .state import AgentState, Health, Role


def health_from_battery(battery: float) -> Health:
    if battery <= 0:
        return Health.DESTROYED
    if battery < 15:
        return Health.CRITICAL
    if battery < 30:
        return Health.WARNING
    return Health.HEALTHY


@dataclass
class BatteryModel:
    """
    Drain rates in percent per second. The master pays a coordination
    premium, movement costs scale with speed, jamming adds a flat penalty.
    """
    master_rate: float = 0.002
    slave_rate: float = 0.001
    movement_rate: float = 0.0005
    jam_rate: float = 0.001

    def drain_rate(self, agent: AgentState) -> float:
        role_rate = self.master_rate if agent.role is Role.MASTER else self.slave_rate
        jam = self.jam_rate if agent.in_jamming_zone else 0.0
        return role_rate + agent.speed * self.movement_rate + jam

    def drain(self, agent: AgentState, dt_ms: float) -> float:
        new = agent.battery - self.drain_rate(agent) * (dt_ms / 1000.0)
        return min(100.0, max(0.0, new))
