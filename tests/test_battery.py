import numpy as np
import pytest

from skyswarm.core.battery import BatteryModel, health_from_battery
from skyswarm.core.env import make_agent
from skyswarm.core.state import Health, Role


@pytest.mark.parametrize(
    "battery,health",
    [
        (0.0, Health.DESTROYED),
        (-1.0, Health.DESTROYED),
        (14.9, Health.CRITICAL),
        (15.0, Health.WARNING),
        (29.9, Health.WARNING),
        (30.0, Health.HEALTHY),
        (100.0, Health.HEALTHY),
    ],
)
def test_health_thresholds(battery, health):
    assert health_from_battery(battery) is health


def test_master_drains_faster():
    model = BatteryModel()
    master = make_agent("m", (0, 0), battery=50.0)
    master.role = Role.MASTER
    slave = make_agent("s", (0, 0), battery=50.0)
    assert model.drain(master, 1000) == pytest.approx(50.0 - 0.002)
    assert model.drain(slave, 1000) == pytest.approx(50.0 - 0.001)


def test_movement_and_jamming_add_drain():
    model = BatteryModel()
    agent = make_agent("a", (0, 0), battery=50.0)
    agent.vel = np.array([3.0, 4.0])
    agent.in_jamming_zone = True
    expected = 50.0 - (0.001 + 5 * 0.0005 + 0.001) * 0.05
    assert model.drain(agent, 50) == pytest.approx(expected)


def test_drain_floors_at_zero():
    model = BatteryModel(slave_rate=1000.0)
    agent = make_agent("a", (0, 0), battery=0.5)
    assert model.drain(agent, 1000) == 0.0


def test_drain_never_increases_battery():
    model = BatteryModel()
    for b in (0.0, 0.0001, 12.0, 99.99, 100.0):
        agent = make_agent("a", (0, 0), battery=b)
        assert model.drain(agent, 50) <= b
