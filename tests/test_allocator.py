import numpy as np

from skyswarm.core.env import make_agent
from skyswarm.core.state import Health, Role, Target, TargetStatus, TargetType, TaskType
from skyswarm.tasks.allocator import allocate_tasks


def _target(tid, pos, priority, kind=TargetType.OBSERVE, status=TargetStatus.PENDING):
    return Target(id=tid, pos=np.array(pos, dtype=float), priority=priority, type=kind, status=status)


def _roster():
    master = make_agent("m", (500, 500), 95)
    master.role = Role.MASTER
    a = make_agent("a", (0, 0), 80)
    b = make_agent("b", (100, 0), 80)
    phone = make_agent("p", (90, 0), 85, is_phone=True)
    wreck = make_agent("d", (90, 0), 0)
    wreck.health = Health.DESTROYED
    return [master, a, b, phone, wreck]


def _by_id(items):
    return {x.id: x for x in items}


def test_priority_order_and_nearest_agent():
    targets = [
        _target("t3", (0, 0), 1, TargetType.RELAY),
        _target("t1", (90, 0), 5, TargetType.ATTACK),
        _target("t2", (10, 0), 3, TargetType.OBSERVE),
    ]
    agents, targets, assignments = allocate_tasks(_roster(), "m", targets)
    assert assignments == [("t1", "b"), ("t2", "a")]

    agents, targets = _by_id(agents), _by_id(targets)
    assert agents["b"].task is TaskType.ATTACK and agents["b"].assigned_target_id == "t1"
    assert agents["a"].task is TaskType.OBSERVER and agents["a"].assigned_target_id == "t2"
    assert targets["t1"].status is TargetStatus.ASSIGNED and targets["t1"].assigned_agent_id == "b"
    # nobody left for the lowest priority target
    assert targets["t3"].status is TargetStatus.PENDING


def test_master_phone_and_destroyed_never_assigned():
    targets = [_target(f"t{i}", (90, 0), 5) for i in range(5)]
    agents, _, assignments = allocate_tasks(_roster(), "m", targets)
    assert {agent_id for _, agent_id in assignments} == {"a", "b"}
    agents = _by_id(agents)
    assert agents["m"].task is TaskType.OBSERVER
    assert agents["p"].task is TaskType.IDLE
    assert agents["d"].task is TaskType.IDLE


def test_distance_tie_goes_to_first_in_list():
    x = make_agent("x", (0, 10), 80)
    y = make_agent("y", (0, -10), 80)
    _, _, assignments = allocate_tasks([x, y], None, [_target("t", (0, 0), 2)])
    assert assignments == [("t", "x")]


def test_equal_priority_keeps_list_order():
    x = make_agent("x", (0, 0), 80)
    targets = [_target("first", (500, 0), 3), _target("second", (1, 0), 3)]
    _, _, assignments = allocate_tasks([x], None, targets)
    assert assignments == [("first", "x")]


def test_fallback_cycles_by_position():
    master = make_agent("m", (0, 0), 95)
    others = [make_agent(f"s{i}", (0, 0), 80) for i in range(1, 5)]
    agents, _, _ = allocate_tasks([master] + others, "m", [])
    assert [a.task for a in agents] == [
        TaskType.OBSERVER,
        TaskType.OBSERVER,
        TaskType.RELAY,
        TaskType.SCOUT,
        TaskType.OBSERVER,
    ]


def test_only_pending_targets_considered():
    targets = [
        _target("done", (0, 0), 5, status=TargetStatus.COMPLETED),
        _target("taken", (0, 0), 5, status=TargetStatus.ASSIGNED),
    ]
    _, targets, assignments = allocate_tasks(_roster(), "m", targets)
    assert assignments == []
    assert [t.status for t in targets] == [TargetStatus.COMPLETED, TargetStatus.ASSIGNED]


def test_busy_agents_keep_their_task():
    a = make_agent("a", (0, 0), 80)
    a.task = TaskType.SCOUT
    _, _, assignments = allocate_tasks([a], None, [_target("t", (0, 0), 5)])
    assert assignments == []


def test_inputs_not_modified():
    roster = _roster()
    targets = [_target("t", (0, 0), 5)]
    allocate_tasks(roster, "m", targets)
    assert all(a.task is TaskType.IDLE for a in roster)
    assert targets[0].status is TargetStatus.PENDING
