import logging

import numpy as np

from ..core.state import AgentState, Target, TargetStatus, TargetType, TaskType

logger = logging.getLogger(__name__)

FALLBACK_TASKS = (TaskType.SCOUT, TaskType.OBSERVER, TaskType.RELAY)

TASK_FOR_TARGET = {
    TargetType.ATTACK: TaskType.ATTACK,
    TargetType.OBSERVE: TaskType.OBSERVER,
    TargetType.RELAY: TaskType.RELAY,
}


def allocate_tasks(agents: list[AgentState], master_id: str | None, targets: list[Target]):
    """
    Greedy nearest-agent assignment of pending targets, highest priority
    first, then fallback roles for everyone still idle.

    Returns (agents, targets, assignments) where assignments is a list of
    (target_id, agent_id) in the order they were made. Inputs are not
    modified.
    """
    agents = [a.copy() for a in agents]
    targets = [t.copy() for t in targets]

    # sorted() is stable, ties keep list order
    pending = sorted(
        (t for t in targets if t.status is TargetStatus.PENDING),
        key=lambda t: -t.priority,
    )
    available = [
        a for a in agents
        if a.id != master_id and not a.is_phone and a.alive and a.task is TaskType.IDLE
    ]

    assignments = []
    for target in pending:
        if not available:
            break
        dists = [float(np.linalg.norm(a.pos - target.pos)) for a in available]
        chosen = available.pop(int(np.argmin(dists)))  # argmin returns the first minimum
        chosen.task = TASK_FOR_TARGET[target.type]
        chosen.assigned_target_id = target.id
        target.status = TargetStatus.ASSIGNED
        target.assigned_agent_id = chosen.id
        assignments.append((target.id, chosen.id))
        logger.debug("assigned %s -> %s (%s)", target.id, chosen.id, chosen.task.value)

    for i, a in enumerate(agents):
        if a.id == master_id:
            a.task = TaskType.OBSERVER
        elif a.task is TaskType.IDLE and a.alive and not a.is_phone:
            a.task = FALLBACK_TASKS[i % len(FALLBACK_TASKS)]

    return agents, targets, assignments
