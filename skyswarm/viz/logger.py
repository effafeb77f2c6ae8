import json
from pathlib import Path

from ..core.state import SwarmState


class SwarmLogger:
    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.records = []

    def log_state(self, state: SwarmState, metrics=None, events=None):
        snapshot = {
            "t": state.t,
            "master_id": state.master_id,
            "formation": state.formation.value,
            "mission_active": state.mission_active,
            "election_in_progress": state.election_in_progress,
            "agents": {
                a.id: {
                    "pos": a.pos.tolist(),
                    "vel": a.vel.tolist(),
                    "battery": a.battery,
                    "role": a.role.value,
                    "task": a.task.value,
                    "health": a.health.value,
                    "heading": a.heading,
                    "is_phone": a.is_phone,
                    "in_jamming_zone": a.in_jamming_zone,
                    "assigned_target_id": a.assigned_target_id,
                    "neighbors": [link.agent_id for link in a.neighbors],
                }
                for a in state.agents
            },
            "targets": {
                t.id: {
                    "pos": t.pos.tolist(),
                    "priority": t.priority,
                    "type": t.type.value,
                    "status": t.status.value,
                    "assigned_agent_id": t.assigned_agent_id,
                }
                for t in state.targets
            },
        }
        if metrics is not None:
            snapshot["metrics"] = metrics
        if events is not None:
            snapshot["events"] = [
                {
                    "timestamp": e.timestamp,
                    "kind": e.kind.value,
                    "details": e.details,
                    "candidate_id": e.candidate_id,
                    "winner_id": e.winner_id,
                    "reason": e.reason,
                }
                for e in events
            ]
        self.records.append(snapshot)

    def flush(self):
        with self.path.open("w") as f:
            json.dump(self.records, f, indent=2)
