import numpy as np

from .state import SimContext, SwarmState, TargetStatus


def swarm_metrics(state: SwarmState, ctx: SimContext) -> dict:
    """
    Summary figures for dashboards and run logs. Master uptime is in
    seconds since the current master took over (0 while leaderless).
    """
    live = state.live_agents()
    total = len(state.agents)
    return {
        "total_agents": total,
        "active_agents": len(live),
        "average_battery": float(np.mean([a.battery for a in live])) if live else 0.0,
        "formation_integrity": 100.0 * len(live) / total if total else 0.0,
        "jammed_agents": sum(1 for a in live if a.in_jamming_zone),
        "targets_completed": sum(1 for t in state.targets if t.status is TargetStatus.COMPLETED),
        "master_uptime": (ctx.now - ctx.master_started_at) / 1000.0 if state.master_id else 0.0,
        "elections": ctx.election_count,
        "mesh_quality": mean_link_quality(state),
    }


def mean_link_quality(state: SwarmState) -> float:
    """
    Average signal strength over every directed mesh link.
    """
    strengths = [link.signal_strength for a in state.live_agents() for link in a.neighbors]
    if not strengths:
        return 0.0
    return float(np.mean(strengths))
