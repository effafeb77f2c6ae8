from ..core.geometry import distance, segment_intersects_circle
from ..core.state import NeighborLink


class MeshNetwork:
    def __init__(self, max_range=200.0, signal_reduction=0.7, jam_latency_factor=3.0):
        self.max_range = max_range
        self.signal_reduction = signal_reduction  # fraction lost at intensity 100
        self.jam_latency_factor = jam_latency_factor

    def build_links(self, agents, zones) -> dict[str, tuple[NeighborLink, ...]]:
        """
        agents: list[AgentState] (the previous tick's snapshot)
        returns: dict[agent_id -> neighbor links sorted by distance]

        Destroyed agents neither own nor appear in links. Each unordered
        pair is evaluated once and the result mirrored to both ends.
        """
        live = [a for a in agents if a.alive]
        links = {a.id: [] for a in live}
        for i, a in enumerate(live):
            for b in live[i + 1:]:
                quality = self.link_quality(a.pos, b.pos, zones)
                if quality is None:
                    continue
                d, strength, latency, jammed = quality
                links[a.id].append(NeighborLink(b.id, d, strength, latency, jammed))
                links[b.id].append(NeighborLink(a.id, d, strength, latency, jammed))
        return {aid: tuple(sorted(lst, key=lambda link: link.distance)) for aid, lst in links.items()}

    def link_quality(self, p, q, zones):
        d = distance(p, q)
        if d > self.max_range:
            return None
        strength = 100.0 * (1 - d / self.max_range)
        jammed = False
        for zone in zones:
            if segment_intersects_circle(p, q, zone.center, zone.radius):
                strength *= 1 - self.signal_reduction * (zone.intensity / 100.0)
                jammed = True
        latency = 10.0 + d / 10.0
        if jammed:
            latency *= self.jam_latency_factor
        return d, max(0.0, strength), latency, jammed
