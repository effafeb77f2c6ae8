import numpy as np

from ..core.geometry import clamp_speed, normalize
from .base import Policy


class BoidsPolicy(Policy):
    def __init__(
        self,
        w_sep=1.5,
        w_align=1.0,
        w_coh=1.0,
        sep_radius=50.0,
        align_radius=100.0,
        coh_radius=150.0,
        max_speed=3.0,
        max_force=0.1,
        w_goal=0.5,
        goal_threshold=5.0,
    ):
        self.w_sep = w_sep
        self.w_align = w_align
        self.w_coh = w_coh
        self.sep_radius = sep_radius
        self.align_radius = align_radius
        self.coh_radius = coh_radius
        self.max_speed = max_speed
        self.max_force = max_force
        self.w_goal = w_goal
        self.goal_threshold = goal_threshold

    def build_observation(self, self_state, neighbors, goal=None, env=None):
        others = [n for n in neighbors if n.id != self_state.id and n.alive]
        avoidance = env.avoidance_vector(self_state.pos) if env is not None else np.zeros(2)
        return (self_state, others, goal, avoidance)

    def act(self, obs):
        self_state, others, goal, avoidance = obs
        p = self_state.pos
        force = np.zeros(2)

        if others:
            ps = np.array([o.pos for o in others])
            vs = np.array([o.vel for o in others])
            away = p - ps
            dist = np.linalg.norm(away, axis=1)

            # separation: mean unit vector away from close neighbors
            close = (dist < self.sep_radius) & (dist > 0)
            if close.any():
                sep = (away[close] / dist[close, None]).mean(axis=0)
                force += sep * self.w_sep

            near = dist < self.align_radius
            if near.any():
                force += vs[near].mean(axis=0) * self.w_align * 0.1

            flock = dist < self.coh_radius
            if flock.any():
                force += (ps[flock].mean(axis=0) - p) * self.w_coh * 0.01

        if goal is not None:
            to_goal = np.asarray(goal, dtype=float) - p
            if float(np.linalg.norm(to_goal)) > self.goal_threshold:
                force += normalize(to_goal) * self.w_goal

        force += avoidance

        vel = self_state.vel + force * self.max_force
        return clamp_speed(vel, self.max_speed)
