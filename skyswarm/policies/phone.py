import numpy as np

from .base import Policy


class PhonePolicy(Policy):
    """
    Externally driven agent: velocity follows the latest tilt sample,
    heading turns with yaw. No sample yet means hold position.
    """

    def __init__(self, speed=3.0, yaw_rate=5.0):
        self.speed = speed
        self.yaw_rate = yaw_rate

    def build_observation(self, self_state, neighbors=None, goal=None, env=None, motion=None):
        return (self_state, motion)

    def act(self, obs):
        _, motion = obs
        if motion is None:
            return np.zeros(2)
        # screen coordinates: forward tilt moves up (negative y)
        return np.array([motion.y * self.speed, -motion.x * self.speed])

    def heading(self, obs) -> float:
        self_state, motion = obs
        if motion is None:
            return self_state.heading
        return (self_state.heading + motion.yaw * self.yaw_rate) % 360.0
