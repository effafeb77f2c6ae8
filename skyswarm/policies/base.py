from abc import ABC, abstractmethod


class Policy(ABC):
    @abstractmethod
    def build_observation(self, self_state, neighbors, goal=None, env=None):
        ...

    @abstractmethod
    def act(self, obs):
        """Return the agent's new velocity vector."""
        ...
