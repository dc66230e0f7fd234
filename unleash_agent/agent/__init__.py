from unleash_agent.agent.agent import Agent
from unleash_agent.agent.params import Params

__all__ = ["Agent", "Params"]
