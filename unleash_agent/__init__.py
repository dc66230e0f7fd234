"""Belief-and-planning agent for the Unleash The Geek contest."""
