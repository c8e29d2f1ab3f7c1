"""Remote API adapters.

Bounded Context: Player Profiles
"""
