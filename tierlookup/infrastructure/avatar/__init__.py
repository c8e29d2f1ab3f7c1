"""Image warming side effects.

Bounded Context: Avatars
"""
