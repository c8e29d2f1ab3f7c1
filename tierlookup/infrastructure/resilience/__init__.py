"""API Resilience Implementations.

Contains the paced request queue and the exponential backoff fetch used for
every call to the remote API.
Bounded Context: API Resilience
"""
