"""Caching Service Implementation.

Provides concrete implementations for the CacheService interface,
handling two cache levels (L1: in-memory, L2: durable file store) with a
fixed TTL and lazy expiry.
Bounded Context: Cache Management
"""
