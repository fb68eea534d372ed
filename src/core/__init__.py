"""
Core domain models, mathematical primitives, and invariants.

This module contains the hypersphere AMM engine (pool, liquidity bands,
multi-band aggregator) and is independent of transport and storage layers.
"""
