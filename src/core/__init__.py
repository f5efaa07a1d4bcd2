"""
Core domain models, amount primitives, and JSON contracts.

This module contains the foundational building blocks that are independent
of external systems (asset registry, payment rail, identity provider).
"""
