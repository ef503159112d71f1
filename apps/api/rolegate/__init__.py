"""
Rolegate - rule-based authorization service.

Roles carry ordered permission rules; each role's rules are compiled into
an Ability that answers "can this role do X to Y?" and "which fields of Y
may it see?". See rolegate.core.auth for the engine.
"""

__version__ = "0.1.0"
