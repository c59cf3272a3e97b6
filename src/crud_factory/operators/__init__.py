"""
Filter operators and their SQLAlchemy predicate strategies.

Usage::

    from crud_factory.operators import DEFAULT_PREDICATE_REGISTRY

    clause = DEFAULT_PREDICATE_REGISTRY.compile("gte", users.c.age, 18)
"""

from __future__ import annotations

from .comparison import ComparisonOperator, comparison_operators
from .enum import FilterOperator
from .membership import MembershipOperator
from .null import IsNullOperator
from .pattern import PatternOperator
from .strategy import PredicateOperator, PredicateOperatorRegistry


def build_default_registry() -> PredicateOperatorRegistry:
    """Create a registry with every built-in operator."""
    return PredicateOperatorRegistry(
        [
            *comparison_operators(),
            MembershipOperator(),
            MembershipOperator(negated=True),
            PatternOperator(),
            PatternOperator(case_sensitive=False),
            IsNullOperator(),
        ]
    )


DEFAULT_PREDICATE_REGISTRY: PredicateOperatorRegistry = build_default_registry()

__all__ = [
    "DEFAULT_PREDICATE_REGISTRY",
    "ComparisonOperator",
    "FilterOperator",
    "IsNullOperator",
    "MembershipOperator",
    "PatternOperator",
    "PredicateOperator",
    "PredicateOperatorRegistry",
    "build_default_registry",
]
