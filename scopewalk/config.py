#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
scopewalk/config.py
===================

Traversal configuration.

Provides:
- ``TraverseConfig``: frozen knobs for one traversal (child-field schema,
  root node type)
- ``DEFAULT_CONFIG``: the ESTree + JSX + Flow configuration

``Traverser`` logs every :meth:`TraverseConfig.validate` warning when it is
constructed.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import List, Mapping, Sequence

from scopewalk.visitor_keys import VISITOR_KEYS, VisitorKeys, union_keys

__all__ = ["TraverseConfig", "DEFAULT_CONFIG"]


@dataclass(frozen=True)
class TraverseConfig:
    """Tuning knobs for a traversal.

    ``visitor_keys`` is the child-field schema the walker follows;
    ``program_type`` is the node type whose scope lookup asks the scope
    manager for the outer scope rather than the inner one.
    """
    visitor_keys: Mapping[str, Sequence[str]] = field(default_factory=lambda: VISITOR_KEYS)
    program_type: str = "Program"

    def with_keys(self, extra: VisitorKeys) -> "TraverseConfig":
        """Return a copy whose schema also covers the types in *extra*."""
        merged = MappingProxyType(union_keys(self.visitor_keys, extra))
        return replace(self, visitor_keys=merged)

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not self.visitor_keys:
            warnings.append("visitor_keys is empty; every node type will be rejected")
        if not self.program_type:
            warnings.append("program_type must be a non-empty node type")
        elif self.program_type not in self.visitor_keys:
            warnings.append(
                f"program_type {self.program_type!r} has no visitor keys"
            )
        return warnings


DEFAULT_CONFIG = TraverseConfig()
