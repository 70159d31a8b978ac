from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from ringviz import logging as slog

RuleMethod = Callable[[Any], None]

STAGES = ("preRender", "afterRender")


@dataclass(frozen=True)
class ResponsiveRule:
    name: str
    method: RuleMethod


class ResponsiveEngine:
    """
    Named responsive rules grouped by lifecycle stage. A rule is a callable that
    receives the layer and adjusts its options in place.
    """

    def __init__(self) -> None:
        self._stages: Dict[str, List[ResponsiveRule]] = {}

    def register(self, stage: str, name: str, method: RuleMethod) -> None:
        st = (stage or "").strip()
        if st not in STAGES:
            raise ValueError(f"Unknown responsive stage '{stage}'. Allowed: {list(STAGES)}")
        key = (name or "").strip()
        if not key:
            raise ValueError("Responsive rule name must be non-empty")
        rules = [r for r in self._stages.get(st, []) if r.name != key]
        rules.append(ResponsiveRule(key, method))
        self._stages[st] = rules

    def rules(self, stage: str) -> List[ResponsiveRule]:
        return list(self._stages.get(stage, []))

    def apply(self, stage: str, layer: Any) -> List[str]:
        """Run every rule of `stage` against `layer` in registration order."""
        applied: List[str] = []
        for rule in self.rules(stage):
            slog.log_debug(f"{stage}: {rule.name}", scope="responsive")
            rule.method(layer)
            applied.append(rule.name)
        return applied
