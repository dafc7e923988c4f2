"""
Refresh Cycle Service - Runs the rule engine once per data refresh.

This service orchestrates the process-evaluate-compute-apply cycle:
1. Process frames into metrics
2. Evaluate rules against the metrics
3. Compute element states
4. Apply the states to the rendering surface
"""

import logging
from typing import Iterable, Mapping, Sequence

import pandas as pd

from flowrules.core.domain.rule import Rule
from flowrules.core.domain.settings import EngineSettings
from flowrules.core.domain.state import ElementState, RuleResult
from flowrules.core.ports.render_surface import RenderSurface
from flowrules.core.services.metric_processor import process_frames
from flowrules.core.services.rule_evaluator import HostVariableResolver, evaluate_all_rules, identity
from flowrules.core.services.state_applier import ApplyReport, apply_states, reset_states, snapshot_values
from flowrules.core.services.state_computer import compute_states

logger = logging.getLogger(__name__)


class RefreshCycle:
    """
    Core service bound to one rendering surface.

    Holds the surface's original labels so ``reset`` can undo every change.
    Calls for one surface must not overlap.
    """

    def __init__(
        self,
        surface: RenderSurface,
        rules: Sequence[Rule],
        settings: EngineSettings | None = None,
        resolve_host_variable: HostVariableResolver = identity,
    ):
        """
        Initialize the refresh cycle.

        Args:
            surface: Port to the diagram being driven
            rules: Rules in configured order
            settings: Engine settings (default aggregation ...)
            resolve_host_variable: Host-level template substitution
        """
        self.surface = surface
        self.rules = list(rules)
        self.settings = settings or EngineSettings()
        self.resolve_host_variable = resolve_host_variable

        self._original_values: dict[str, str] | None = None
        self.last_results: list[RuleResult] = []
        self.last_report: ApplyReport | None = None

    @property
    def original_values(self) -> dict[str, str]:
        if self._original_values is None:
            self._original_values = snapshot_values(self.surface)
        return self._original_values

    def run(
        self,
        frames: Iterable[pd.DataFrame],
        element_ids: Sequence[str] | None = None,
        element_labels: Mapping[str, str] | None = None,
    ) -> dict[str, ElementState]:
        """
        Execute one refresh.

        Args:
            frames: Data of this refresh
            element_ids: Element universe (default: every element of the surface)
            element_labels: Element labels (default: labels captured before the first refresh)

        Returns:
            The element states that were applied
        """
        original = self.original_values
        if element_ids is None:
            element_ids = list(original)
        if element_labels is None:
            element_labels = original

        # 1. Metrics
        metrics = process_frames(frames, self.settings.default_aggregation)
        if not metrics:
            logger.warning("No metric data in this refresh")

        # 2. Rule results
        self.last_results = evaluate_all_rules(self.rules, metrics, self.resolve_host_variable)

        # 3. Element states
        states = compute_states(self.rules, self.last_results, element_ids, element_labels)

        # 4. Apply
        self.last_report = apply_states(self.surface, states)
        return states

    def reset(self) -> None:
        """Restore every element to its pre-rule label and visibility."""
        if self._original_values is None:
            return
        reset_states(self.surface, self._original_values)

    def reload(self) -> None:
        """Forget the captured labels after the diagram itself has been replaced."""
        self._original_values = None
