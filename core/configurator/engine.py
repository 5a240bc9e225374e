"""Resolution pipeline: rule evaluation followed by the scene fold."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Sequence

from .config import EngineConfig
from .diagnostics import DiagnosticKind, DiagnosticsSink, report
from .rules import RuleEvaluator
from .scene import LiveComponents, SceneResolver
from .types import ComponentState, Option, VisibilityResult

logger = logging.getLogger(__name__)


@dataclass
class ConfigurationResult:
    """Everything the caller needs to update the view after a selection change."""

    visibility: VisibilityResult
    component_states: Dict[str, ComponentState]
    defaults_to_apply: Dict[str, str]
    selections: Dict[str, str]  # selections the states were resolved against
    unresolved_option_ids: List[str] = field(default_factory=list)
    passes: int = 1

    @property
    def visible_option_ids(self) -> List[str]:
        return self.visibility.visible_option_ids

    @property
    def visible_value_ids(self) -> Dict[str, List[str]]:
        return self.visibility.visible_value_ids

    def to_dict(self) -> dict:
        """Convert to the external interface shape."""
        data = self.visibility.to_dict()
        data.update(
            {
                "componentStates": {
                    name: state.to_dict() for name, state in self.component_states.items()
                },
                "defaultsToApply": dict(self.defaults_to_apply),
                "selections": dict(self.selections),
                "unresolvedOptionIds": list(self.unresolved_option_ids),
                "passes": self.passes,
            }
        )
        return data


class ConfiguratorEngine:
    """Runs the rule evaluator and scene resolver for a selection snapshot.

    The engine never calls back into itself. `resolve` performs one pass
    and reports the defaults it needs; `resolve_with_defaults` is the
    explicit two-phase call that merges them and resolves once more.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        self.config = config or EngineConfig()
        self.diagnostics = diagnostics
        self.evaluator = RuleEvaluator(diagnostics)
        self.resolver = SceneResolver(self.config, diagnostics)

    def resolve(
        self,
        options: Sequence[Option],
        selections: Mapping[str, str],
        components: LiveComponents,
    ) -> ConfigurationResult:
        """
        Run a single resolution pass.

        Args:
            options: Flat option list in authored order
            selections: Current option id -> value id map (not modified)
            components: Live model components

        Returns:
            ConfigurationResult whose defaults_to_apply lists the selections
            the caller should merge before resolving again
        """
        snapshot = dict(selections)
        visibility = self.evaluator.resolve_visibility(options, snapshot)
        scene = self.resolver.resolve_component_states(
            options, snapshot, visibility, components
        )
        return ConfigurationResult(
            visibility=visibility,
            component_states=scene.states,
            defaults_to_apply=scene.needed_defaults,
            selections=snapshot,
        )

    def resolve_with_defaults(
        self,
        options: Sequence[Option],
        selections: Mapping[str, str],
        components: LiveComponents,
    ) -> ConfigurationResult:
        """
        Resolve, apply the needed default selections, and resolve exactly once more.

        Options that still lack a legal value after the second pass are left
        unselected and listed in unresolved_option_ids.

        Returns:
            Result of the final pass. defaults_to_apply holds the defaults
            merged by the cascade so the caller can persist them.
        """
        first = self.resolve(options, selections, components)
        if not first.defaults_to_apply:
            return first

        merged = dict(first.selections)
        merged.update(first.defaults_to_apply)
        logger.info(
            f"Applying {len(first.defaults_to_apply)} default selection(s): "
            f"{first.defaults_to_apply}"
        )

        second = self.resolve(options, merged, components)
        unresolved = list(second.defaults_to_apply)
        for option_id in unresolved:
            report(
                self.diagnostics,
                DiagnosticKind.UNRESOLVED_DEFAULT,
                f"Option '{option_id}' still lacks a selection after the default cascade",
                option_id=option_id,
                level=logging.INFO,
            )

        return ConfigurationResult(
            visibility=second.visibility,
            component_states=second.component_states,
            defaults_to_apply=first.defaults_to_apply,
            selections=merged,
            unresolved_option_ids=unresolved,
            passes=2,
        )
