"""Folds option effects onto named model components."""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Union

from .colors import normalize_color
from .config import EngineConfig
from .diagnostics import DiagnosticKind, DiagnosticsSink, report
from .types import (
    ComponentState,
    DefaultBehavior,
    MaterialEffect,
    ModelComponent,
    Option,
    OptionValue,
    SceneResolution,
    VisibilityEffect,
    VisibilityResult,
)

logger = logging.getLogger(__name__)

LiveComponents = Union[Mapping[str, ModelComponent], Iterable[ModelComponent]]


def as_component_map(components: LiveComponents) -> Dict[str, ModelComponent]:
    if isinstance(components, Mapping):
        return dict(components)
    return {component.name: component for component in components}


class SceneResolver:
    """Resolves one {visible, color} record per live component.

    Options are folded in array order. The same order is the conflict
    priority: a later option overwrites an earlier one on a shared component.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
    ):
        """
        Initialize the resolver.

        Args:
            config: Engine configuration. Defaults to EngineConfig()
            diagnostics: Optional sink for dangling references and bad payloads
        """
        self.config = config or EngineConfig()
        self.diagnostics = diagnostics

    def resolve_component_states(
        self,
        options: Sequence[Option],
        selections: Mapping[str, str],
        visibility: VisibilityResult,
        live_components: LiveComponents,
    ) -> SceneResolution:
        """
        Fold every visible option's effect into per-component states.

        Args:
            options: Flat option list in authored order
            selections: Current option id -> value id map
            visibility: Output of the rule evaluator for the same selections
            live_components: Components present in the loaded model

        Returns:
            SceneResolution with final states for live components and the
            default selections needed by visible options lacking one
        """
        components = as_component_map(live_components)

        # Neutral baseline
        states: Dict[str, ComponentState] = {
            name: ComponentState(
                visible=component.original_visible,
                color=normalize_color(component.original_color),
            )
            for name, component in components.items()
        }

        index: Dict[str, List[str]] = {}
        for name in components:
            index.setdefault(self.config.component_key(name), []).append(name)

        needed_defaults: Dict[str, str] = {}

        for option in options:
            if not visibility.is_option_visible(option.id):
                continue

            value = self._selected_value(option, selections, visibility)
            if value is None:
                eligible = visibility.eligible_values(option.id)
                if eligible:
                    needed_defaults[option.id] = eligible[0]
                    logger.debug(
                        f"Option '{option.name}' needs default selection {eligible[0]}"
                    )
                continue

            targets = self._match_targets(option, index)
            effect = value.effect

            if isinstance(effect, VisibilityEffect):
                self._apply_visibility(option, value, effect, targets, index, states)
            elif isinstance(effect, MaterialEffect):
                self._apply_material(option, value, effect, targets, states)

        return SceneResolution(states=states, needed_defaults=needed_defaults)

    def _selected_value(
        self,
        option: Option,
        selections: Mapping[str, str],
        visibility: VisibilityResult,
    ) -> Optional[OptionValue]:
        """Get the option's selected value if it exists and is still eligible."""
        selected_id = selections.get(option.id)
        if selected_id is None:
            return None

        value = option.get_value(selected_id)
        if value is None:
            report(
                self.diagnostics,
                DiagnosticKind.INCONSISTENT_SELECTION,
                f"Selection '{selected_id}' is not a value of option '{option.id}'",
                option_id=option.id,
                value_id=selected_id,
            )
            return None

        if not visibility.is_value_visible(option.id, selected_id):
            logger.debug(
                f"Selected value '{value.name}' of '{option.name}' is no longer eligible"
            )
            return None

        return value

    def _match_targets(self, option: Option, index: Dict[str, List[str]]) -> List[str]:
        """Resolve the option's target names to live component names."""
        targets: List[str] = []
        for target in option.target_components:
            matches = index.get(self.config.component_key(target))
            if not matches:
                if self.config.report_dangling_components:
                    report(
                        self.diagnostics,
                        DiagnosticKind.DANGLING_COMPONENT,
                        f"Option '{option.id}' targets missing component '{target}'",
                        option_id=option.id,
                        component=target,
                    )
                continue
            for name in matches:
                if name not in targets:
                    targets.append(name)
        return targets

    def _apply_visibility(
        self,
        option: Option,
        value: OptionValue,
        effect: VisibilityEffect,
        targets: List[str],
        index: Dict[str, List[str]],
        states: Dict[str, ComponentState],
    ) -> None:
        baseline = option.default_behavior == DefaultBehavior.SHOW
        for name in targets:
            states[name].visible = baseline

        # Value overrides only reach the option's own targets; hidden wins ties
        for names, visible in (
            (effect.visible_components, True),
            (effect.hidden_components, False),
        ):
            for override in names:
                matches = [
                    name
                    for name in index.get(self.config.component_key(override), [])
                    if name in targets
                ]
                if not matches:
                    logger.debug(
                        f"Override '{override}' of value '{value.id}' is not a live target "
                        f"of option '{option.id}'"
                    )
                for name in matches:
                    states[name].visible = visible

        logger.debug(
            f"Applied '{option.name}' -> '{value.name}' "
            f"({option.default_behavior.value} baseline) to {len(targets)} components"
        )

    def _apply_material(
        self,
        option: Option,
        value: OptionValue,
        effect: MaterialEffect,
        targets: List[str],
        states: Dict[str, ComponentState],
    ) -> None:
        color = normalize_color(effect.color)
        if color is None:
            report(
                self.diagnostics,
                DiagnosticKind.INVALID_COLOR,
                f"Value '{value.id}' of option '{option.id}' has no usable color "
                f"({effect.color!r})",
                option_id=option.id,
                value_id=value.id,
            )
            return

        for name in targets:
            states[name].color = color

        logger.debug(f"Applied color {color} from '{option.name}' to {len(targets)} components")


def resolve_component_states(
    options: Sequence[Option],
    selections: Mapping[str, str],
    visibility: VisibilityResult,
    live_components: LiveComponents,
    config: Optional[EngineConfig] = None,
    diagnostics: Optional[DiagnosticsSink] = None,
) -> SceneResolution:
    """Fold option effects with a one-off resolver."""
    return SceneResolver(config, diagnostics).resolve_component_states(
        options, selections, visibility, live_components
    )
