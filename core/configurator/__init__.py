"""Configuration-resolution core for 3D product configurators.

This module decides which options and values are eligible for the current
selections and folds the selected values' effects onto named model
components.

Usage:
    from core.configurator import ConfiguratorEngine, apply_component_states

    engine = ConfiguratorEngine()
    result = engine.resolve_with_defaults(options, selections, components)

    # Hand the resolved states to the scene
    apply_component_states(components, result.component_states)
"""

from .adapter import apply_component_states
from .colors import normalize_color, to_rgb_float
from .config import STORAGE_VERSION, EngineConfig
from .diagnostics import (
    Diagnostic,
    DiagnosticKind,
    DiagnosticsCollector,
    DiagnosticsSink,
)
from .engine import ConfigurationResult, ConfiguratorEngine
from .ordering import (
    OptionPosition,
    child_options,
    is_valid_drop,
    move_option_to_group,
    options_in_visual_order,
    reorder_options,
    reorder_within_group,
)
from .persistence import (
    ConfiguratorImportError,
    ConfiguratorStore,
    export_configurations,
    import_configurations,
)
from .rules import RuleEvaluator, resolve_visibility
from .scene import SceneResolver, resolve_component_states
from .selection import (
    SelectionChange,
    available_values,
    correct_selections,
    first_available_value,
    is_value_available,
)
from .types import (
    ComponentState,
    ConditionalLogic,
    ConditionalRule,
    ConfiguratorData,
    DefaultBehavior,
    DisplayType,
    LogicCombinator,
    ManipulationType,
    MaterialEffect,
    ModelComponent,
    Option,
    OptionGroup,
    OptionValue,
    RuleOperator,
    SceneResolution,
    VisibilityEffect,
    VisibilityResult,
)
from .validation import (
    ValidationResult,
    available_condition_options,
    has_circular_dependency,
    validate_conditional_logic,
    validate_configurator,
    validate_selections,
)

__all__ = [
    # Core types
    "Option",
    "OptionValue",
    "OptionGroup",
    "VisibilityEffect",
    "MaterialEffect",
    "ConditionalLogic",
    "ConditionalRule",
    "ConfiguratorData",
    "ModelComponent",
    "ComponentState",
    "VisibilityResult",
    "SceneResolution",
    "ManipulationType",
    "DefaultBehavior",
    "DisplayType",
    "RuleOperator",
    "LogicCombinator",
    # Resolution
    "RuleEvaluator",
    "resolve_visibility",
    "SceneResolver",
    "resolve_component_states",
    "ConfiguratorEngine",
    "ConfigurationResult",
    "apply_component_states",
    # Configuration
    "EngineConfig",
    "STORAGE_VERSION",
    # Diagnostics
    "Diagnostic",
    "DiagnosticKind",
    "DiagnosticsCollector",
    "DiagnosticsSink",
    # Colors
    "normalize_color",
    "to_rgb_float",
    # Selection fallback
    "SelectionChange",
    "available_values",
    "correct_selections",
    "first_available_value",
    "is_value_available",
    # Validation
    "ValidationResult",
    "available_condition_options",
    "has_circular_dependency",
    "validate_conditional_logic",
    "validate_configurator",
    "validate_selections",
    # Ordering
    "OptionPosition",
    "child_options",
    "is_valid_drop",
    "move_option_to_group",
    "options_in_visual_order",
    "reorder_options",
    "reorder_within_group",
    # Persistence
    "ConfiguratorImportError",
    "ConfiguratorStore",
    "export_configurations",
    "import_configurations",
]
