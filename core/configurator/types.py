"""Data types for the configurator core.

Serialized keys follow the builder's JSON format (camelCase) so stored
configurators round-trip unchanged.
"""

import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Set, Union


class ManipulationType(str, Enum):
    """What an option changes on its target components."""

    VISIBILITY = "visibility"
    MATERIAL = "material"


class DefaultBehavior(str, Enum):
    """Visibility baseline a visibility option imposes on its targets."""

    SHOW = "show"
    HIDE = "hide"


class DisplayType(str, Enum):
    """How the option is presented to the end user."""

    LIST = "list"
    BUTTONS = "buttons"
    IMAGES = "images"
    GRID = "grid"


class RuleOperator(str, Enum):
    """Comparison applied by a single conditional rule."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    IN = "in"
    NOT_IN = "not_in"


class LogicCombinator(str, Enum):
    """How rule results are joined."""

    AND = "AND"
    OR = "OR"


def _coerce_enum(enum_cls, raw, default):
    """Convert raw to enum_cls, falling back to default for unknown input."""
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except (TypeError, ValueError):
        return default


def _short_id(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:4]}"


@dataclass
class ConditionalRule:
    """A single comparison against another option's current selection."""

    option_id: str
    # Unknown operators from stored data are kept as raw strings
    operator: Union[RuleOperator, str] = RuleOperator.EQUALS
    value: Union[str, List[str]] = ""
    id: str = field(default_factory=lambda: _short_id("rule"))

    def __post_init__(self):
        self.operator = _coerce_enum(RuleOperator, self.operator, self.operator)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        operator = self.operator.value if isinstance(self.operator, RuleOperator) else self.operator
        value = list(self.value) if isinstance(self.value, (list, tuple)) else self.value
        return {
            "id": self.id,
            "optionId": self.option_id,
            "operator": operator,
            "value": value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConditionalRule":
        """Create ConditionalRule from dictionary."""
        raw_operator = data.get("operator", RuleOperator.EQUALS.value)
        operator = _coerce_enum(RuleOperator, raw_operator, raw_operator)
        value = data.get("value", "")
        if isinstance(value, tuple):
            value = list(value)

        return cls(
            id=data.get("id", _short_id("rule")),
            option_id=data.get("optionId", ""),
            operator=operator,
            value=value,
        )

    @classmethod
    def create_default(cls, available_options: List["Option"]) -> Optional["ConditionalRule"]:
        """Build an 'equals first value' rule against the first available option."""
        if not available_options:
            return None

        first_option = available_options[0]
        valid_values = [v for v in first_option.values if v and v.id]
        return cls(
            option_id=first_option.id,
            operator=RuleOperator.EQUALS,
            value=valid_values[0].id if valid_values else "",
        )


@dataclass
class ConditionalLogic:
    """Flat list of rules joined by a single combinator."""

    enabled: bool = False
    operator: LogicCombinator = LogicCombinator.AND
    rules: List[ConditionalRule] = field(default_factory=list)
    id: str = field(default_factory=lambda: _short_id("conditional"))

    def __post_init__(self):
        self.operator = _coerce_enum(LogicCombinator, self.operator, LogicCombinator.AND)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "enabled": self.enabled,
            "operator": self.operator.value,
            "rules": [r.to_dict() for r in self.rules],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConditionalLogic":
        """Create ConditionalLogic from dictionary.

        A missing or unrecognized combinator becomes AND.
        """
        return cls(
            id=data.get("id", _short_id("conditional")),
            enabled=bool(data.get("enabled", False)),
            operator=_coerce_enum(LogicCombinator, data.get("operator"), LogicCombinator.AND),
            rules=[ConditionalRule.from_dict(r) for r in data.get("rules") or []],
        )

    @classmethod
    def create_default(cls) -> "ConditionalLogic":
        """Disabled AND logic with no rules."""
        return cls(enabled=False, operator=LogicCombinator.AND, rules=[])

    def referenced_option_ids(self) -> List[str]:
        """Option ids referenced by the rules, in rule order."""
        return [r.option_id for r in self.rules]


@dataclass
class VisibilityEffect:
    """Per-value overrides for a visibility option."""

    kind: ClassVar[ManipulationType] = ManipulationType.VISIBILITY

    visible_components: List[str] = field(default_factory=list)
    hidden_components: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "visibleComponents": list(self.visible_components),
            "hiddenComponents": list(self.hidden_components),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VisibilityEffect":
        return cls(
            visible_components=list(data.get("visibleComponents") or []),
            hidden_components=list(data.get("hiddenComponents") or []),
        )


@dataclass
class MaterialEffect:
    """Color a material option applies to its targets."""

    kind: ClassVar[ManipulationType] = ManipulationType.MATERIAL

    color: Optional[str] = None  # "#RRGGBB" as authored

    def to_dict(self) -> dict:
        return {"color": self.color} if self.color is not None else {}

    @classmethod
    def from_dict(cls, data: dict) -> "MaterialEffect":
        return cls(color=data.get("color"))


ValueEffect = Union[VisibilityEffect, MaterialEffect]

EFFECT_TYPES = {
    ManipulationType.VISIBILITY: VisibilityEffect,
    ManipulationType.MATERIAL: MaterialEffect,
}


@dataclass
class OptionValue:
    """One concrete choice within an option."""

    id: str
    name: str = ""
    effect: ValueEffect = field(default_factory=VisibilityEffect)
    conditional_logic: Optional[ConditionalLogic] = None
    image: Optional[str] = None

    @property
    def manipulation_type(self) -> ManipulationType:
        return self.effect.kind

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {"id": self.id, "name": self.name}
        data.update(self.effect.to_dict())
        if self.image is not None:
            data["image"] = self.image
        if self.conditional_logic is not None:
            data["conditionalLogic"] = self.conditional_logic.to_dict()
        return data

    @classmethod
    def from_dict(
        cls,
        data: dict,
        manipulation_type: ManipulationType = ManipulationType.VISIBILITY,
    ) -> "OptionValue":
        """Create OptionValue from dictionary.

        The payload fields are read according to the owning option's
        manipulation type.
        """
        logic = data.get("conditionalLogic")
        effect_cls = EFFECT_TYPES[manipulation_type]
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            effect=effect_cls.from_dict(data),
            conditional_logic=ConditionalLogic.from_dict(logic) if logic else None,
            image=data.get("image"),
        )


@dataclass
class OptionGroup:
    """Presentation data carried by a group entry."""

    id: str
    name: str = ""
    description: Optional[str] = None
    is_expanded: bool = True

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "isExpanded": self.is_expanded,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "OptionGroup":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            description=data.get("description"),
            is_expanded=data.get("isExpanded", True),
        )


@dataclass
class Option:
    """A configurable axis with an ordered set of values."""

    id: str
    name: str = ""
    manipulation_type: ManipulationType = ManipulationType.VISIBILITY
    display_type: DisplayType = DisplayType.LIST
    target_components: List[str] = field(default_factory=list)
    default_behavior: DefaultBehavior = DefaultBehavior.SHOW
    values: List[OptionValue] = field(default_factory=list)
    conditional_logic: Optional[ConditionalLogic] = None
    group_id: Optional[str] = None
    is_group: bool = False

    # Presentation only
    description: Optional[str] = None
    display_direction: Optional[str] = None  # "column", "row"
    group_data: Optional[OptionGroup] = None

    def __post_init__(self):
        self.manipulation_type = ManipulationType(self.manipulation_type)
        self.display_type = DisplayType(self.display_type)
        self.default_behavior = DefaultBehavior(self.default_behavior)
        for value in self.values:
            if value.manipulation_type != self.manipulation_type:
                raise ValueError(
                    f"Value {value.id} carries a {value.manipulation_type.value} effect "
                    f"but option {self.id} is {self.manipulation_type.value}"
                )

    def get_value(self, value_id: Optional[str]) -> Optional[OptionValue]:
        """Get a value by ID."""
        if value_id is None:
            return None
        for value in self.values:
            if value.id == value_id:
                return value
        return None

    def value_ids(self) -> List[str]:
        return [v.id for v in self.values]

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "id": self.id,
            "name": self.name,
            "displayType": self.display_type.value,
            "manipulationType": self.manipulation_type.value,
            "targetComponents": list(self.target_components),
            "values": [v.to_dict() for v in self.values],
        }
        if self.manipulation_type == ManipulationType.VISIBILITY:
            data["defaultBehavior"] = self.default_behavior.value
        if self.description is not None:
            data["description"] = self.description
        if self.display_direction is not None:
            data["displayDirection"] = self.display_direction
        if self.conditional_logic is not None:
            data["conditionalLogic"] = self.conditional_logic.to_dict()
        if self.group_id is not None:
            data["groupId"] = self.group_id
        if self.is_group:
            data["isGroup"] = True
        if self.group_data is not None:
            data["groupData"] = self.group_data.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Option":
        """Create Option from dictionary."""
        manipulation_type = _coerce_enum(
            ManipulationType, data.get("manipulationType"), ManipulationType.VISIBILITY
        )
        logic = data.get("conditionalLogic")
        group_data = data.get("groupData")

        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            manipulation_type=manipulation_type,
            display_type=_coerce_enum(DisplayType, data.get("displayType"), DisplayType.LIST),
            target_components=list(data.get("targetComponents") or []),
            default_behavior=_coerce_enum(
                DefaultBehavior, data.get("defaultBehavior"), DefaultBehavior.SHOW
            ),
            values=[
                OptionValue.from_dict(v, manipulation_type)
                for v in data.get("values") or []
                if v
            ],
            conditional_logic=ConditionalLogic.from_dict(logic) if logic else None,
            group_id=data.get("groupId"),
            is_group=bool(data.get("isGroup", False)),
            description=data.get("description"),
            display_direction=data.get("displayDirection"),
            group_data=OptionGroup.from_dict(group_data) if group_data else None,
        )


@dataclass
class ConfiguratorData:
    """A complete configurator as authored in the builder."""

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    name: str = ""
    description: str = ""
    model: str = ""  # model file reference
    options: List[Option] = field(default_factory=list)

    def get_option(self, option_id: str) -> Optional[Option]:
        for option in self.options:
            if option.id == option_id:
                return option
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "model": self.model,
            "options": [o.to_dict() for o in self.options],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConfiguratorData":
        """Create ConfiguratorData from dictionary."""
        return cls(
            id=data.get("id", str(uuid.uuid4())[:8]),
            name=data.get("name", ""),
            description=data.get("description", ""),
            model=data.get("model", ""),
            options=[Option.from_dict(o) for o in data.get("options") or []],
        )


@dataclass
class ModelComponent:
    """A named part of the loaded model.

    The mesh handle belongs to the scene; the core only reads the record.
    """

    name: str
    mesh: Any = None
    visible: bool = True
    color: Optional[str] = None
    original_visible: bool = True
    original_color: Optional[str] = None


@dataclass
class ComponentState:
    """Resolved visibility and color for one component."""

    visible: bool = True
    color: Optional[str] = None

    def to_dict(self) -> dict:
        data = {"visible": self.visible}
        if self.color is not None:
            data["color"] = self.color
        return data


@dataclass
class VisibilityResult:
    """Options and values that are currently eligible, in input order."""

    visible_option_ids: List[str] = field(default_factory=list)
    visible_value_ids: Dict[str, List[str]] = field(default_factory=dict)

    _option_set: Set[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        self._option_set = set(self.visible_option_ids)

    def is_option_visible(self, option_id: str) -> bool:
        return option_id in self._option_set

    def is_value_visible(self, option_id: str, value_id: str) -> bool:
        return value_id in self.visible_value_ids.get(option_id, ())

    def eligible_values(self, option_id: str) -> List[str]:
        return self.visible_value_ids.get(option_id, [])

    def to_dict(self) -> dict:
        return {
            "visibleOptionIds": list(self.visible_option_ids),
            "visibleValueIds": {k: list(v) for k, v in self.visible_value_ids.items()},
        }


@dataclass
class SceneResolution:
    """Output of one fold over the options."""

    states: Dict[str, ComponentState] = field(default_factory=dict)
    needed_defaults: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "componentStates": {k: s.to_dict() for k, s in self.states.items()},
            "defaultsToApply": dict(self.needed_defaults),
        }
