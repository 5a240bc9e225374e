"""Applies resolved component states to the live scene records."""

import logging
from typing import Dict, List, Mapping

from .colors import to_rgb_float
from .scene import LiveComponents, as_component_map
from .types import ComponentState

logger = logging.getLogger(__name__)


def apply_component_states(
    components: LiveComponents,
    states: Mapping[str, ComponentState],
) -> List[str]:
    """
    Write resolved states onto component records and their mesh handles.

    This is the only place the configurator mutates scene objects. A mesh
    handle gets `visible` when it exposes that attribute, and its
    `material.color` is set to an RGB float tuple when the state carries a
    color and the material exposes `color`.

    Args:
        components: Live components, by name or as an iterable
        states: Resolved states keyed by component name

    Returns:
        Names of components whose visibility or color changed
    """
    by_name: Dict = as_component_map(components)
    changed: List[str] = []

    for name, state in states.items():
        component = by_name.get(name)
        if component is None:
            continue

        if component.visible != state.visible or component.color != state.color:
            changed.append(name)

        component.visible = state.visible
        component.color = state.color

        mesh = component.mesh
        if mesh is None:
            continue
        if hasattr(mesh, "visible"):
            mesh.visible = state.visible

        material = getattr(mesh, "material", None)
        if state.color is not None and material is not None and hasattr(material, "color"):
            material.color = to_rgb_float(state.color)

    if changed:
        logger.debug(f"Updated {len(changed)} component(s): {changed}")
    return changed
