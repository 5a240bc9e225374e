"""Configurator routes: storage, preview resolution and import/export."""

import json
import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, field_validator

from core.configurator import (
    ConfiguratorData,
    ConfiguratorEngine,
    ConfiguratorImportError,
    ConfiguratorStore,
    DiagnosticsCollector,
    EngineConfig,
    ModelComponent,
    available_values,
    export_configurations,
    import_configurations,
    reorder_options,
)

logger = logging.getLogger(__name__)

router = APIRouter()

config = EngineConfig.from_env()

# Configurator storage, loaded from disk at startup and saved on every change
store = ConfiguratorStore(config.data_dir, version=config.storage_version)


class ConfiguratorCreate(BaseModel):
    """Configurator creation or update request."""

    name: str
    description: str = ""
    model: str = ""
    options: List[dict] = []

    @field_validator("name")
    @classmethod
    def name_must_not_be_empty(cls, v: str) -> str:
        """Validate that name is not empty or whitespace-only."""
        if not v or not v.strip():
            raise ValueError("Configurator name cannot be empty or whitespace-only")
        return v.strip()[:255]


class ComponentInput(BaseModel):
    """A live model component reported by the viewer."""

    name: str
    visible: bool = True
    color: Optional[str] = None


class ResolveRequest(BaseModel):
    """Selections and live components to resolve against."""

    selections: Dict[str, str] = {}
    components: List[ComponentInput] = []


class SelectionsRequest(BaseModel):
    """Current selections."""

    selections: Dict[str, str] = {}


class ReorderRequest(BaseModel):
    """Drag-and-drop move in the visual option order."""

    drag_index: int
    hover_index: int


def _get_or_404(configurator_id: str) -> ConfiguratorData:
    configurator = store.get(configurator_id)
    if configurator is None:
        raise HTTPException(status_code=404, detail="Configurator not found")
    return configurator


def _build(request: ConfiguratorCreate, configurator_id: Optional[str] = None) -> ConfiguratorData:
    data = request.model_dump()
    if configurator_id is not None:
        data["id"] = configurator_id
    try:
        return ConfiguratorData.from_dict(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid options: {e}")


@router.get("/export")
async def export_all():
    """Export every configurator in the storage envelope format."""
    content = export_configurations(store.all(), store.active_id or "", config.storage_version)
    return json.loads(content)


@router.post("/import")
async def import_all(payload: dict):
    """Replace all configurators with an exported envelope."""
    try:
        configurators, active_id = import_configurations(json.dumps(payload))
    except ConfiguratorImportError as e:
        raise HTTPException(status_code=400, detail=str(e))

    store.clear()
    for configurator in configurators:
        store.put(configurator)
    store.active_id = active_id
    store.save()

    return {"imported": len(configurators), "active_configurator_id": active_id}


@router.post("/")
async def create_configurator(request: ConfiguratorCreate):
    """Create a new configurator."""
    configurator = _build(request)
    store.put(configurator)
    store.save()
    logger.info(f"Created configurator: {configurator.id}")
    return configurator.to_dict()


@router.get("/")
async def list_configurators():
    """List all configurators."""
    return [c.to_dict() for c in store.all()]


@router.get("/{configurator_id}")
async def get_configurator(configurator_id: str):
    """Get configurator details."""
    return _get_or_404(configurator_id).to_dict()


@router.put("/{configurator_id}")
async def update_configurator(configurator_id: str, request: ConfiguratorCreate):
    """Replace a configurator's definition."""
    _get_or_404(configurator_id)
    configurator = _build(request, configurator_id)
    store.put(configurator)
    store.save()
    logger.info(f"Updated configurator: {configurator_id}")
    return configurator.to_dict()


@router.delete("/{configurator_id}")
async def delete_configurator(configurator_id: str):
    """Delete a configurator."""
    if not store.remove(configurator_id):
        raise HTTPException(status_code=404, detail="Configurator not found")
    store.save()
    logger.info(f"Deleted configurator: {configurator_id}")
    return {"status": "deleted", "id": configurator_id}


@router.post("/{configurator_id}/resolve")
async def resolve_configuration(configurator_id: str, request: ResolveRequest):
    """Resolve visible options and component states for a selection snapshot."""
    configurator = _get_or_404(configurator_id)

    components = [
        ModelComponent(
            name=c.name,
            visible=c.visible,
            color=c.color,
            original_visible=c.visible,
            original_color=c.color,
        )
        for c in request.components
    ]

    collector = DiagnosticsCollector()
    engine = ConfiguratorEngine(config, diagnostics=collector)
    result = engine.resolve_with_defaults(configurator.options, request.selections, components)

    data = result.to_dict()
    data["diagnostics"] = [d.to_dict() for d in collector.diagnostics]
    return data


@router.post("/{configurator_id}/options/{option_id}/values")
async def get_available_values(
    configurator_id: str, option_id: str, request: SelectionsRequest
):
    """List an option's currently selectable values."""
    configurator = _get_or_404(configurator_id)
    if configurator.get_option(option_id) is None:
        raise HTTPException(status_code=404, detail="Option not found")

    return {
        "option_id": option_id,
        "values": available_values(option_id, configurator.options, request.selections),
    }


@router.post("/{configurator_id}/reorder")
async def reorder(configurator_id: str, request: ReorderRequest):
    """Move an option in the visual order and return the new flat order."""
    configurator = _get_or_404(configurator_id)
    configurator.options = reorder_options(
        configurator.options, request.drag_index, request.hover_index
    )
    store.save()
    return {"options": [o.to_dict() for o in configurator.options]}
