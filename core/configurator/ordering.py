"""Ordering of the flat option list.

The option list is flat; group membership is a `group_id` label. Its
array order is both the display order within each level and the scene
conflict priority, so every operation here returns a new list and
leaves the input untouched.
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from .types import Option


@dataclass
class OptionPosition:
    """An option's place in the visual (grouped) order."""

    option: Option
    visual_index: int
    is_in_group: bool = False
    group_id: Optional[str] = None
    index_in_group: Optional[int] = None


def child_options(group_id: str, options: Sequence[Option]) -> List[Option]:
    """Options labelled with group_id, in array order."""
    return [o for o in options if o.group_id == group_id]


def options_in_visual_order(options: Sequence[Option]) -> List[OptionPosition]:
    """
    List options as displayed: each root entry followed by its group's children.

    Root entries keep their array order; children keep array order within
    their group. Children whose group is missing are appended at the end.
    """
    result: List[OptionPosition] = []
    placed = set()

    for root in (o for o in options if o.group_id is None):
        result.append(OptionPosition(option=root, visual_index=len(result)))
        placed.add(root.id)

        if root.is_group:
            for index_in_group, child in enumerate(child_options(root.id, options)):
                result.append(
                    OptionPosition(
                        option=child,
                        visual_index=len(result),
                        is_in_group=True,
                        group_id=root.id,
                        index_in_group=index_in_group,
                    )
                )
                placed.add(child.id)

    for option in options:
        if option.id not in placed:
            result.append(OptionPosition(option=option, visual_index=len(result)))

    return result


def _flatten(positions: Sequence[OptionPosition], original: Sequence[Option]) -> List[Option]:
    result: List[Option] = []
    seen = set()

    for position in positions:
        option = position.option
        if option.id in seen:
            continue
        result.append(option)
        seen.add(option.id)

        if option.is_group and not position.is_in_group:
            for child in positions:
                if child.is_in_group and child.group_id == option.id and child.option.id not in seen:
                    result.append(child.option)
                    seen.add(child.option.id)

    result.extend(o for o in original if o.id not in seen)
    return result


def reorder_options(
    options: Sequence[Option], drag_index: int, hover_index: int
) -> List[Option]:
    """
    Move the option at visual drag_index to visual hover_index.

    Dropping onto a grouped option moves the dragged option into that group;
    dropping onto a root option moves it to the root level.
    """
    visual = options_in_visual_order(options)
    if not (0 <= drag_index < len(visual) and 0 <= hover_index < len(visual)):
        return list(options)

    dragged = visual[drag_index]
    hover = visual[hover_index]

    new_order = list(visual)
    del new_order[drag_index]
    new_order.insert(hover_index, dragged)

    if not dragged.option.is_group:
        if hover.is_in_group and hover.group_id:
            dragged.option = replace(dragged.option, group_id=hover.group_id)
            dragged.is_in_group = True
            dragged.group_id = hover.group_id
        elif not hover.is_in_group:
            dragged.option = replace(dragged.option, group_id=None)
            dragged.is_in_group = False
            dragged.group_id = None

    return _flatten(new_order, options)


def reorder_within_group(
    options: Sequence[Option], group_id: str, drag_index: int, hover_index: int
) -> List[Option]:
    """Reorder a group's children; the block stays where its first child was."""
    children = child_options(group_id, options)
    if not (0 <= drag_index < len(children) and 0 <= hover_index < len(children)):
        return list(options)

    reordered = list(children)
    moved = reordered.pop(drag_index)
    reordered.insert(hover_index, moved)

    result: List[Option] = []
    inserted = False
    for option in options:
        if option.group_id == group_id:
            if not inserted:
                result.extend(reordered)
                inserted = True
        else:
            result.append(option)
    return result


def move_option_to_group(
    options: Sequence[Option], option_id: str, group_id: Optional[str]
) -> List[Option]:
    """Relabel an option's group. None moves it to the root level."""
    return [
        replace(o, group_id=group_id or None) if o.id == option_id else o
        for o in options
    ]


def is_valid_drop(dragged: OptionPosition, target: OptionPosition, operation: str) -> bool:
    """Check whether a drag-and-drop operation is allowed."""
    if operation == "reorder":
        return True
    if operation == "group":
        return not dragged.option.is_group and target.option.is_group
    if operation == "ungroup":
        return dragged.is_in_group
    return False
