# sitebuilder/domain/invariants/tree.py
from typing import Any

from sitebuilder.builder.tree import TreeFormatError, duplicate_ids, parse_tree, tree_to_dict
from sitebuilder.domain.exceptions import InvariantViolation


def assert_tree(data: Any) -> dict:
    """
    Guards editor writes. Returns the tree in its canonical JSON shape.

    Only the envelope is enforced here. Unknown component kinds and odd
    props are the validator's warnings, not write errors.
    """
    try:
        tree = parse_tree(data)
    except TreeFormatError as exc:
        raise InvariantViolation(str(exc)) from exc

    duplicates = duplicate_ids(tree.root)
    if duplicates:
        raise InvariantViolation(f"Duplicate node ids: {', '.join(duplicates)}")

    return tree_to_dict(tree)
