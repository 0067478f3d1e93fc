# sitebuilder/builder/tree.py
"""
BuilderTree / BuilderNode: the persisted content model of a page.

The JSON document stored on pages and revisions is the wire format. Parsing
is lenient on purpose: trees are long-lived and written by editors that may
be older or newer than this code. Anything the parser cannot understand is
kept, either as extra envelope keys on a node or as an opaque node holding
the raw payload, so that `tree_to_dict(load_tree(data))` never drops data.
"""
from __future__ import annotations

import copy
import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Tuple

from .actions import ActionBinding, parse_binding

CURRENT_TREE_VERSION = 1

BREAKPOINTS = ("base", "mobile", "tablet", "desktop")

ROOT_TYPES = ("Root", "Section")

OPAQUE_TYPE = "__opaque__"

ENVELOPE_KEYS = ("id", "type", "props", "style", "actions", "children", "meta")

Path = Tuple[int, ...]


class TreeFormatError(ValueError):
    """The payload cannot be interpreted as a builder tree at all."""


@dataclass
class BuilderNode:
    id: str
    type: str
    props: Dict[str, Any] = field(default_factory=dict)
    style: Dict[str, Any] = field(default_factory=dict)
    actions: List[ActionBinding] = field(default_factory=list)
    children: List["BuilderNode"] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)
    issues: List[str] = field(default_factory=list)
    raw: Any = None
    opaque: bool = False

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass
class BuilderTree:
    root: Optional[BuilderNode] = None
    version: int = CURRENT_TREE_VERSION
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return self.root is None


# ------------------------
# Parsing
# ------------------------

def _opaque(raw: Any, path: Path, reason: str) -> BuilderNode:
    node_id = None
    if isinstance(raw, Mapping) and isinstance(raw.get("id"), str) and raw["id"]:
        node_id = raw["id"]
    return BuilderNode(
        id=node_id or "opaque:" + ".".join(str(i) for i in path),
        type=OPAQUE_TYPE,
        issues=[reason],
        raw=copy.deepcopy(raw),
        opaque=True,
    )


def _parse_shallow(data: Any, path: Path) -> Tuple[BuilderNode, List[Any]]:
    """Parse one node without its children; returns the node and its raw children."""
    if not isinstance(data, Mapping):
        return _opaque(data, path, "node is not an object"), []

    node_id = data.get("id")
    node_type = data.get("type")
    if not isinstance(node_id, str) or not node_id:
        return _opaque(data, path, "node has no id"), []
    if not isinstance(node_type, str) or not node_type:
        return _opaque(data, path, "node has no type"), []

    issues: List[str] = []

    props = data.get("props", {})
    if not isinstance(props, Mapping):
        issues.append("props is not an object")
        props = {}

    style = data.get("style", {})
    if not isinstance(style, Mapping):
        issues.append("style is not an object")
        style = {}
    clean_style: Dict[str, Any] = {}
    for breakpoint, layer in style.items():
        if breakpoint in BREAKPOINTS and not isinstance(layer, Mapping):
            issues.append(f"style.{breakpoint} is not an object")
            continue
        clean_style[breakpoint] = copy.deepcopy(layer)

    raw_actions = data.get("actions", [])
    if not isinstance(raw_actions, list):
        issues.append("actions is not a list")
        raw_actions = []
    actions = [parse_binding(a) for a in raw_actions]

    raw_children = data.get("children", [])
    if not isinstance(raw_children, list):
        issues.append("children is not a list")
        raw_children = []

    meta = data.get("meta", {})
    if not isinstance(meta, Mapping):
        issues.append("meta is not an object")
        meta = {}

    extra = {k: copy.deepcopy(v) for k, v in data.items() if k not in ENVELOPE_KEYS}

    node = BuilderNode(
        id=node_id,
        type=node_type,
        props=copy.deepcopy(dict(props)),
        style=clean_style,
        actions=actions,
        meta=copy.deepcopy(dict(meta)),
        extra=extra,
        issues=issues,
    )
    return node, raw_children


def node_from_dict(data: Any, path: Path = ()) -> BuilderNode:
    """
    Parse one node and its subtree. Never raises.

    Iterative like `walk`, so nesting depth is bounded by memory only.
    """
    node, raw_children = _parse_shallow(data, path)
    pending: List[Tuple[BuilderNode, List[Any], Path]] = [(node, raw_children, path)]
    while pending:
        parent, raw_children, parent_path = pending.pop()
        for index, raw_child in enumerate(raw_children):
            child_path = parent_path + (index,)
            child, grandchildren = _parse_shallow(raw_child, child_path)
            parent.children.append(child)
            if grandchildren:
                pending.append((child, grandchildren, child_path))
    return node


def load_tree(data: Any) -> BuilderTree:
    """
    Lenient loader used by the validator and the renderer.

    None, an empty dict or a tree without a root is an empty tree. A JSON
    string is decoded first. Legacy `builderVersion` is read as `version`.
    """
    if data is None:
        return BuilderTree()

    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError:
            return BuilderTree(extra={"__unparsed__": data if isinstance(data, str) else data.decode("utf-8", "replace")})

    if not isinstance(data, Mapping):
        return BuilderTree(extra={"__unparsed__": copy.deepcopy(data)})

    version = data.get("version", data.get("builderVersion", CURRENT_TREE_VERSION))
    if not isinstance(version, int) or isinstance(version, bool) or version < 1:
        version = CURRENT_TREE_VERSION

    raw_root = data.get("root")
    root = node_from_dict(raw_root) if raw_root is not None else None

    extra = {
        k: copy.deepcopy(v)
        for k, v in data.items()
        if k not in ("version", "builderVersion", "root")
    }
    return BuilderTree(root=root, version=version, extra=extra)


def parse_tree(data: Any) -> BuilderTree:
    """
    Strict loader used on editor writes: the payload must at least be an
    object with a root node that has an id and a type. Unknown component
    kinds are still accepted.
    """
    if isinstance(data, (str, bytes)):
        try:
            data = json.loads(data)
        except ValueError as exc:
            raise TreeFormatError("Builder tree is not valid JSON") from exc

    if not isinstance(data, Mapping):
        raise TreeFormatError("Builder tree must be an object")

    root = data.get("root")
    if root is None:
        raise TreeFormatError("Builder tree has no root node")

    tree = load_tree(data)
    if tree.root is None or tree.root.opaque:
        raise TreeFormatError("Root node must be an object with an id and a type")
    return tree


# ------------------------
# Serialization
# ------------------------

def _node_shallow(node: BuilderNode) -> Any:
    if node.opaque:
        return copy.deepcopy(node.raw)

    data: Dict[str, Any] = {
        "id": node.id,
        "type": node.type,
        "props": copy.deepcopy(node.props),
        "style": copy.deepcopy(node.style),
        "actions": [a.to_dict() for a in node.actions],
        "children": [],
    }
    if node.meta:
        data["meta"] = copy.deepcopy(node.meta)
    for key, value in node.extra.items():
        data[key] = copy.deepcopy(value)
    return data


def node_to_dict(node: BuilderNode) -> Any:
    data = _node_shallow(node)
    pending: List[Tuple[BuilderNode, Any]] = [(node, data)]
    while pending:
        current, out = pending.pop()
        if current.opaque:
            continue
        for child in current.children:
            child_data = _node_shallow(child)
            out["children"].append(child_data)
            pending.append((child, child_data))
    return data


def tree_to_dict(tree: Optional[BuilderTree]) -> Optional[Dict[str, Any]]:
    if tree is None:
        return None

    data: Dict[str, Any] = {"version": tree.version}
    for key, value in tree.extra.items():
        data[key] = copy.deepcopy(value)
    data["root"] = node_to_dict(tree.root) if tree.root is not None else None
    return data


# ------------------------
# Construction
# ------------------------

def generate_node_id() -> str:
    return f"node_{uuid.uuid4().hex[:12]}"


def create_node(
    node_type: str,
    props: Optional[Dict[str, Any]] = None,
    children: Optional[List[BuilderNode]] = None,
    *,
    node_id: Optional[str] = None,
    style: Optional[Dict[str, Any]] = None,
) -> BuilderNode:
    return BuilderNode(
        id=node_id or generate_node_id(),
        type=node_type,
        props=dict(props or {}),
        style=dict(style or {"base": {}}),
        children=list(children or []),
    )


def skeleton_tree() -> Dict[str, Any]:
    """The initial content of every new page: one empty root Section."""
    return tree_to_dict(BuilderTree(root=create_node("Section", node_id="root")))


# ------------------------
# Traversal
# ------------------------

def walk(node: Optional[BuilderNode]) -> Iterator[Tuple[BuilderNode, Path]]:
    """
    Depth-first, pre-order, children in document order.

    Iterative so deep trees cannot exhaust the interpreter stack. Opaque
    nodes are yielded like any other node; they simply have no children.
    """
    if node is None:
        return

    stack: List[Tuple[BuilderNode, Path]] = [(node, ())]
    while stack:
        current, path = stack.pop()
        yield current, path
        for index in range(len(current.children) - 1, -1, -1):
            stack.append((current.children[index], path + (index,)))


def visit(
    node: Optional[BuilderNode],
    callback: Callable[[BuilderNode, Path, Optional[BuilderNode]], Optional[bool]],
) -> None:
    """
    Visitor form of `walk`. `callback(node, path, parent)` may return False
    to skip the node's subtree.
    """
    if node is None:
        return

    stack: List[Tuple[BuilderNode, Path, Optional[BuilderNode]]] = [(node, (), None)]
    while stack:
        current, path, parent = stack.pop()
        if callback(current, path, parent) is False:
            continue
        for index in range(len(current.children) - 1, -1, -1):
            stack.append((current.children[index], path + (index,), current))


def iter_nodes(tree: Optional[BuilderTree]) -> Iterator[BuilderNode]:
    if tree is None:
        return iter(())
    return (node for node, _ in walk(tree.root))


def flatten(node: Optional[BuilderNode]) -> List[BuilderNode]:
    return [n for n, _ in walk(node)]


def count_nodes(node: Optional[BuilderNode]) -> int:
    return sum(1 for _ in walk(node))


def find_node(node: Optional[BuilderNode], node_id: str) -> Optional[BuilderNode]:
    for current, _ in walk(node):
        if current.id == node_id:
            return current
    return None


def find_parent(node: Optional[BuilderNode], node_id: str) -> Optional[BuilderNode]:
    for current, _ in walk(node):
        for child in current.children:
            if child.id == node_id:
                return current
    return None


def find_path(node: Optional[BuilderNode], node_id: str) -> Optional[List[str]]:
    """Ids of the ancestors of `node_id`, root first; None if absent."""
    if node is None:
        return None

    parents: Dict[str, Optional[BuilderNode]] = {}
    for current, _ in walk(node):
        for child in current.children:
            parents.setdefault(child.id, current)
        if current.id == node_id:
            chain: List[str] = []
            cursor = parents.get(current.id) if current is not node else None
            while cursor is not None:
                chain.append(cursor.id)
                cursor = parents.get(cursor.id) if cursor is not node else None
            return list(reversed(chain))
    return None


def duplicate_ids(node: Optional[BuilderNode]) -> List[str]:
    seen = set()
    duplicates: List[str] = []
    for current, _ in walk(node):
        if current.opaque:
            continue
        if current.id in seen and current.id not in duplicates:
            duplicates.append(current.id)
        seen.add(current.id)
    return duplicates


def property_path(path: Path, *parts: str) -> str:
    """`root.children[0].children[2].props.href` style locator."""
    segments = ["root"] + [f"children[{i}]" for i in path]
    return ".".join(segments + list(parts))


# ------------------------
# Styles
# ------------------------

def effective_style(node: BuilderNode, breakpoint: str = "base") -> Dict[str, Any]:
    """
    Layer the breakpoint's overrides on top of `base`.

    Breakpoints do not cascade into each other: `tablet` is base + tablet,
    never base + mobile + tablet. A missing layer means base only.
    """
    if breakpoint not in BREAKPOINTS:
        raise ValueError(f"Unknown breakpoint: {breakpoint}")

    base = node.style.get("base")
    resolved: Dict[str, Any] = dict(base) if isinstance(base, Mapping) else {}
    if breakpoint == "base":
        return resolved

    layer = node.style.get(breakpoint)
    if isinstance(layer, Mapping):
        resolved.update(layer)
    return resolved
