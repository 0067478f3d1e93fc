# sitebuilder/builder/validator.py
"""
ReferenceValidator

Walks a builder tree, collects every reference it embeds to something that
lives outside the tree (other pages, assets, products, collections,
symbols, templates) and checks each one against a ReferenceCatalog.

The validator itself is pure. Where the answers come from (the database,
a fixture dict) is the catalog's business.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .components import ComponentRegistry, component_registry
from .tree import (
    BREAKPOINTS,
    ROOT_TYPES,
    BuilderNode,
    BuilderTree,
    duplicate_ids,
    load_tree,
    property_path,
    walk,
)

PAGE_LINK = "page_link"
ASSET = "asset"
PRODUCT = "product"
COLLECTION = "collection"
SYMBOL = "symbol"
TEMPLATE = "template"

REFERENCE_KINDS = (PAGE_LINK, ASSET, PRODUCT, COLLECTION, SYMBOL, TEMPLATE)

# Page link destination states reported by a catalog.
PAGE_PUBLISHED = "published"
PAGE_UNPUBLISHED = "unpublished"

ASSET_SCHEME = "asset://"

RECORD_ACTIONS = {"submitForm", "createRecord", "updateRecord", "deleteRecord"}

MEDIA_TYPES = {"Image", "Video"}


@dataclass(frozen=True)
class Reference:
    kind: str
    target: str
    node_id: str
    node_type: str
    property_path: str


@dataclass
class ReferenceUsage:
    property_path: str
    node_id: str
    reference_kind: str
    node_type: Optional[str] = None
    target: Optional[str] = None
    page_id: Optional[str] = None

    @classmethod
    def from_reference(cls, ref: Reference, page_id: Optional[str] = None) -> "ReferenceUsage":
        return cls(
            property_path=ref.property_path,
            node_id=ref.node_id,
            reference_kind=ref.kind,
            node_type=ref.node_type,
            target=ref.target,
            page_id=page_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "propertyPath": self.property_path,
            "nodeId": self.node_id,
            "referenceKind": self.reference_kind,
            "nodeType": self.node_type,
            "target": self.target,
        }
        if self.page_id is not None:
            data["pageId"] = self.page_id
        return data


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    usages: List[ReferenceUsage] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.errors

    @property
    def broken_links(self) -> List[str]:
        return [u.property_path for u in self.usages]

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        self.usages.extend(other.usages)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "valid": self.valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "usages": [u.to_dict() for u in self.usages],
        }


class ReferenceCatalog:
    """
    Answers existence questions for one tenant. Implementations must only
    ever look inside the tenant they were built for.
    """

    def page_status(self, path: str) -> Optional[str]:
        """PAGE_PUBLISHED, PAGE_UNPUBLISHED or None when no page has that path."""
        raise NotImplementedError

    def resource_exists(self, kind: str, key: str) -> bool:
        raise NotImplementedError


class StaticReferenceCatalog(ReferenceCatalog):
    """In-memory catalog; handy for audits over exported data."""

    def __init__(self, pages: Optional[Mapping[str, str]] = None, resources: Optional[Mapping[str, Iterable[str]]] = None):
        self.pages = dict(pages or {})
        self.resources = {kind: set(keys) for kind, keys in (resources or {}).items()}

    def page_status(self, path: str) -> Optional[str]:
        return self.pages.get(path)

    def resource_exists(self, kind: str, key: str) -> bool:
        return key in self.resources.get(kind, ())


# ------------------------
# Collection
# ------------------------

def normalize_link(href: str) -> str:
    path = href.split("?", 1)[0].split("#", 1)[0]
    if len(path) > 1:
        path = path.rstrip("/")
    return path or "/"


def is_internal_link(value: Any) -> bool:
    return isinstance(value, str) and value.startswith("/") and not value.startswith("//")


def asset_key(value: Any) -> Optional[str]:
    """
    Stored assets are referenced as `asset://<id>` or by their site-relative
    URL. Absolute external URLs are not assets we own and are not checked.
    """
    if not isinstance(value, str) or not value:
        return None
    if value.startswith(ASSET_SCHEME):
        return value[len(ASSET_SCHEME):] or None
    if is_internal_link(value):
        return value
    return None


def _string(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def _node_references(node: BuilderNode, path) -> List[Reference]:
    refs: List[Reference] = []

    def add(kind: str, target: Optional[str], *parts: str) -> None:
        if target:
            refs.append(Reference(kind, target, node.id, node.type, property_path(path, *parts)))

    props = node.props

    if is_internal_link(props.get("href")):
        add(PAGE_LINK, props["href"], "props", "href")

    if node.type in MEDIA_TYPES:
        add(ASSET, asset_key(props.get("src")), "props", "src")
        add(ASSET, asset_key(props.get("poster")), "props", "poster")

    if node.type == "Gallery" and isinstance(props.get("images"), list):
        for index, image in enumerate(props["images"]):
            src = image.get("src") if isinstance(image, Mapping) else image
            add(ASSET, asset_key(src), "props", f"images[{index}]")

    add(ASSET, _string(props.get("assetId")), "props", "assetId")

    for breakpoint in BREAKPOINTS:
        layer = node.style.get(breakpoint)
        if isinstance(layer, Mapping):
            add(ASSET, asset_key(layer.get("backgroundImage")), "style", breakpoint, "backgroundImage")

    add(PRODUCT, _string(props.get("productId")), "props", "productId")
    if isinstance(props.get("productIds"), list):
        for index, product_id in enumerate(props["productIds"]):
            add(PRODUCT, _string(product_id), "props", f"productIds[{index}]")

    add(COLLECTION, _string(props.get("collectionId")), "props", "collectionId")
    add(TEMPLATE, _string(props.get("templateId")), "props", "templateId")
    add(SYMBOL, _string(node.meta.get("symbolId")), "meta", "symbolId")
    if node.type == "SymbolInstance":
        add(SYMBOL, _string(props.get("symbolId")), "props", "symbolId")

    for index, binding in enumerate(node.actions):
        params = binding.params
        where = f"actions[{index}]"
        if binding.name == "navigate":
            for key in ("url", "to"):
                if is_internal_link(params.get(key)):
                    add(PAGE_LINK, params[key], where, "params", key)
        elif binding.name == "navigatePage":
            slug = _string(params.get("pageSlug"))
            if slug is not None:
                add(PAGE_LINK, slug if slug.startswith("/") else "/" + slug, where, "params", "pageSlug")
        elif binding.name == "addToCart":
            add(PRODUCT, _string(params.get("productId")), where, "params", "productId")
        elif binding.name in RECORD_ACTIONS:
            add(COLLECTION, _string(params.get("collection")), where, "params", "collection")
            add(COLLECTION, _string(params.get("collectionId")), where, "params", "collectionId")

    return refs


def collect_references(tree: Any) -> List[Reference]:
    """Every outbound reference in document order. Accepts raw JSON or a BuilderTree."""
    if not isinstance(tree, BuilderTree):
        tree = load_tree(tree)

    refs: List[Reference] = []
    for node, path in walk(tree.root):
        if node.opaque:
            continue
        refs.extend(_node_references(node, path))
    return refs


def find_references_to(tree: Any, kind: str, key: str) -> List[Reference]:
    """References in `tree` that point at one specific entity."""
    if kind == PAGE_LINK:
        wanted = normalize_link(key)
        return [r for r in collect_references(tree) if r.kind == kind and normalize_link(r.target) == wanted]
    return [r for r in collect_references(tree) if r.kind == kind and r.target == key]


# ------------------------
# Validation
# ------------------------

class ReferenceValidator:
    def __init__(self, catalog: ReferenceCatalog, registry: Optional[ComponentRegistry] = None):
        self.catalog = catalog
        self.registry = registry or component_registry

    def validate(self, tree: Any, *, page_id: Optional[str] = None) -> ValidationResult:
        if not isinstance(tree, BuilderTree):
            tree = load_tree(tree)

        result = ValidationResult()
        if tree.root is None:
            return result

        self._check_structure(tree, result)
        self._check_references(tree, result, page_id)
        return result

    def _check_references(self, tree: BuilderTree, result: ValidationResult, page_id: Optional[str]) -> None:
        for ref in collect_references(tree):
            if ref.kind == PAGE_LINK:
                link = normalize_link(ref.target)
                if link == "/":
                    continue
                status = self.catalog.page_status(link)
                if status is None:
                    result.errors.append(f"Broken link {ref.target} on node {ref.node_id}")
                    result.usages.append(ReferenceUsage.from_reference(ref, page_id))
                elif status == PAGE_UNPUBLISHED:
                    result.warnings.append(f"Link {ref.target} on node {ref.node_id} points to an unpublished page")
                continue

            if not self.catalog.resource_exists(ref.kind, ref.target):
                result.errors.append(f"Missing {ref.kind} {ref.target} referenced by node {ref.node_id}")
                result.usages.append(ReferenceUsage.from_reference(ref, page_id))

    def _check_structure(self, tree: BuilderTree, result: ValidationResult) -> None:
        root = tree.root

        for node_id in duplicate_ids(root):
            result.errors.append(f"Duplicate node id {node_id}")

        if not root.opaque and root.type not in ROOT_TYPES:
            result.warnings.append(f"Root node has type {root.type}, expected one of {', '.join(ROOT_TYPES)}")

        for node, path in walk(root):
            where = property_path(path)
            if node.opaque:
                result.warnings.append(f"Malformed node at {where}: {'; '.join(node.issues)}")
                continue

            for issue in node.issues:
                result.warnings.append(f"Node {node.id}: {issue}")

            if not self.registry.has(node.type):
                result.warnings.append(f"Unknown component type {node.type} on node {node.id}")
                continue

            for problem in self.registry.props_errors(node.type, node.props):
                result.warnings.append(f"Node {node.id}: {problem}")

            if node.children and not self.registry.can_have_children(node.type):
                result.warnings.append(f"Node {node.id} of type {node.type} cannot have children")

            for index, binding in enumerate(node.actions):
                if not binding.is_valid:
                    result.warnings.append(f"Node {node.id}: action {index} has no event or effect")
