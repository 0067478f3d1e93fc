# sitebuilder/builder/components.py
"""
Component registry.

Each known component kind declares its category, whether it accepts
children, and a pydantic schema for its props. The registry is advisory:
trees may contain kinds that are not registered (newer editors, removed
plugins) and those are never rejected, only reported.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Literal, Optional, Sequence, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .tree import BuilderNode, create_node

logger = logging.getLogger(__name__)

Gap = Literal["none", "xs", "sm", "md", "lg", "xl", "2xl", "3xl"]


class UnknownComponent(KeyError):
    pass


class Props(BaseModel):
    # Keys the schema does not know are kept; editors add props over time.
    model_config = ConfigDict(extra="allow")

    className: Optional[str] = None
    assetId: Optional[str] = None
    templateId: Optional[str] = None


# ------------------------
# Layout
# ------------------------

class RootProps(Props):
    pass


class SectionProps(Props):
    fullWidth: bool = True
    minHeight: Literal["auto", "screen", "half", "third"] = "auto"
    verticalAlign: Literal["start", "center", "end"] = "start"
    backgroundImage: Optional[str] = None


class ContainerProps(Props):
    maxWidth: Literal["xs", "sm", "md", "lg", "xl", "2xl", "3xl", "4xl", "5xl", "6xl", "7xl", "full"] = "7xl"
    centered: bool = True


class StackProps(Props):
    direction: Literal["row", "column", "row-reverse", "column-reverse"] = "column"
    gap: Gap = "md"
    align: Literal["start", "center", "end", "stretch", "baseline"] = "stretch"
    justify: Literal["start", "center", "end", "between", "around", "evenly"] = "start"
    wrap: bool = False


class GridProps(Props):
    columns: int = Field(default=3, ge=1, le=12)
    columnsMobile: int = Field(default=1, ge=1, le=12)
    columnsTablet: int = Field(default=2, ge=1, le=12)
    gap: Gap = "md"


class DividerProps(Props):
    orientation: Literal["horizontal", "vertical"] = "horizontal"


class SpacerProps(Props):
    size: Literal["xs", "sm", "md", "lg", "xl", "2xl", "3xl"] = "md"


# ------------------------
# Content / media
# ------------------------

class TextProps(Props):
    text: str = ""


class HeadingProps(Props):
    level: int = Field(default=2, ge=1, le=6)
    text: str = ""


class ImageProps(Props):
    src: str = ""
    alt: str = ""
    objectFit: Literal["cover", "contain", "fill", "none", "scale-down"] = "cover"
    width: Optional[str] = None
    height: Optional[str] = None


class VideoProps(Props):
    src: str = ""
    poster: Optional[str] = None
    autoplay: bool = False
    controls: bool = True


class GalleryImage(BaseModel):
    model_config = ConfigDict(extra="allow")

    src: str
    alt: str = ""


class GalleryProps(Props):
    images: List[GalleryImage] = Field(default_factory=list)
    columns: int = Field(default=3, ge=1, le=6)


# ------------------------
# UI
# ------------------------

class ButtonProps(Props):
    text: str = "Button"
    variant: Literal["primary", "secondary", "outline", "ghost", "destructive"] = "primary"
    size: Literal["sm", "md", "lg"] = "md"
    disabled: bool = False
    href: Optional[str] = None


class LinkProps(Props):
    text: str = "Link"
    href: str = "/"
    target: Literal["_self", "_blank"] = "_self"


class CardProps(Props):
    title: str = ""
    description: str = ""
    image: Optional[str] = None


class BadgeProps(Props):
    text: str = "Badge"
    variant: Literal["default", "secondary", "destructive", "outline"] = "default"


class AlertProps(Props):
    title: str = ""
    description: str = ""
    variant: Literal["default", "destructive", "success", "warning", "info"] = "default"


# ------------------------
# Forms
# ------------------------

class FormProps(Props):
    collectionId: Optional[str] = None
    collection: Optional[str] = None
    successMessage: Optional[str] = None
    redirectTo: Optional[str] = None


class InputProps(Props):
    name: str = "field"
    label: str = ""
    type: Literal["text", "email", "password", "number", "tel", "url", "date"] = "text"
    placeholder: str = ""
    required: bool = False


class TextareaProps(Props):
    name: str = "field"
    label: str = ""
    placeholder: str = ""
    rows: int = Field(default=4, ge=2, le=20)
    required: bool = False


class SubmitButtonProps(Props):
    text: str = "Submit"


# ------------------------
# Gates / data / commerce
# ------------------------

class AuthGateProps(Props):
    mode: Literal["authenticated", "anonymous"] = "authenticated"


class CollectionListProps(Props):
    collectionId: Optional[str] = None
    limit: int = Field(default=10, ge=1, le=100)
    emptyText: str = ""


class RecordFieldTextProps(Props):
    field: str = ""
    fallback: str = ""


class ProductCardProps(Props):
    productId: Optional[str] = None
    showPrice: bool = True


class ProductGridProps(Props):
    productIds: List[str] = Field(default_factory=list)
    columns: int = Field(default=3, ge=1, le=6)


class SymbolInstanceProps(Props):
    symbolId: Optional[str] = None


# ------------------------
# Registry
# ------------------------

@dataclass
class ComponentDefinition:
    type: str
    category: str
    props_model: Type[Props]
    can_have_children: bool = False
    allowed_children: Optional[Sequence[str]] = None
    allowed_parents: Optional[Sequence[str]] = None
    hidden: bool = False

    def default_props(self) -> Dict[str, Any]:
        return self.props_model().model_dump(exclude_none=True)


class ComponentRegistry:
    def __init__(self):
        self._components: Dict[str, ComponentDefinition] = {}

    def register(self, definition: ComponentDefinition) -> None:
        if definition.type in self._components:
            logger.warning("Component %s is already registered, overwriting", definition.type)
        self._components[definition.type] = definition

    def unregister(self, component_type: str) -> bool:
        return self._components.pop(component_type, None) is not None

    def get(self, component_type: str) -> Optional[ComponentDefinition]:
        return self._components.get(component_type)

    def has(self, component_type: str) -> bool:
        return component_type in self._components

    def all(self) -> List[ComponentDefinition]:
        return list(self._components.values())

    def by_category(self, category: str) -> List[ComponentDefinition]:
        return [c for c in self._components.values() if c.category == category and not c.hidden]

    def validate_props(self, component_type: str, props: Dict[str, Any]) -> Dict[str, Any]:
        """
        Parse props against the kind's schema and return them with defaults
        filled in. Raises UnknownComponent or pydantic's ValidationError.
        """
        definition = self.get(component_type)
        if definition is None:
            raise UnknownComponent(component_type)
        return definition.props_model.model_validate(props).model_dump(exclude_none=True)

    def props_errors(self, component_type: str, props: Dict[str, Any]) -> List[str]:
        """Human readable prop problems; empty for valid or unknown kinds."""
        definition = self.get(component_type)
        if definition is None:
            return []
        try:
            definition.props_model.model_validate(props)
        except ValidationError as exc:
            return [
                f"props.{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in exc.errors()
            ]
        return []

    def can_have_children(self, component_type: str) -> bool:
        # Unknown kinds may hold anything; the data is not ours to judge.
        definition = self.get(component_type)
        return True if definition is None else definition.can_have_children

    def can_add_child(self, parent_type: str, child_type: str) -> bool:
        parent = self.get(parent_type)
        child = self.get(child_type)
        if parent is None or child is None:
            return False
        if not parent.can_have_children:
            return False
        if parent.allowed_children is not None and child_type not in parent.allowed_children:
            return False
        if child.allowed_parents is not None and parent_type not in child.allowed_parents:
            return False
        return True

    def create_node(self, component_type: str, props: Optional[Dict[str, Any]] = None, **kwargs) -> BuilderNode:
        definition = self.get(component_type)
        if definition is None:
            raise UnknownComponent(component_type)

        merged = definition.default_props()
        merged.update(props or {})
        return create_node(component_type, merged, **kwargs)


def _builtin_definitions() -> List[ComponentDefinition]:
    return [
        ComponentDefinition("Root", "layout", RootProps, can_have_children=True, hidden=True),
        ComponentDefinition("Section", "layout", SectionProps, can_have_children=True),
        ComponentDefinition("Container", "layout", ContainerProps, can_have_children=True),
        ComponentDefinition("Stack", "layout", StackProps, can_have_children=True),
        ComponentDefinition("Grid", "layout", GridProps, can_have_children=True),
        ComponentDefinition("Divider", "layout", DividerProps),
        ComponentDefinition("Spacer", "layout", SpacerProps),
        ComponentDefinition("Text", "content", TextProps),
        ComponentDefinition("Heading", "content", HeadingProps),
        ComponentDefinition("Image", "media", ImageProps),
        ComponentDefinition("Video", "media", VideoProps),
        ComponentDefinition("Gallery", "media", GalleryProps),
        ComponentDefinition("Button", "ui", ButtonProps),
        ComponentDefinition("Link", "navigation", LinkProps),
        ComponentDefinition("Card", "ui", CardProps, can_have_children=True),
        ComponentDefinition("Badge", "ui", BadgeProps),
        ComponentDefinition("Alert", "ui", AlertProps),
        ComponentDefinition("Form", "forms", FormProps, can_have_children=True),
        ComponentDefinition("Input", "forms", InputProps),
        ComponentDefinition("Textarea", "forms", TextareaProps),
        ComponentDefinition("SubmitButton", "forms", SubmitButtonProps),
        ComponentDefinition("AuthGate", "gates", AuthGateProps, can_have_children=True),
        ComponentDefinition("CollectionList", "data", CollectionListProps, can_have_children=True),
        ComponentDefinition("RecordFieldText", "data", RecordFieldTextProps),
        ComponentDefinition("ProductCard", "commerce", ProductCardProps),
        ComponentDefinition("ProductGrid", "commerce", ProductGridProps),
        ComponentDefinition("SymbolInstance", "advanced", SymbolInstanceProps, hidden=True),
    ]


def build_registry() -> ComponentRegistry:
    registry = ComponentRegistry()
    for definition in _builtin_definitions():
        registry.register(definition)
    return registry


component_registry = build_registry()
