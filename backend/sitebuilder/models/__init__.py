from .workspace import Workspace
from .site import Site
from .custom_domain import CustomDomain
from .page import Page
from .page_revision import PageRevision
from .resource import Resource

__all__ = ["Workspace", "Site", "CustomDomain", "Page", "PageRevision", "Resource"]
