"""
Resources — the closed set of things accord can manage.

``RESOURCE_TYPES`` maps each kind to its model class; the manifest loader
uses it to validate sections and the engine never needs to know the
concrete classes.
"""

from accord.core.models.resource import ResourceKind
from accord.core.resources.base import ExecutionContext, Resource
from accord.core.resources.directory import Directory
from accord.core.resources.file import File
from accord.core.resources.group import Group
from accord.core.resources.package import Package, version_matches
from accord.core.resources.paths import PathResource, parse_mode
from accord.core.resources.service import Service
from accord.core.resources.user import User

RESOURCE_TYPES: dict[ResourceKind, type[Resource]] = {
    ResourceKind.PACKAGE: Package,
    ResourceKind.GROUP: Group,
    ResourceKind.USER: User,
    ResourceKind.DIRECTORY: Directory,
    ResourceKind.FILE: File,
    ResourceKind.SERVICE: Service,
}

__all__ = [
    "RESOURCE_TYPES",
    "Directory",
    "ExecutionContext",
    "File",
    "Group",
    "Package",
    "PathResource",
    "Resource",
    "Service",
    "User",
    "parse_mode",
    "version_matches",
]
