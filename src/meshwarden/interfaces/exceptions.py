"""Exceptions for interface implementations."""

from meshwarden.core.exceptions import CollaboratorError


class InterfaceError(CollaboratorError):
    """Base exception for all interface-related errors."""


class StatusGathererError(InterfaceError):
    """Exception for live version gathering."""


class ChartValueSourceError(InterfaceError):
    """Exception for chart value lookups."""


class NamespaceStoreError(InterfaceError):
    """Exception for namespace store operations."""


class ResourceCleanerError(InterfaceError):
    """Exception for related resource removal."""
