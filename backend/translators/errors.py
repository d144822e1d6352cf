"""
Errors raised while turning a process model into a process tree.

Every error is fatal for the conversion it occurs in: no partial tree is
returned and the caller decides how to present the failure.
"""

from typing import Optional


class ProcessTreeError(Exception):
    """Raised when a process model cannot be converted to a process tree"""
    pass


class MalformedGraphError(ProcessTreeError):
    """Raised when the start of a process or a sequence flow cannot be resolved"""
    pass


class InconsistentJoinError(ProcessTreeError):
    """Raised when the branches of a split do not come together at a single join"""
    pass


class MissingOperationBindingError(ProcessTreeError):
    """Raised when an element that needs an operation has none configured"""

    def __init__(self, element_id: str, message: Optional[str] = None):
        self.element_id = element_id
        super().__init__(message or f"Element '{element_id}' is not configured with an operation")


class GraphReadError(ProcessTreeError):
    """Raised when a serialized model cannot be read into a ProcessGraph"""
    pass
