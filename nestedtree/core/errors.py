"""
Error types raised by the nested-set tree manager
"""


class TreeError(Exception):
    """Base class for all nested-set tree errors"""


class InvalidOperationError(TreeError):
    """The requested operation cannot be applied to the given nodes"""


class DetachedReferenceError(InvalidOperationError):
    """
    A parent, sibling, source or target node is not known to the store yet.

    Raised before any interval is touched, so the tree is left unchanged.
    """

    def __init__(self, role: str):
        self.role = role
        super().__init__(f"{role} node has not been added yet.")


class IllegalRelocationError(InvalidOperationError):
    """A subtree was asked to move underneath itself or one of its descendants"""


class MalformedShiftRequestError(TreeError, ValueError):
    """A shift was requested with neither a lower nor an upper bound"""


class TreeIntegrityError(TreeError):
    """The interval numbering of a node set violates the nested-set invariants"""
