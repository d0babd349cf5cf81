"""Exception hierarchy for clusterdiff.

Every fatal condition derives from ClusterDiffError so the CLI can turn it
into a one-line message and a non-zero exit.  Recoverable conditions
(missing registry node, duplicate cloud instance, unregistered component)
are not exceptions at all; they are handled where they are found.
"""

from __future__ import annotations


class ClusterDiffError(Exception):
    """Base class for all fatal clusterdiff errors."""


class ConfigError(ClusterDiffError):
    """Raised when configuration values are missing or malformed."""


class TopologyError(ClusterDiffError):
    """Raised when the desired topology file cannot be loaded or is invalid."""


class SelectorError(ClusterDiffError):
    """Raised when a CLUSTER[-FACET[-INDEXES]] selector cannot be parsed."""


class AmbiguousNameError(ClusterDiffError):
    """Raised when a registry node carries no usable cluster/facet/index.

    The node has no correlation block, no flat cluster fields, and its name
    does not split into exactly three ``-``-delimited parts.
    """

    def __init__(self, node_name: str) -> None:
        super().__init__(
            f"Cannot resolve cluster/facet/index for registry node {node_name!r}: "
            "no correlation fields and name is not CLUSTER-FACET-INDEX"
        )
        self.node_name = node_name


class RoleNotFoundError(ClusterDiffError):
    """Raised when a cluster or facet role record is absent from the registry."""

    def __init__(self, role_name: str) -> None:
        super().__init__(f"Role {role_name!r} not found in the registry")
        self.role_name = role_name


class ResourceQueryError(ClusterDiffError):
    """Raised when an external source fails after all retries."""

    def __init__(self, source: str, cause: Exception | str) -> None:
        super().__init__(f"Resource query against {source} failed: {cause}")
        self.source = source
        self.cause = cause
