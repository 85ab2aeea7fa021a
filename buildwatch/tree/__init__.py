from buildwatch.tree.filtering import FilterOutcome, filter_builds_by_author, sort_builds
from buildwatch.tree.nodes import (
    BuildNode,
    PlaceholderNode,
    PlaceholderReason,
    ProjectNode,
    TreeNode,
    UnmappedProjectNode,
)
from buildwatch.tree.provider import BuildTreeProvider

__all__ = [
    "BuildNode",
    "BuildTreeProvider",
    "FilterOutcome",
    "PlaceholderNode",
    "PlaceholderReason",
    "ProjectNode",
    "TreeNode",
    "UnmappedProjectNode",
    "filter_builds_by_author",
    "sort_builds",
]
