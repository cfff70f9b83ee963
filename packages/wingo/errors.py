"""
Fatal construction errors.

Expected gameplay refusals (locked item, not enough coins, closed shop, ...)
never raise; they append an entry to the run log and leave state unchanged.
Only broken content or an impossible run configuration raises.
"""


class ContentError(ValueError):
    """A content table is malformed. Raised at load time, never mid-run."""


class RunConfigError(ValueError):
    """Unknown biome or difficulty id at run creation or snapshot load."""
