"""
Breaking-change detection between contract versions.

Public API::

    from treatycore.comparison import (
        Change,
        ContractDiff,
        ContractBreakingChangeError,
        ContractComparator,
        compare,
        compare_schemas,
    )
"""

from treatycore.comparison.changes import (
    Change,
    ContractBreakingChangeError,
    ContractDiff,
)
from treatycore.comparison.comparator import (
    ContractComparator,
    compare,
    compare_schemas,
)

__all__ = [
    "Change",
    "ContractDiff",
    "ContractBreakingChangeError",
    "ContractComparator",
    "compare",
    "compare_schemas",
]
