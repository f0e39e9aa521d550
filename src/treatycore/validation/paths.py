"""JSON path helpers.  The root is ``$``; properties use ``.name``, elements ``[i]``."""

from __future__ import annotations

ROOT = "$"


def child(path: str, name: str) -> str:
    return f"{path}.{name}"


def index(path: str, i: int) -> str:
    return f"{path}[{i}]"


def splice(parent: str, nested: str) -> str:
    """Rebase a path produced relative to a nested root onto *parent*.

    ``splice("$.user", "$.id") == "$.user.id"``,
    ``splice("$.user", "$") == "$.user"`` and
    ``splice("$.tags", "$[0]") == "$.tags[0]"``.
    """
    if nested.startswith(ROOT):
        return parent + nested[len(ROOT):]
    return parent + nested
