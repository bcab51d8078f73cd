# flairc/theme/models.py
from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Tuple

from pydantic import BaseModel, ConfigDict

AccessorPath = Tuple[str, ...]


class ThemeEnvironment(BaseModel):
    """
    Static evaluation environment for one theme source.

    `paths` enumerates every accessor reachable from the theme root,
    `leaves` the subset that cannot be descended into (scalars, helpers,
    arrays).  Read-only for the duration of a batch.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    data: Dict[str, Any]
    paths: FrozenSet[AccessorPath]
    leaves: FrozenSet[AccessorPath]

    @classmethod
    def from_data(cls, path: Path, data: Dict[str, Any]) -> "ThemeEnvironment":
        paths: set[AccessorPath] = set()
        leaves: set[AccessorPath] = set()

        def visit(node: Dict[str, Any], prefix: AccessorPath) -> None:
            for key, value in node.items():
                here = prefix + (str(key),)
                paths.add(here)
                if isinstance(value, dict):
                    visit(value, here)
                else:
                    leaves.add(here)

        visit(data, ())
        return cls(path=path, data=data, paths=frozenset(paths), leaves=frozenset(leaves))

    def allows(self, chain: Iterable[str]) -> bool:
        """
        True if a member chain rooted at the theme stays on known accessors.

        Anything past a leaf is accepted (`theme.colors.brand.length`), an
        unknown segment before reaching one is not.
        """
        prefix: AccessorPath = ()
        for segment in chain:
            prefix = prefix + (segment,)
            if prefix in self.leaves:
                return True
            if prefix not in self.paths:
                return False
        return True
