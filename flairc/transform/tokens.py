# flairc/transform/tokens.py
"""Identifier Generator: deterministic placeholder tokens, scoped per file."""

from __future__ import annotations

from pathlib import Path
from typing import Dict

from flairc.errors import IdentifierCollision
from flairc.logger import get_logger
from flairc.transform.models import Classification, PlaceholderToken, StyleCall

logger = get_logger(__name__)


class IdentifierGenerator:
    """
    Issues one token per Dynamic interpolation of one file.

    Tokens only depend on the file name, the call site and the interpolation's
    block/position, never on scheduling or on the order blocks are visited,
    so two compiles of the same input agree byte for byte.
    """

    def __init__(self, filename: str):
        self.file_id = Path(filename).stem
        self.issued: Dict[str, str] = {}  # rendered token → owner description

    def assign(self, call: StyleCall) -> None:
        for block in call.blocks:
            for interp in block.interpolations:
                if interp.classification is not Classification.DYNAMIC:
                    continue
                owner = f"{call.hook_name}.{block.name}[{interp.index}]"
                if interp.placeholder:
                    # emitted by an earlier pass: the token is kept verbatim
                    self._register(interp.placeholder, owner)
                    continue
                token = PlaceholderToken(
                    file_id=self.file_id,
                    sequence_id=call.sequence_id,
                    call_site_index=call.call_site_index,
                    block_name=block.name,
                    interpolation_index=interp.index,
                )
                self._register(token.render(), owner)
                interp.token = token

    def _register(self, rendered: str, owner: str) -> None:
        if rendered in self.issued:
            logger.error(
                f"token collision {rendered}: {self.issued[rendered]} and {owner}"
            )
            raise IdentifierCollision(
                f"placeholder {rendered} issued twice ({self.issued[rendered]}, {owner})"
            )
        self.issued[rendered] = owner
