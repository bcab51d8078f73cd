# flairc/transform/models.py
"""
Data models for one compile pass.

• StyleBlock / Interpolation / PlaceholderToken only live for one file.
• CompiledModule is handed to the host toolchain and not retained.
• TransformSettings is the batch configuration (see Preferences.get_section).
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

SHIM_NAME = "__flairCreateStyles"


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TransformSettings(BaseModel):
    """Batch configuration. Only `theme_path` is required."""

    model_config = ConfigDict(extra="ignore")

    theme_path: Path
    # what the emitted module `require`s at load time (defaults to theme_path)
    runtime_theme: Optional[str] = None
    factory: str = "createStyles"
    tag: str = "css"
    marker: str = "staticVar"
    pure_modules: List[str] = []


# ---------------------------------------------------------------------------
# Scanner output
# ---------------------------------------------------------------------------


class Classification(str, Enum):
    STATIC = "static"
    DYNAMIC = "dynamic"


class PlaceholderToken(BaseModel):
    model_config = ConfigDict(frozen=True)

    file_id: str
    sequence_id: int
    call_site_index: int
    block_name: str
    interpolation_index: int

    def render(self) -> str:
        return (
            f"--{self.file_id}--{self.sequence_id:05d}-{self.call_site_index}"
            f"-{self.block_name}-{self.interpolation_index}"
        )

    def __str__(self) -> str:
        return self.render()


class Interpolation(BaseModel):
    """One `${...}` of a style template. Byte offsets refer to the source."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    index: int
    source: str
    start: int  # start of `${`
    end: int  # end of `}`
    expr_start: int
    expr_end: int
    classification: Optional[Classification] = None
    token: Optional[PlaceholderToken] = None
    wrapped: bool = False  # already `marker(...)` from an earlier pass
    placeholder: Optional[str] = None  # already `"var(--...)"` from an earlier pass
    node: Any = Field(default=None, exclude=True, repr=False)


class StyleBlock(BaseModel):
    """
    One property of the object returned by the style function.

    `chunks` holds the literal text around the interpolations, so that
    ``len(chunks) == len(interpolations) + 1``.
    """

    name: str
    chunks: List[str]
    interpolations: List[Interpolation] = []
    template_start: int
    template_end: int


class StyleCall(BaseModel):
    """A supported style-definition call site."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    call_site_index: int
    sequence_id: int
    hook_name: str
    exported: bool = False
    callee_start: int
    callee_end: int
    start: int
    end: int
    # local name → accessor prefix below the theme (`{ theme: { colors } }`)
    theme_bindings: Dict[str, Tuple[str, ...]] = {}
    tag_binding: str = "css"
    dynamic_params: List[str] = []
    blocks: List[StyleBlock] = []
    function: Any = Field(default=None, exclude=True, repr=False)


# ---------------------------------------------------------------------------
# Pass output
# ---------------------------------------------------------------------------


class Diagnostic(BaseModel):
    code: str
    message: str
    file: str
    line: int
    column: int
    severity: str = "warning"

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}: {self.code}: {self.message}"


class HookDefinition(BaseModel):
    """The hook a style-definition call is rewritten into."""

    name: str
    exported: bool
    call_site_index: int
    blocks: List[str]


class ExtractionMetadata(BaseModel):
    """
    What downstream tooling needs to treat a hook's output as a static asset:
    per-block template text holding only literal CSS, `var()` references and
    marker-wrapped build-time expressions.
    """

    extractable: bool = True
    tokens: List[str] = []
    skeleton: Dict[str, str] = {}


class CompiledModule(BaseModel):
    filename: str
    code: str
    mapping: Dict[str, str] = Field(default_factory=dict)  # token → discarded source
    hooks: List[Tuple[HookDefinition, ExtractionMetadata]] = []
    diagnostics: List[Diagnostic] = []

    @property
    def changed(self) -> bool:
        return bool(self.hooks)
