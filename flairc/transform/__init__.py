# flairc/transform/__init__.py
"""
flairc.transform
================

One `Compiler` per batch:

    source ─► Scanner ─► Classifier ─► IdentifierGenerator ─► Rewriter ─► CompiledModule
                            ▲
               ThemeLoader ─┘ (loaded once, shared read-only)

Each file's pass is synchronous and independent; `compile_many` fans files
out over a thread pool.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from flairc import env
from flairc.errors import (
    ConfigurationError,
    FlairError,
    IdentifierCollision,
    UnreadableSource,
)
from flairc.logger import get_logger
from flairc.syntax import parse
from flairc.theme import ThemeLoader, theme_loader
from flairc.transform.classifier import Classifier
from flairc.transform.models import CompiledModule, TransformSettings
from flairc.transform.rewriter import Rewriter
from flairc.transform.scanner import Scanner
from flairc.transform.tokens import IdentifierGenerator

logger = get_logger(__name__)


class Compiler:
    def __init__(self, settings: TransformSettings, loader: Optional[ThemeLoader] = None):
        self.settings = settings
        self.loader = loader or theme_loader
        # fatal for the whole batch when the theme cannot be loaded
        self.environment = self.loader.load(settings.theme_path)
        self.rewriter = Rewriter(settings)

    def compile_source(self, source: Union[str, bytes], filename: str) -> CompiledModule:
        if isinstance(source, str):
            data = source.encode("utf-8")
        else:
            data = source
            try:
                data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise UnreadableSource(f"{filename} is not valid UTF-8: {e}") from e
        path = env.resolve_path(filename)
        root = parse(data, path.suffix).root_node

        calls, diagnostics = Scanner(self.settings).scan(root, data, filename)
        if calls:
            Classifier(self.settings, self.environment).classify(path, root, calls)
            generator = IdentifierGenerator(filename)
            for call in calls:
                generator.assign(call)

        module = self.rewriter.rewrite(data, root, calls, filename)
        module.diagnostics = diagnostics
        logger.info(
            f"compiled {filename}: {len(calls)} hook(s), {len(module.mapping)} variable(s), "
            f"{len(diagnostics)} diagnostic(s)"
        )
        return module

    def compile_file(self, path: Union[str, Path]) -> CompiledModule:
        path = env.resolve_path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UnreadableSource(f"cannot read {path}: {e}") from e
        return self.compile_source(data, str(path))

    def compile_many(
        self, paths: Iterable[Union[str, Path]], max_workers: Optional[int] = None
    ) -> List[Tuple[Path, Union[CompiledModule, FlairError]]]:
        """
        Compile files concurrently. A file that fails its own pass yields its
        error in place of a module; batch-fatal errors propagate.
        """
        resolved = [env.resolve_path(p) for p in paths]

        def _one(path: Path) -> Union[CompiledModule, FlairError]:
            try:
                return self.compile_file(path)
            except (IdentifierCollision, UnreadableSource) as e:
                logger.error(f"{path}: {e}")
                return e

        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            results = list(pool.map(_one, resolved))
        return list(zip(resolved, results))


def load_settings(theme: Optional[str] = None, **overrides) -> TransformSettings:
    """
    Build settings from `<project>/.flair/settings/preferences.yml`
    (section ``transform``) with explicit values taking precedence.
    """
    from flairc.preferences import prefs

    prefs.reload()
    data = dict(prefs.get_section("transform"))
    data.update({k: v for k, v in overrides.items() if v is not None})
    if theme is not None:
        data["theme_path"] = theme
    if not data.get("theme_path"):
        raise ConfigurationError(
            "No theme configured: pass --theme or set transform.theme_path in preferences"
        )
    data["theme_path"] = env.resolve_path(data["theme_path"])
    return TransformSettings.model_validate(data)
