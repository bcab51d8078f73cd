# tests/conftest.py
import os
import tempfile

# every logger writes into one throw-away directory for the whole run
os.environ.setdefault("FLAIR_LOGS_DIR", tempfile.mkdtemp(prefix="flair_test_logs_"))

import textwrap  # noqa: E402
from pathlib import Path  # noqa: E402

import pytest  # noqa: E402

from flairc import env  # noqa: E402
from flairc.syntax import parse  # noqa: E402
from flairc.theme import ThemeLoader  # noqa: E402
from flairc.transform import Compiler  # noqa: E402
from flairc.transform.classifier import Classifier  # noqa: E402
from flairc.transform.models import TransformSettings  # noqa: E402
from flairc.transform.scanner import Scanner  # noqa: E402

THEME_YAML = """\
colors:
  brand: "#0b5fff"
  danger: "#d33"
fonts:
  h4: "font-size: 1.5rem;"
  h5: "font-size: 1.25rem;"
  body1: "font-size: 1rem;"
space: helper
block: helper
down: helper
up: helper
tablet: 768
"""


def dedent(source: str) -> str:
    return textwrap.dedent(source).lstrip("\n")


# ───────────────────────────────────────────────────────────────
#  Per-test project root: nothing leaks into the real cwd
# ───────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def isolated_project_root(tmp_path):
    old_root = env.get_project_root()
    env.set_project_root(tmp_path)
    yield tmp_path
    env.set_project_root(old_root)


@pytest.fixture
def theme_file(tmp_path) -> Path:
    path = tmp_path / "theme" / "exampleTheme.yml"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(THEME_YAML)
    return path


@pytest.fixture
def settings(theme_file) -> TransformSettings:
    return TransformSettings(theme_path=theme_file)


@pytest.fixture
def compiler(settings) -> Compiler:
    # private loader so cached themes never cross tests
    return Compiler(settings, loader=ThemeLoader())


@pytest.fixture
def scan(settings):
    """Parse + scan a snippet; returns (calls, diagnostics)."""

    def _scan(source: str, filename: str = "/virtual/Example.js"):
        data = dedent(source).encode()
        root = parse(data, Path(filename).suffix).root_node
        return Scanner(settings).scan(root, data, filename)

    return _scan


@pytest.fixture
def classify(settings, compiler):
    """Scan + classify a snippet; returns {(block, source): "static" | "dynamic"}."""

    def _classify(source: str, filename: str = "/virtual/Example.js", settings_=None):
        cfg = settings_ or settings
        data = dedent(source).encode()
        root = parse(data, Path(filename).suffix).root_node
        calls, _ = Scanner(cfg).scan(root, data, filename)
        Classifier(cfg, compiler.environment).classify(Path(filename), root, calls)
        return {
            (block.name, interp.source): interp.classification.value
            for call in calls
            for block in call.blocks
            for interp in block.interpolations
        }

    return _classify
