import pytest
from typer.testing import CliRunner

from flairc.cli import app
from flairc.theme import theme_loader

SOURCE = (
    "const useStyles = createStyles(({ css, theme }) => ({\n"
    "  root: css`color: ${window.color}; top: ${theme.tablet}px;`,\n"
    "}));\n"
)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture(autouse=True)
def fresh_theme_cache():
    theme_loader.clear()
    yield
    theme_loader.clear()


@pytest.fixture
def component(tmp_path):
    path = tmp_path / "Button.js"
    path.write_text(SOURCE)
    return path


def test_compile_to_stdout(runner, component, theme_file):
    result = runner.invoke(app, ["compile", str(component), "--theme", str(theme_file)])
    assert result.exit_code == 0
    assert "root: css`color: var(--Button--00000-0-root-0); top: ${staticVar(theme.tablet)}px;`" in result.stdout


def test_compile_to_out_dir(runner, component, theme_file, tmp_path):
    out_dir = tmp_path / "dist"
    result = runner.invoke(
        app, ["compile", str(component), "-t", str(theme_file), "-o", str(out_dir), "--mapping"]
    )
    assert result.exit_code == 0
    written = (out_dir / "Button.js").read_text()
    assert "var(--Button--00000-0-root-0)" in written
    assert "window.color" in result.output  # mapping table


def test_compile_reads_theme_from_preferences(runner, component, theme_file, tmp_path):
    prefs_file = tmp_path / ".flair" / "settings" / "preferences.yml"
    prefs_file.parent.mkdir(parents=True)
    prefs_file.write_text(f"transform:\n  theme_path: {theme_file.relative_to(tmp_path)}\n")

    result = runner.invoke(app, ["compile", str(component)])
    assert result.exit_code == 0
    assert "__flairCreateStyles" in result.stdout


def test_compile_without_theme_exits_2(runner, component):
    result = runner.invoke(app, ["compile", str(component)])
    assert result.exit_code == 2
    assert "No theme configured" in result.output


def test_compile_with_missing_theme_exits_2(runner, component, tmp_path):
    result = runner.invoke(app, ["compile", str(component), "-t", str(tmp_path / "nope.yml")])
    assert result.exit_code == 2


def test_compile_reports_diagnostics(runner, theme_file, tmp_path):
    legacy = tmp_path / "Legacy.js"
    legacy.write_text("const useStyles = createStyles({ root: css`a: b;` });\n")
    result = runner.invoke(app, ["compile", str(legacy), "-t", str(theme_file)])
    assert result.exit_code == 0
    assert "unsupported-style-definition" in result.output


def test_compile_collision_exits_1(runner, theme_file, tmp_path):
    bad = tmp_path / "Bad.js"
    bad.write_text(
        "const useStyles = createStyles(({ css }) => ({\n"
        '  root: css`a: ${window.a}; b: ${"var(--Bad--00000-0-root-0)"};`,\n'
        "}));\n"
    )
    result = runner.invoke(app, ["compile", str(bad), "-t", str(theme_file)])
    assert result.exit_code == 1


def test_extract(runner):
    result = runner.invoke(app, ["extract", "/x/Button.css?css=d2lkdGg6MTAwJTs="])
    assert result.exit_code == 0
    assert result.stdout_bytes == b"width:100%;"


def test_extract_malformed_is_empty(runner):
    result = runner.invoke(app, ["extract", "css=%%%"])
    assert result.exit_code == 0
    assert result.stdout_bytes == b""


def test_theme_tree(runner, theme_file):
    result = runner.invoke(app, ["theme", "-t", str(theme_file)])
    assert result.exit_code == 0
    assert "colors" in result.stdout
    assert "brand" in result.stdout


def test_compile_missing_file_fails_alone(runner, component, theme_file, tmp_path):
    result = runner.invoke(
        app, ["compile", str(component), str(tmp_path / "Missing.js"), "-t", str(theme_file)]
    )
    assert result.exit_code == 1
    assert "var(--Button--00000-0-root-0)" in result.stdout
