import pytest

from flairc.theme.models import ThemeEnvironment
from flairc.transform.classifier import DYNAMIC, STATIC, ReferenceGraph, resolve_module
from flairc.transform.models import TransformSettings


# ───────────────────────────────────────────────────────────────
#  Theme accessors
# ───────────────────────────────────────────────────────────────
def test_theme_accessors_known_to_the_schema_are_static(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme }) => ({
          root: css`
            color: ${theme.colors.brand};
            ${theme.fonts.h4}
            margin: ${theme.space(2)};
            width: ${theme.down(theme.tablet)};
            height: ${theme.colors.brand.length};
          `,
        }));
        """
    )
    assert set(result.values()) == {"static"}


def test_unknown_theme_accessor_is_dynamic(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme }) => ({
          root: css`color: ${theme.colors.missing}; gap: ${theme.spacing};`,
        }));
        """
    )
    assert result[("root", "theme.colors.missing")] == "dynamic"
    assert result[("root", "theme.spacing")] == "dynamic"


def test_destructured_theme_bindings(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme: { colors, fonts: { h5 } } }) => ({
          root: css`color: ${colors.danger}; ${h5} border: ${colors.nope};`,
        }));
        """
    )
    assert result[("root", "colors.danger")] == "static"
    assert result[("root", "h5")] == "static"
    assert result[("root", "colors.nope")] == "dynamic"


# ───────────────────────────────────────────────────────────────
#  Parameters, locals and globals
# ───────────────────────────────────────────────────────────────
def test_non_theme_parameters_are_dynamic(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme, color }, props) => ({
          root: css`color: ${color}; width: ${props.width}px; top: ${theme.tablet}px;`,
        }));
        """
    )
    assert result == {
        ("root", "color"): "dynamic",
        ("root", "props.width"): "dynamic",
        ("root", "theme.tablet"): "static",
    }


def test_locals_follow_their_definitions(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme }) => {
          const brand = theme.colors.brand;
          const half = Math.round(theme.tablet / 2);
          const now = Date.now();
          const size = half + now;
          return {
            root: css`color: ${brand}; width: ${half}px; top: ${now}; left: ${size};`,
          };
        });
        """
    )
    assert result == {
        ("root", "brand"): "static",
        ("root", "half"): "static",
        ("root", "now"): "dynamic",
        ("root", "size"): "dynamic",
    }


def test_unknown_globals_are_dynamic_and_pure_globals_static(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css }) => ({
          root: css`
            width: ${window.innerWidth}px;
            height: ${Math.max(10, 20)}px;
            top: ${undefinedThing};
          `,
        }));
        """
    )
    assert result[("root", "window.innerWidth")] == "dynamic"
    assert result[("root", "Math.max(10, 20)")] == "static"
    assert result[("root", "undefinedThing")] == "dynamic"


def test_pure_globals_are_checked_member_by_member(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme }) => ({
          root: css`
            width: ${Math.random() * 100}px;
            height: ${Math.floor(theme.tablet / 3)}px;
            top: ${Number(theme.tablet).toFixed(1)}px;
            left: ${JSON.stringify(theme.colors.brand)};
            right: ${JSON.parse("1")};
            bottom: ${[theme.tablet].map(Math)};
          `,
        }));
        """
    )
    assert result == {
        ("root", "Math.random() * 100"): "dynamic",
        ("root", "Math.floor(theme.tablet / 3)"): "static",
        ("root", "Number(theme.tablet).toFixed(1)"): "static",
        ("root", "JSON.stringify(theme.colors.brand)"): "static",
        ("root", 'JSON.parse("1")'): "dynamic",
        ("root", "[theme.tablet].map(Math)"): "dynamic",
    }


def test_effects_make_an_expression_dynamic(classify):
    result = classify(
        """
        const useStyles = createStyles(({ css, theme }) => ({
          root: css`
            a: ${new Intl.NumberFormat().format(theme.tablet)};
            b: ${[1, 2].map(n => n * theme.tablet).join(" ")};
          `,
        }));
        """
    )
    assert result[("root", "new Intl.NumberFormat().format(theme.tablet)")] == "dynamic"
    assert result[("root", '[1, 2].map(n => n * theme.tablet).join(" ")')] == "static"


# ───────────────────────────────────────────────────────────────
#  Module level
# ───────────────────────────────────────────────────────────────
def test_module_constants_and_helpers(classify):
    result = classify(
        """
        const GAP = 8;
        let counter = 0;
        counter += 1;
        const sizes = { small: 4 };
        sizes.small = 5;
        function double(n) { return n * 2; }
        const stamp = () => Date.now();

        const useStyles = createStyles(({ css, theme }) => ({
          root: css`
            gap: ${GAP}px;
            padding: ${double(GAP)}px;
            order: ${counter};
            margin: ${sizes.small}px;
            z-index: ${stamp()};
          `,
        }));
        """
    )
    assert result == {
        ("root", "GAP"): "static",
        ("root", "double(GAP)"): "static",
        ("root", "counter"): "dynamic",
        ("root", "sizes.small"): "dynamic",
        ("root", "stamp()"): "dynamic",
    }


def test_dependency_cycles_resolve(classify):
    result = classify(
        """
        const ping = n => (n > 0 ? pong(n - 1) : 0);
        const pong = n => ping(n);
        const tick = () => tock() + window.scrollY;
        const tock = () => tick();

        const useStyles = createStyles(({ css }) => ({
          root: css`a: ${ping(3)}; b: ${tock()};`,
        }));
        """
    )
    assert result[("root", "ping(3)")] == "static"
    assert result[("root", "tock()")] == "dynamic"


def test_package_imports_are_dynamic_unless_declared_pure(classify, theme_file):
    source = """
        import { createReadablePalette } from 'flair';
        import { darken } from 'polished';

        const useStyles = createStyles(({ css, theme }) => ({
          root: css`
            color: ${createReadablePalette(theme.colors.brand).readable};
            border-color: ${darken(0.1, theme.colors.brand)};
          `,
        }));
        """
    assert set(classify(source).values()) == {"dynamic"}

    pure = TransformSettings(theme_path=theme_file, pure_modules=["polished"])
    result = classify(source, settings_=pure)
    assert result[("root", "createReadablePalette(theme.colors.brand).readable")] == "dynamic"
    assert result[("root", "darken(0.1, theme.colors.brand)")] == "static"


def test_relative_imports_are_followed(classify, tmp_path):
    (tmp_path / "tokens.js").write_text(
        "export const GAP = 4;\n"
        "export const NOW = Date.now();\n"
        "const scale = 2;\n"
        "export { scale as SCALE };\n"
    )
    (tmp_path / "shared").mkdir()
    (tmp_path / "shared" / "index.ts").write_text("export * from '../tokens';\n")

    result = classify(
        """
        import { GAP, NOW } from './tokens';
        import * as shared from './shared';
        import { MISSING } from './nowhere';

        const useStyles = createStyles(({ css }) => ({
          root: css`
            gap: ${GAP}px;
            top: ${NOW};
            padding: ${shared.SCALE}px;
            margin: ${MISSING};
          `,
        }));
        """,
        filename=str(tmp_path / "Example.js"),
    )
    assert result == {
        ("root", "GAP"): "static",
        ("root", "NOW"): "dynamic",
        ("root", "shared.SCALE"): "static",
        ("root", "MISSING"): "dynamic",
    }


def test_marker_wrapped_and_placeholder_interpolations_keep_their_class(classify):
    result = classify(
        """
        const useStyles = __flairCreateStyles(({ css, theme }) => ({
          root: css`a: ${staticVar(window.innerWidth)}; b: ${"var(--Example--00000-0-root-1)"};`,
        }));
        """
    )
    assert result == {
        ("root", "staticVar(window.innerWidth)"): "static",
        ("root", '"var(--Example--00000-0-root-1)"'): "dynamic",
    }


# ───────────────────────────────────────────────────────────────
#  Building blocks
# ───────────────────────────────────────────────────────────────
def test_reference_graph_solves_by_reachability():
    graph = ReferenceGraph()
    graph.add("a", {"b"})
    graph.add("b", {"c", STATIC})
    graph.add("c", {DYNAMIC})
    graph.add("d", {STATIC})
    graph.add("e", {"e"})

    dynamic = graph.solve()
    assert {"a", "b", "c"} <= dynamic
    assert "d" not in dynamic and "e" not in dynamic


@pytest.mark.parametrize(
    "chain, allowed",
    [
        (("colors",), True),
        (("colors", "brand"), True),
        (("colors", "brand", "length"), True),
        (("colors", "missing"), False),
        (("nope",), False),
        ((), True),
    ],
)
def test_theme_environment_allows(tmp_path, chain, allowed):
    env = ThemeEnvironment.from_data(tmp_path / "t.yml", {"colors": {"brand": "#fff"}})
    assert env.allows(chain) is allowed


def test_resolve_module_tries_suffixes_and_index(tmp_path):
    importer = tmp_path / "src" / "App.js"
    importer.parent.mkdir()
    (tmp_path / "src" / "util.ts").write_text("")
    (tmp_path / "src" / "lib").mkdir()
    (tmp_path / "src" / "lib" / "index.js").write_text("")

    assert resolve_module(importer, "./util") == (tmp_path / "src" / "util.ts").resolve()
    assert resolve_module(importer, "./lib") == (tmp_path / "src" / "lib" / "index.js").resolve()
    assert resolve_module(importer, "./absent") is None


def test_plain_parameter_makes_theme_reads_dynamic(classify):
    result = classify(
        """
        const useStyles = createStyles((p) => ({
          root: css`color: ${p.theme.colors.brand}; gap: ${8 * 2}px;`,
        }));
        """
    )
    assert result == {
        ("root", "p.theme.colors.brand"): "dynamic",
        ("root", "8 * 2"): "static",
    }
