from flairc import env


def test_project_local_dirs(tmp_path):
    assert env.get_project_root() == tmp_path.resolve()
    assert env.get_dot_flair() == tmp_path.resolve() / ".flair"
    assert env.get_settings_dir() == tmp_path.resolve() / ".flair" / "settings"


def test_logs_dir_override(monkeypatch, tmp_path):
    monkeypatch.setenv("FLAIR_LOGS_DIR", str(tmp_path / "ci-logs"))
    assert env.get_logs_root() == (tmp_path / "ci-logs").resolve()
    assert env.get_logs_root().is_dir()

    monkeypatch.delenv("FLAIR_LOGS_DIR")
    assert env.get_logs_root() == tmp_path.resolve() / ".flair" / "logs"


def test_resolve_path_anchors_relative_paths(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    assert env.resolve_path("theme/t.yml") == tmp_path.resolve() / "theme" / "t.yml"
    assert env.resolve_path("~/t.yml") == (tmp_path / "home" / "t.yml").resolve()
    assert env.resolve_path(tmp_path / "abs.yml") == (tmp_path / "abs.yml").resolve()
