"""Tests for the JSON command-line surface."""

import json

import pytest

from terminaut import __version__
from terminaut.__main__ import main


@pytest.fixture
def run(state_file, capsys):
    """Run the CLI and return (exit status, stdout, stderr)."""
    def _run(*argv):
        status = main(list(argv))
        captured = capsys.readouterr()
        return status, captured.out, captured.err
    return _run


def run_json(run, *argv):
    status, out, err = run(*argv)
    assert status == 0, err
    return json.loads(out)


def test_state_path(run, state_file):
    status, out, _ = run("--state-path")
    assert status == 0
    assert out.strip() == str(state_file)


def test_version(run):
    status, out, _ = run("version")
    assert (status, out.strip()) == (0, __version__)


def test_normalize(run, tmp_path):
    status, out, _ = run("normalize", f"{tmp_path}/./")
    assert (status, out.strip()) == (0, str(tmp_path.resolve()))


def test_normalize_blank_fails(run):
    status, out, err = run("normalize", "  ")
    assert status == 1
    assert out == ""
    assert "Error:" in err


def test_favorites(run, tmp_path, state_file):
    target = tmp_path / "proj"
    target.mkdir()
    assert run_json(run, "favorites", "add", str(target)) == {"status": "ok"}
    assert run_json(run, "favorites", "add", f"{target}/") == {"status": "ok"}
    assert run_json(run, "favorites", "list") == [str(target.resolve())]
    assert json.loads(state_file.read_text())["favorites"] == [str(target.resolve())]

    run_json(run, "favorites", "remove", str(target))
    assert run_json(run, "favorites", "list") == []


def test_recents(run, tmp_path):
    for name in ["one", "two"]:
        (tmp_path / name).mkdir()
        run_json(run, "recents", "touch", str(tmp_path / name))
    recents = run_json(run, "recents", "list")
    assert {entry["path"] for entry in recents} == {str((tmp_path / n).resolve()) for n in ["one", "two"]}
    assert set(recents[0]) == {"path", "last_opened_utc"}


def test_tags(run, tmp_path):
    path = str(tmp_path.resolve())
    run_json(run, "tags", "add", path, "Work")
    run_json(run, "tags", "add", path, "work", "--color", "#ffffff")
    assert run_json(run, "tags", "list") == [{"path": path, "tag": "Work", "color": "#ffffff"}]
    assert run_json(run, "tags", "for", path) == [{"path": path, "tag": "Work", "color": "#ffffff"}]
    run_json(run, "tags", "remove", path, "WORK")
    assert run_json(run, "tags", "list") == []


def test_profiles(run):
    saved = run_json(run, "profiles", "save", "dev", "--command", "make", "-w", "255")
    assert saved["name"] == "dev"
    assert saved["command"] == "make"
    assert saved["windows"] == 10

    updated = run_json(run, "profiles", "save", "Dev box", "--id", saved["id"], "--terminal", "kitty")
    assert updated["id"] == saved["id"]
    profiles = run_json(run, "profiles", "list")
    assert [(p["id"], p["name"], p["terminal"], p["windows"]) for p in profiles] == [
        (saved["id"], "Dev box", "kitty", 1)
    ]

    assert run_json(run, "profiles", "delete", saved["id"]) == {"status": "ok"}
    assert run_json(run, "profiles", "list") == []


def test_profile_errors(run):
    status, _, err = run("profiles", "save", "   ")
    assert status == 1
    assert "Profile name cannot be empty" in err

    status, _, err = run("profiles", "delete", "00000000-0000-0000-0000-000000000000")
    assert status == 1
    assert "Profile not found" in err


def test_search(run, tree):
    results = run_json(run, "search", "term", "--start", str(tree), "--limit", "2")
    assert len(results) == 2
    assert all(set(r) == {"path", "name", "score"} for r in results)


def test_search_blank_query_fails(run, tree):
    status, _, err = run("search", " ", "--start", str(tree))
    assert status == 1
    assert "query" in err


def test_list_and_projects(run, tmp_path):
    repo = tmp_path / "repo"
    (repo / "src").mkdir(parents=True)
    (repo / "go.mod").write_text("module x\n")

    entries = run_json(run, "list", str(repo))
    assert [(e["name"], e["is_dir"]) for e in entries] == [("go.mod", False), ("src", True)]

    projects = run_json(run, "projects", str(repo / "src"))
    assert {"path": str(repo.resolve()), "marker": "go.mod"} in projects


def test_group_requires_action(run):
    with pytest.raises(SystemExit):
        run("favorites")
