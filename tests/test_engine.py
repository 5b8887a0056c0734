import os

from conplug.core.engine import ConplugEngine
from conplug.core.errors import ErrorCode
from conplug.core.selection import Selection
from conplug.core.settings import Settings


def _engine(*roots, **settings_kwargs):
    return ConplugEngine(Settings(**settings_kwargs), roots=[str(r) for r in roots])


def _rel(paths, root):
    return sorted(os.path.relpath(p, root).replace(os.sep, "/") for p in paths)


def test_load_root_without_config(make_tree):
    root = make_tree({"a.txt": ""})
    engine = _engine(root)
    assert engine.load_root(str(root)) is False
    assert engine.is_loaded(str(root)) is False
    assert engine.list_profile_names() == []


def test_load_root_is_idempotent_until_reload(make_tree):
    root = make_tree({".conplug": "first{a.txt}\n", "a.txt": "", "b.txt": ""})
    engine = _engine(root)
    assert engine.load_root(str(root)) is True
    assert engine.list_profile_names() == ["first"]

    (root / ".conplug").write_text("second{b.txt}\n", encoding="utf-8")
    assert engine.load_root(str(root)) is True
    assert engine.list_profile_names() == ["first"]

    assert engine.reload_root(str(root)) is True
    assert engine.list_profile_names() == ["second"]


def test_failed_reparse_keeps_previous_profiles(make_tree):
    root = make_tree({".conplug": "keep{a.txt}\n", "a.txt": ""})
    engine = _engine(root)
    engine.load_all()

    (root / ".conplug").write_bytes(b"broken{\xff}\n")
    diagnostics = []
    assert engine.reload_root(str(root), diagnostics) is False
    assert [d.kind for d in diagnostics] == [ErrorCode.CONFIG_PARSE_FAILURE]
    assert engine.list_profile_names() == ["keep"]


def test_deleted_config_drops_profiles(make_tree):
    root = make_tree({".conplug": "gone{a.txt}\n", "a.txt": ""})
    engine = _engine(root)
    engine.load_all()
    (root / ".conplug").unlink()
    assert engine.reload_root(str(root)) is False
    assert engine.get_profile("gone") is None


def test_multi_root_last_loaded_wins(make_tree):
    first = make_tree({".conplug": "docs{one.md}\n", "one.md": ""}, root_name="first")
    second = make_tree({".conplug": "docs{two.md}\n", "two.md": ""}, root_name="second")
    engine = _engine(first, second)
    assert engine.load_all() is True
    assert engine.get_profile("docs").root_path == str(second)

    engine.remove_root(str(second))
    assert engine.roots == [str(first)]
    assert engine.get_profile("docs").root_path == str(first)


def test_resolve_selection_unions_profiles(make_tree):
    root = make_tree({
        ".conplug": "a{a.txt}\nb{b.txt}\n",
        "a.txt": "",
        "b.txt": "",
        "c.txt": "",
    })
    engine = _engine(root)
    engine.load_all()
    files = engine.resolve_selection(["a", "b"])
    assert _rel(files, root) == ["a.txt", "b.txt"]
    assert engine.resolve_selection(Selection.none()) == set()


def test_resolve_selection_reports_unknown_and_cycles(make_tree):
    root = make_tree({".conplug": "x: y{a.txt}\ny: x{}\nok{a.txt}\n", "a.txt": ""})
    engine = _engine(root)
    engine.load_all()
    diagnostics = []
    files = engine.resolve_selection(["ghost", "x", "ok"], diagnostics)
    assert _rel(files, root) == ["a.txt"]
    assert [d.kind for d in diagnostics] == [
        ErrorCode.UNKNOWN_PROFILE_REFERENCE,
        ErrorCode.CYCLIC_INHERITANCE,
    ]


def test_all_files_selection_skips_excludes(make_tree):
    root = make_tree({
        "src/app.js": "",
        "node_modules/dep/index.js": "",
        "dist/bundle.js": "",
        "server.log": "",
        "README.md": "",
    })
    engine = _engine(root)
    files = engine.resolve_selection(Selection.all_files())
    assert _rel(files, root) == ["README.md", "src/app.js"]


def test_include_git_ignored_setting(make_tree):
    root = make_tree({
        ".conplug": "all{**/*.txt}\n",
        ".gitignore": "skip.txt\n",
        "skip.txt": "",
        "keep.txt": "",
    })
    strict = _engine(root)
    strict.load_all()
    assert _rel(strict.resolve_selection(["all"]), root) == ["keep.txt"]

    loose = _engine(root, INCLUDE_GIT_IGNORED=True)
    loose.load_all()
    assert _rel(loose.resolve_selection(["all"]), root) == ["keep.txt", "skip.txt"]


def test_prune_selection(make_tree):
    root = make_tree({".conplug": "kept{a.txt}\n", "a.txt": ""})
    engine = _engine(root)
    engine.load_all()
    pruned = engine.prune_selection(Selection.of(["kept", "removed"]))
    assert pruned.names == ("kept",)
    assert engine.prune_selection(Selection.of(["removed"])).is_empty
    assert engine.prune_selection(Selection.all_files()).is_all_files


def test_render_uses_root_relative_headers(make_tree):
    root = make_tree({".conplug": "p{src/}\n", "src/main.py": "x = 1\n"})
    engine = _engine(root)
    engine.load_all()
    files = sorted(engine.resolve_selection(["p"]))
    result = engine.render(files)
    assert result.content == f"\n# File: {os.path.join('src', 'main.py')}\nx = 1\n\n\n"

    small = engine.render(files, engine.render_options(max_content_bytes=5))
    assert small.truncated is True


def test_describe_reports_roots_and_profiles(make_tree):
    root = make_tree({".conplug": "base{a}\nchild: base{b !c}\n"})
    bare = make_tree({}, root_name="bare")
    engine = _engine(root, bare)
    engine.load_all()
    report = engine.describe()
    assert report.startswith("# ConPlug Diagnostic Information\n")
    assert "* Loaded Profiles: 2" in report
    assert f"* child (from {root})" in report
    assert "  * Inherits from: base" in report
    assert "  * Files: 1, Excluded: 1" in report
    assert "* Workspace Roots: 2" in report
    assert "    * Has .conplug file: No" in report
    assert "    * Loaded: Yes" in report


def test_has_config_uses_configured_file_name(make_tree):
    root = make_tree({"project.conplug": "alt{a.txt}\n", "a.txt": ""})
    engine = _engine(root, CONFIG_FILE_NAME="project.conplug")
    assert engine.has_config(str(root)) is True
    assert engine.load_root(str(root)) is True
    assert engine.list_profile_names() == ["alt"]
    assert _engine(root).has_config(str(root)) is False
