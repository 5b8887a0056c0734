from conplug.core.errors import ErrorCode
from conplug.core.render import RenderOptions, Renderer, render


def _opts(root, **kwargs):
    return RenderOptions(roots=[str(root)], **kwargs)


def test_header_comment_style_by_extension():
    opts = RenderOptions()
    assert opts.header_for("/w/a.py", "a.py") == "\n# File: a.py\n"
    assert opts.header_for("/w/q.SQL", "q.SQL") == "\n-- File: q.SQL\n"
    assert opts.header_for("/w/main.go", "main.go") == "\n// File: main.go\n"
    assert opts.header_for("/w/page.html", "page.html") == "\n<!-- File: page.html -->\n"
    assert opts.header_for("/w/App.tsx", "App.tsx") == "\n<!-- File: App.tsx -->\n"
    assert opts.header_for("/w/site.scss", "site.scss") == "\n/* File: site.scss */\n"
    assert opts.header_for("/w/Makefile", "Makefile") == "\n// File: Makefile\n"


def test_custom_comment_map_and_affixes():
    opts = RenderOptions(
        header_prefix="",
        header_suffix=" ==\n",
        comment_style_for={".hs": "--", "default": ";"},
    )
    assert opts.header_for("/w/Main.hs", "Main.hs") == "-- File: Main.hs ==\n"
    assert opts.header_for("/w/x.py", "x.py") == "; File: x.py ==\n"


def test_render_concatenates_in_given_order(make_tree):
    root = make_tree({"b.py": "print('b')\n", "a.css": "p {}\n"})
    files = [str(root / "b.py"), str(root / "a.css")]
    result = render(files, _opts(root))
    assert result.truncated is False
    assert result.manifest is None
    assert result.content == (
        "\n# File: b.py\nprint('b')\n\n\n"
        "\n/* File: a.css */\np {}\n\n\n"
    )
    assert result.files_rendered == files
    assert result.total_bytes == len(result.content.encode("utf-8"))


def test_size_limit_switches_to_manifest(make_tree):
    root = make_tree({"a.py": "x" * 60, "b.py": "y" * 60})
    files = [str(root / "a.py"), str(root / "b.py")]
    result = Renderer(_opts(root, max_content_bytes=100)).render(files)

    assert result.truncated is True
    assert result.content == result.manifest
    assert result.files_rendered == []
    assert result.potential_bytes == 120
    assert result.manifest.splitlines()[:4] == [
        "Maximum content size (100 bytes) exceeded.",
        "",
        "List of files that would have been included:",
        "",
    ]
    assert "- a.py (60 bytes)" in result.manifest
    assert "- b.py (60 bytes)" in result.manifest
    assert result.manifest.endswith("\n\nTotal potential size: 120 bytes")
    assert [d.kind for d in result.diagnostics] == [ErrorCode.SIZE_LIMIT_EXCEEDED]


def test_output_never_exceeds_limit(make_tree):
    root = make_tree({"a.txt": "1234567890"})
    path = str(root / "a.txt")
    chunk = len("\n// File: a.txt\n1234567890\n\n")
    assert render([path], _opts(root, max_content_bytes=chunk)).truncated is False
    assert render([path], _opts(root, max_content_bytes=chunk - 1)).truncated is True


def test_unreadable_file_is_skipped_with_diagnostic(make_tree):
    root = make_tree({"ok.txt": "fine", "sub/keep.txt": ""})
    files = [str(root / "missing.txt"), str(root / "sub"), str(root / "ok.txt")]
    result = render(files, _opts(root))
    assert result.files_rendered == [str(root / "ok.txt")]
    assert "// File: ok.txt" in result.content
    kinds = [d.kind for d in result.diagnostics]
    assert kinds == [ErrorCode.FILE_READ_FAILURE, ErrorCode.FILE_READ_FAILURE]


def test_manifest_lists_unreadable_size(make_tree):
    root = make_tree({"big.txt": "z" * 50})
    missing = str(root / "gone.txt")
    result = render([str(root / "big.txt"), missing], _opts(root, max_content_bytes=10))
    assert result.truncated is True
    assert f"- {missing} (Error reading size:" in result.manifest
    assert result.manifest.endswith("Total potential size: 50 bytes")


def test_invalid_utf8_is_replaced(make_tree):
    root = make_tree({"bin.txt": b"ok\xffok"})
    result = render([str(root / "bin.txt")], _opts(root))
    assert "ok�ok" in result.content


def test_largest_file_is_tracked(make_tree):
    root = make_tree({"small.txt": "a", "large.txt": "a" * 30})
    result = render([str(root / "small.txt"), str(root / "large.txt")], _opts(root))
    assert result.largest_file.rel_path == "large.txt"
    assert result.largest_file.size == 30


def test_nested_roots_use_most_specific_root(make_tree):
    root = make_tree({"top.txt": "", "sub/inner.txt": ""})
    renderer = Renderer(RenderOptions(roots=[str(root), str(root / "sub")]))
    assert renderer.relative_path(str(root / "sub" / "inner.txt")) == "inner.txt"
    assert renderer.relative_path(str(root / "top.txt")) == "top.txt"
    assert renderer.relative_path("/elsewhere/file.txt") == "/elsewhere/file.txt"


def test_empty_input_renders_nothing():
    result = render([])
    assert result.content == ""
    assert result.truncated is False
    assert result.largest_file is None
