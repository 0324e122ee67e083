"""Tests for import graph construction."""

from __future__ import annotations

from pathlib import Path

import pytest

from htmlentry.config import parse_options
from htmlentry.graph import VIRTUAL_PREFIX, GraphState, ImportGraphBuilder, analyze


def _page(*body: str) -> str:
    return "<html><body>" + "".join(body) + "</body></html>"


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path.resolve()


def test_scenario_inline_and_local(tmp_path: Path):
    a = _write(
        tmp_path / "pages" / "a.html",
        _page("<script>console.log(1)</script>", '<script src="./b.js"></script>'),
    )
    root = tmp_path.resolve()

    state = analyze(parse_options({"include": ["pages/*.html"], "output": "dist"}), tmp_path)

    # Index counts elements across the document: html=0, body=1, inline script=2
    inline_id = f"{a}_2.js"
    assert state.paths == (inline_id, str(root / "pages" / "b.js"))
    assert dict(state.virtual_modules) == {inline_id: "console.log(1)"}
    assert list(state.documents) == [a]
    assert state.documents[a].find_all("script") == []


def test_document_then_script_order(tmp_path: Path):
    a = _write(
        tmp_path / "a.html",
        _page('<script src="1.js"></script>', "<script>two()</script>", '<script src="3.js"></script>'),
    )
    b = _write(tmp_path / "b.html", _page('<script src="4.js"></script>', "<script>five()</script>"))
    root = tmp_path.resolve()

    state = analyze(parse_options("*.html"), tmp_path)

    assert state.paths == (
        str(root / "1.js"),
        f"{a}_3.js",
        str(root / "3.js"),
        str(root / "4.js"),
        f"{b}_3.js",
    )
    assert state.virtual_modules[f"{a}_3.js"] == "two()"
    assert state.virtual_modules[f"{b}_3.js"] == "five()"


def test_each_local_script_appears_once(tmp_path: Path):
    _write(tmp_path / "a.html", _page('<script src="x.js"></script>', '<script src="y.js"></script>'))

    state = analyze(parse_options("*.html"), tmp_path)

    assert len(state.paths) == len(set(state.paths)) == 2


def test_without_output_tags_are_kept(tmp_path: Path):
    a = _write(tmp_path / "a.html", _page("<script>x()</script>", '<script src="b.js"></script>'))

    state = analyze(parse_options("*.html"), tmp_path)

    assert len(state.paths) == 2
    assert len(state.documents[a].find_all("script")) == 2


def test_remote_scripts_not_captured_or_removed(tmp_path: Path):
    a = _write(
        tmp_path / "a.html",
        _page(
            '<script src="https://cdn.example.com/lib.js"></script>',
            '<script src="//cdn.example.com/other.js"></script>',
            '<script src="app.js"></script>',
        ),
    )

    state = analyze(parse_options({"include": "*.html", "output": "dist"}), tmp_path)

    assert state.paths == (str(tmp_path.resolve() / "app.js"),)
    remaining = [s["src"] for s in state.documents[a].find_all("script")]
    assert remaining == ["https://cdn.example.com/lib.js", "//cdn.example.com/other.js"]


def test_html_import_followed_depth_first(tmp_path: Path):
    index = _write(
        tmp_path / "index.html",
        _page(
            '<script src="first.js"></script>',
            '<link rel="import" href="parts/part.html">',
            '<script src="last.js"></script>',
        ),
    )
    part = _write(tmp_path / "parts" / "part.html", '<script src="middle.js"></script>')
    root = tmp_path.resolve()

    state = analyze(parse_options("index.html"), tmp_path)

    assert state.paths == (
        str(root / "first.js"),
        str(root / "parts" / "middle.js"),
        str(root / "last.js"),
    )
    assert list(state.documents) == [index, part]


def test_imported_document_entered_once(tmp_path: Path):
    _write(tmp_path / "a.html", _page('<link rel="import" href="shared.html">'))
    _write(tmp_path / "b.html", _page('<link rel="import" href="shared.html">'))
    _write(tmp_path / "shared.html", '<script src="shared.js"></script>')

    state = analyze(parse_options("*.html"), tmp_path)

    assert state.paths == (str(tmp_path.resolve() / "shared.js"),)
    assert len(state.documents) == 3


def test_import_cycle_terminates(tmp_path: Path):
    _write(tmp_path / "a.html", '<link rel="import" href="b.html"><script src="a.js"></script>')
    _write(tmp_path / "b.html", '<link rel="import" href="a.html"><script src="b.js"></script>')
    root = tmp_path.resolve()

    state = analyze(parse_options("a.html"), tmp_path)

    assert state.paths == (str(root / "b.js"), str(root / "a.js"))


def test_import_of_excluded_document_is_removed(tmp_path: Path):
    a = _write(
        tmp_path / "a.html",
        _page('<link rel="import" href="legacy.html">', '<script src="a.js"></script>'),
    )
    _write(tmp_path / "legacy.html", '<script src="legacy.js"></script>')

    state = analyze(parse_options({"include": "*.html", "exclude": "legacy.html"}), tmp_path)

    assert state.paths == (str(tmp_path.resolve() / "a.js"),)
    assert list(state.documents) == [a]
    assert state.documents[a].find("link") is None


def test_external_document_never_entered(tmp_path: Path):
    a = _write(
        tmp_path / "a.html",
        _page('<link rel="import" href="vendor/widget.html">', "<script>mine()</script>"),
    )
    _write(tmp_path / "vendor" / "widget.html", '<script src="widget.js"></script>')

    state = analyze(
        parse_options({"include": "**/*.html", "external": ["vendor/**"], "output": "dist"}),
        tmp_path,
    )

    assert state.paths == (f"{a}_3.js",)
    assert list(state.documents) == [a]
    assert state.documents[a].find("link") is not None
    assert state.omitted == frozenset({(tmp_path / "vendor" / "widget.html").resolve()})


def test_excluded_document_not_a_root(tmp_path: Path):
    _write(tmp_path / "a.html", '<script src="a.js"></script>')
    _write(tmp_path / "drafts" / "wip.html", '<script src="wip.js"></script>')

    state = analyze(parse_options({"exclude": ["drafts/*.html"]}), tmp_path)

    assert state.paths == (str(tmp_path.resolve() / "a.js"),)
    assert len(state.documents) == 1


def test_excluded_document_entered_directly_captures_nothing(tmp_path: Path):
    doc = _write(
        tmp_path / "wip.html",
        '<script src="wip.js"></script><script>inline()</script>'
        '<script src="https://cdn.example.com/x.js"></script>',
    )

    builder = ImportGraphBuilder(excluded=[doc], rewrite=True)
    state = builder.build([doc])

    assert state.paths == ()
    assert dict(state.virtual_modules) == {}
    remaining = [s.get("src") for s in state.documents[doc].find_all("script")]
    assert remaining == ["https://cdn.example.com/x.js"]


def test_virtual_id_collision_is_namespaced(tmp_path: Path):
    doc = _write(tmp_path / "a.html", "<script>boom()</script>")
    (tmp_path / "a.html_0.js").write_text("real file")

    state = analyze(parse_options("a.html"), tmp_path)

    expected = VIRTUAL_PREFIX + f"{doc}_0.js"
    assert state.paths == (expected,)
    assert dict(state.virtual_modules) == {expected: "boom()"}


def test_missing_import_target_is_skipped(tmp_path: Path):
    a = _write(
        tmp_path / "a.html",
        '<link rel="import" href="missing.html"><script src="a.js"></script>',
    )

    state = analyze(parse_options("a.html"), tmp_path)

    assert state.paths == (str(tmp_path.resolve() / "a.js"),)
    assert list(state.documents) == [a]


def test_empty_include_gives_empty_graph(tmp_path: Path):
    _write(tmp_path / "a.html", '<script src="a.js"></script>')

    state = analyze(parse_options({"include": []}), tmp_path)

    assert state.paths == ()
    assert len(state.documents) == 0


def test_no_matches_gives_empty_graph(tmp_path: Path):
    state = analyze(parse_options("nowhere/*.html"), tmp_path)
    assert state.paths == ()
    assert len(state.virtual_modules) == 0
    assert len(state.documents) == 0


def test_repeated_analysis_is_deterministic(tmp_path: Path):
    for name in ["c.html", "a.html", "b.html"]:
        _write(tmp_path / name, f"<script>{name[0]}()</script><script src='{name[0]}.js'></script>")
    config = parse_options({"include": "*.html", "output": "dist"})

    first = analyze(config, tmp_path)
    second = analyze(config, tmp_path)

    assert first.paths == second.paths
    assert dict(first.virtual_modules) == dict(second.virtual_modules)
    # Each pass parses fresh trees; rewriting one pass never leaks into the next.
    assert first.documents[(tmp_path / "a.html").resolve()] is not second.documents[
        (tmp_path / "a.html").resolve()
    ]


def test_state_is_read_only(tmp_path: Path):
    _write(tmp_path / "a.html", "<script>x()</script>")
    state = analyze(parse_options("a.html"), tmp_path)

    with pytest.raises(TypeError):
        state.virtual_modules["new"] = "y()"  # pyright: ignore[reportIndexIssue]
    with pytest.raises(AttributeError):
        state.paths = ()  # pyright: ignore[reportAttributeAccessIssue]


def test_empty_state():
    state = GraphState.empty()
    assert state.paths == ()
    assert not state.is_virtual("anything.js")


def test_root_relative_script_kept_in_markup(tmp_path: Path):
    a = _write(
        tmp_path / "a.html",
        _page('<script src="/js/app.js"></script>', '<script src="local.js"></script>'),
    )

    state = analyze(parse_options({"include": "a.html", "output": "dist"}), tmp_path)

    assert state.paths == (str(tmp_path.resolve() / "local.js"),)
    remaining = [s["src"] for s in state.documents[a].find_all("script")]
    assert remaining == ["/js/app.js"]
