from __future__ import annotations

from pathlib import Path

from md2html.convert_html import converter
from md2html.convert_html.models import ConversionSettings, ConversionStage


def test_convert_pair_writes_document(memory_fs):
    memory_fs.add("guide.md", "# Guide\n")

    result = converter.convert_pair(
        Path("guide.md"),
        Path("guide.html"),
        settings=ConversionSettings(),
        dependencies=memory_fs.dependencies(),
    )

    assert result.ok
    assert result.failed_path is None
    html = memory_fs.files[Path("guide.html")]
    assert "<title>guide.md</title>" in html
    assert "<body><h1>Guide</h1>\n</body>" in html


def test_convert_pair_read_failure_skips_write(memory_fs):
    result = converter.convert_pair(
        Path("missing.md"),
        Path("missing.html"),
        settings=ConversionSettings(),
        dependencies=memory_fs.dependencies(),
    )

    assert not result.ok
    assert result.stage is ConversionStage.READ
    assert result.failed_path == Path("missing.md")
    assert isinstance(result.error, FileNotFoundError)
    assert memory_fs.writes == []


def test_convert_pair_write_failure_reports_target(memory_fs):
    memory_fs.add("a.md", "a")
    memory_fs.unwritable.add(Path("a.html"))

    result = converter.convert_pair(
        Path("a.md"),
        Path("a.html"),
        settings=ConversionSettings(),
        dependencies=memory_fs.dependencies(),
    )

    assert result.stage is ConversionStage.WRITE
    assert result.failed_path == Path("a.html")
    assert isinstance(result.error, PermissionError)


def test_convert_pair_uses_injected_renderer(memory_fs):
    memory_fs.add("a.md", "ignored")
    deps = converter.ConverterDependencies(
        read_text=memory_fs.read_text,
        write_text=memory_fs.write_text,
        render_markdown=lambda text: f"<pre>{text.upper()}</pre>",
    )

    converter.convert_pair(
        Path("a.md"),
        Path("a.html"),
        settings=ConversionSettings(lang="de"),
        dependencies=deps,
    )

    html = memory_fs.files[Path("a.html")]
    assert "<body><pre>IGNORED</pre></body>" in html
    assert '<html lang="de">' in html


def test_convert_pair_unexpected_errors_propagate(memory_fs):
    memory_fs.add("a.md", "a")

    def broken_render(_text):
        raise KeyError("bug")

    deps = converter.ConverterDependencies(
        read_text=memory_fs.read_text,
        write_text=memory_fs.write_text,
        render_markdown=broken_render,
    )

    try:
        converter.convert_pair(
            Path("a.md"),
            Path("a.html"),
            settings=ConversionSettings(),
            dependencies=deps,
        )
    except KeyError:
        pass
    else:  # pragma: no cover - guard
        raise AssertionError("KeyError should propagate")


def test_local_dependencies_round_trip(tmp_path):
    source = tmp_path / "a.md"
    source.write_text("~~old~~ new\n", encoding="utf-8")
    target = tmp_path / "a.html"
    deps = converter.local_dependencies(extensions=("table",))

    result = converter.convert_pair(
        source,
        target,
        settings=ConversionSettings(title_override="Doc"),
        dependencies=deps,
    )

    assert result.ok
    assert deps.open_in_browser is None
    html = target.read_text(encoding="utf-8")
    assert "<title>Doc</title>" in html
    assert "<s>old</s> new" in html
