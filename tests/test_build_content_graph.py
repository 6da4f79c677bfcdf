"""Tests for the command-line entry point."""

import json
import os
import sys

import pytest

from build_content_graph import main, parse_args


@pytest.fixture
def content(tmp_path):
    src = tmp_path / "content"
    (src / "notes").mkdir(parents=True)
    (src / "hello.md").write_text("ssg-title: Hello\nssg-created-at: 10\n\nHi.\n", encoding="utf-8")
    (src / "notes" / "first.md").write_text("First note.\n", encoding="utf-8")
    return src


class TestParseArgs:
    def test_defaults(self, tmp_path):
        args = parse_args([str(tmp_path / "in"), str(tmp_path / "out")])
        assert args.redirect_prefix == "https://href.li/?"
        assert args.max_depth == 64
        assert args.clean is False
        assert args.index_template is None

    def test_wrong_argument_count_exits_non_zero(self, capsys):
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["only-one"])
        assert excinfo.value.code != 0
        assert "usage" in capsys.readouterr().err


class TestMain:
    def test_builds_graph(self, tmp_path, content, capsys):
        dest = tmp_path / "site"
        main([str(content), str(dest)])

        root_index = json.loads((dest / "index.json").read_text(encoding="utf-8"))
        assert root_index["indexes"] == ["notes/index.json"]
        assert root_index["articles"][0]["title"] == "Hello"
        assert (dest / "notes" / "first.json").is_file()
        assert "2 articles, 2 indexes" in capsys.readouterr().out

    def test_missing_input(self, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            main([str(tmp_path / "nope"), str(tmp_path / "site")])
        assert "Input directory not found" in str(excinfo.value.code)

    def test_output_inside_input_rejected(self, content):
        with pytest.raises(SystemExit) as excinfo:
            main([str(content), str(content / "site")])
        assert "must not be inside" in str(excinfo.value.code)

    def test_input_inside_output_rejected_before_clean(self, tmp_path):
        site = tmp_path / "site"
        src = site / "content"
        src.mkdir(parents=True)
        (src / "keep.md").write_text("keep me\n", encoding="utf-8")

        with pytest.raises(SystemExit) as excinfo:
            main([str(src), str(site), "--clean"])

        assert "Input directory must not be inside the output directory" in str(excinfo.value.code)
        assert (src / "keep.md").is_file()

    @pytest.mark.skipif(sys.platform != "linux", reason="needs a filesystem that accepts non-UTF-8 names")
    def test_non_utf8_file_name_reported(self, tmp_path, content):
        with open(os.path.join(os.fsencode(content), b"caf\xe9.md"), "wb") as handle:
            handle.write(b"caf\xc3\xa9\n")

        with pytest.raises(SystemExit) as excinfo:
            main([str(content), str(tmp_path / "site")])

        assert str(excinfo.value.code).startswith("Build failed:")
        assert "not valid UTF-8" in str(excinfo.value.code)

    def test_build_error_reported(self, tmp_path, content):
        (content / "broken.md").write_text("ssg-created-at: later\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            main([str(content), str(tmp_path / "site")])
        assert str(excinfo.value.code).startswith("Build failed: ssg-created-at")

    def test_clean_removes_stale_artifacts(self, tmp_path, content):
        dest = tmp_path / "site"
        dest.mkdir()
        (dest / "stale.json").write_text("{}", encoding="utf-8")

        main([str(content), str(dest), "--clean"])

        assert not (dest / "stale.json").exists()
        assert (dest / "hello.json").is_file()

    def test_index_template(self, tmp_path, content):
        template = tmp_path / "template.html"
        template.write_text("<script>const data = {{ data }};</script>", encoding="utf-8")
        dest = tmp_path / "site"

        main([str(content), str(dest), "--index-template", str(template)])

        html = (dest / "index.html").read_text(encoding="utf-8")
        assert "{{ data }}" not in html
        assert '"indexes": ["notes/index.json"]' in html

    def test_custom_redirect_prefix(self, tmp_path):
        src = tmp_path / "content"
        src.mkdir()
        (src / "link.md").write_text("[x](https://example.com)\n", encoding="utf-8")
        dest = tmp_path / "site"

        main([str(src), str(dest), "--redirect-prefix", "https://out.example/?u="])

        body = json.loads((dest / "link.json").read_text(encoding="utf-8"))["article"]["body"]
        assert 'href="https://out.example/?u=https://example.com"' in body
