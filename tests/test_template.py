"""Tests for template copying and rendering."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from scaffoldkit import template
from scaffoldkit.jobs.models import PACKAGES


class TestRenderString:
    """Tests for mustache rendering."""

    def test_double_braces_escape_html(self):
        assert template.render_string("{{name}}", {"name": "A & B"}) == "A &amp; B"

    def test_triple_braces_are_raw(self):
        uri = "mongodb+srv://u:p@host/db?retryWrites=true&w=majority"
        assert template.render_string("{{{uri}}}", {"uri": uri}) == uri

    def test_missing_variable_renders_empty(self):
        assert template.render_string("[{{missing}}]", {}) == "[]"


class TestIsBinary:
    """Tests for the binary-file heuristic."""

    def test_text_file(self, tmp_path: Path):
        path = tmp_path / "README.md"
        path.write_text("# {{projectName}}\n")
        assert template.is_binary(path) is False

    def test_nul_byte(self, tmp_path: Path):
        path = tmp_path / "favicon.ico"
        path.write_bytes(b"\x00\x00\x01\x00{{projectName}}")
        assert template.is_binary(path) is True

    def test_invalid_utf8(self, tmp_path: Path):
        path = tmp_path / "logo.png"
        path.write_bytes(b"abc\xff\xfe")
        assert template.is_binary(path) is True

    def test_character_cut_at_sniff_boundary_is_text(self, tmp_path: Path):
        path = tmp_path / "long.txt"
        content = "a" * (template.BINARY_SNIFF_BYTES - 1) + "é"
        path.write_text(content, encoding="utf-8")
        assert template.is_binary(path) is False


class TestRenderDirectory:
    """Tests for in-place directory rendering."""

    def test_renders_text_and_skips_binary(self, tmp_path: Path):
        (tmp_path / "nested").mkdir()
        (tmp_path / "package.json").write_text('{"name": "{{projectHid}}"}')
        (tmp_path / "nested" / "title.tsx").write_text("<h1>{{projectName}}</h1>")
        binary = b"\x00{{projectName}}"
        (tmp_path / "image.bin").write_bytes(binary)

        rendered = template.render_directory(
            tmp_path, {"projectName": "MS Web", "projectHid": "ms-web"}
        )

        assert (tmp_path / "package.json").read_text() == '{"name": "ms-web"}'
        assert (tmp_path / "nested" / "title.tsx").read_text() == "<h1>MS Web</h1>"
        assert (tmp_path / "image.bin").read_bytes() == binary
        assert sorted(p.name for p in rendered) == ["package.json", "title.tsx"]

    def test_skips_file_undecodable_after_sniffed_head(self, tmp_path: Path):
        content = b"a" * 9000 + "{{projectName}} café".encode("latin-1")
        (tmp_path / "legacy.txt").write_bytes(content)
        (tmp_path / "README.md").write_text("# {{projectName}}")

        rendered = template.render_directory(tmp_path, {"projectName": "MS Web"})

        assert [p.name for p in rendered] == ["README.md"]
        assert (tmp_path / "legacy.txt").read_bytes() == content
        assert (tmp_path / "README.md").read_text() == "# MS Web"


class TestCopyAndMove:
    """Tests for copy_tree and move_packages."""

    def test_copy_missing_template_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            template.copy_tree(tmp_path / "nope", tmp_path / "dest")

    def test_copy_into_existing_directory(self, tmp_path: Path):
        src = tmp_path / "src"
        (src / "packages" / "ui").mkdir(parents=True)
        (src / "packages" / "ui" / "package.json").write_text("{}")
        dest = tmp_path / "dest"
        dest.mkdir()

        template.copy_tree(src, dest)

        assert (dest / "packages" / "ui" / "package.json").is_file()

    def test_move_packages_prefixes(self, tmp_path: Path):
        for name in ("ui", "app"):
            (tmp_path / "packages" / name).mkdir(parents=True)

        template.move_packages(tmp_path, ["ui", "app"], "ms-web")

        assert sorted(p.name for p in (tmp_path / "packages").iterdir()) == [
            "ms-web-app",
            "ms-web-ui",
        ]


class TestBundledResources:
    """Tests for the resources shipped with the package."""

    def test_template_has_every_package(self):
        packages = template.default_template_dir() / "packages"

        for name in PACKAGES:
            assert (packages / name / "package.json").is_file()
        for name in ("cms", "ui", "app"):
            assert (packages / name / ".env.example").is_file()

    def test_app_yaml_renders_to_mapping(self):
        rendered = template.render_string(
            template.read_resource("google.app.yml"),
            {"nodeEnv": "stage", "databaseUri": "mongodb+srv://u:p@h/db?a=1&b=2"},
        )

        manifest = yaml.safe_load(rendered)
        assert manifest["env_variables"] == {
            "NODE_ENV": "stage",
            "DATABASE_URI": "mongodb+srv://u:p@h/db?a=1&b=2",
        }
