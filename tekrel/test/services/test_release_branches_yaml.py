from __future__ import annotations

from pathlib import Path
from types import MappingProxyType

import yaml

from tekrel.core.result import Err, Ok
from tekrel.output.console import MockConsole
from tekrel.services.release.branches_yaml import (
    RepoHeader,
    build_branch_entry,
    find_branches_section,
    format_branch_block,
    read_header,
    replace_next_references,
    update_repo_branches,
    upsert_branch,
)
from tekrel.services.release.config import DEFAULT_BRANCH_TABLES
from tekrel.services.release.model import BranchEntry, BranchUpdate

TABLES = DEFAULT_BRANCH_TABLES

CHAINS = """\
# chains component
name: tektoncd-chains
upstream: tektoncd/chains
patches: &patches
  - name: fix-build
    script: hack/patch.sh
components:
  - controller
branches:
  - name: release-v1.20.x
    upstream: release-v0.24.x
    patches: *patches
    versions:
      - "1.20"
  - name: next
    versions:
      - next
tekton:
  watched-sources: true
"""


def _update(minor: str = "1.21", **upstream: str) -> BranchUpdate:
    return BranchUpdate(minor_version=minor, upstream_versions=MappingProxyType(upstream))


def _ok(result: Ok[str] | Err[object]) -> str:
    assert isinstance(result, Ok), result
    return result.value


class TestReadHeader:
    def test_flags(self) -> None:
        header = read_header(CHAINS)
        assert header == Ok(RepoHeader(name="tektoncd-chains", has_upstream=True, has_patches=True))

    def test_null_values_count_as_absent(self) -> None:
        header = read_header("name: operator\nupstream:\npatches: null\n")
        assert header == Ok(RepoHeader(name="operator", has_upstream=False, has_patches=False))

    def test_missing_name(self) -> None:
        result = read_header("upstream: x\n")
        assert isinstance(result, Err)
        assert result.error.kind == "document_invalid"

    def test_not_a_mapping(self) -> None:
        assert isinstance(read_header("- a\n- b\n"), Err)

    def test_invalid_yaml(self) -> None:
        result = read_header("name: [unclosed\n")
        assert isinstance(result, Err)
        assert result.error.message == "invalid YAML"


class TestBuildEntry:
    def test_standard_with_upstream(self) -> None:
        header = RepoHeader(name="tektoncd-chains", has_upstream=True, has_patches=False)
        entry = build_branch_entry(header, _update(chains="release-v0.25.x"), TABLES)
        assert entry == BranchEntry(
            name="release-v1.21.x", versions=("1.21",), upstream="release-v0.25.x"
        )

    def test_standard_without_supplied_version(self) -> None:
        header = RepoHeader(name="tektoncd-chains", has_upstream=True, has_patches=False)
        entry = build_branch_entry(header, _update(), TABLES)
        assert entry == BranchEntry(name="release-v1.21.x", versions=("1.21",))

    def test_document_without_upstream_ignores_supplied_version(self) -> None:
        header = RepoHeader(name="tektoncd-chains", has_upstream=False, has_patches=False)
        entry = build_branch_entry(header, _update(chains="release-v0.25.x"), TABLES)
        assert entry.upstream is None

    def test_special_component_named_after_upstream(self) -> None:
        header = RepoHeader(name="tekton-caches", has_upstream=True, has_patches=False)
        entry = build_branch_entry(header, _update(cache="release-v0.1.x"), TABLES)
        assert entry == BranchEntry(name="release-v0.1.x", versions=("1.21",))

    def test_special_component_without_version(self) -> None:
        header = RepoHeader(name="manual-approval-gate", has_upstream=True, has_patches=False)
        entry = build_branch_entry(header, _update(), TABLES)
        assert entry == BranchEntry(name="release-v1.21.x", versions=("1.21",))

    def test_unknown_repo_gets_default(self) -> None:
        header = RepoHeader(name="something-new", has_upstream=True, has_patches=True)
        entry = build_branch_entry(header, _update(chains="release-v0.25.x"), TABLES)
        assert entry == BranchEntry(name="release-v1.21.x", versions=("1.21",))


def test_format_block() -> None:
    entry = BranchEntry(name="release-v1.21.x", versions=("1.21",), upstream="release-v0.25.x")
    assert format_branch_block(entry, has_patches=True) == [
        "  - name: release-v1.21.x",
        "    upstream: release-v0.25.x",
        "    patches: *patches",
        "    versions:",
        '      - "1.21"',
    ]


class TestFindSection:
    def test_stops_at_next_top_level_key(self) -> None:
        bounds = find_branches_section(CHAINS)
        assert bounds is not None
        start, end = bounds
        section = CHAINS[start:end]
        assert section.startswith("branches:\n")
        assert section.endswith("      - next")
        assert CHAINS[end:] == "\ntekton:\n  watched-sources: true\n"

    def test_nested_branches_key_ignored(self) -> None:
        assert find_branches_section("name: x\nspec:\n  branches:\n    - a\n") is None

    def test_blank_lines_inside_list(self) -> None:
        doc = "name: x\nbranches:\n  - name: a\n\n  - name: b\n\nother: 1\n"
        bounds = find_branches_section(doc)
        assert bounds is not None
        assert doc[bounds[1]:] == "\n\nother: 1\n"

    def test_section_at_eof(self) -> None:
        doc = "name: x\nbranches:\n  - name: a\n\n\n"
        bounds = find_branches_section(doc)
        assert bounds is not None
        assert doc[bounds[1]:] == "\n\n\n"


class TestUpsert:
    def test_replaces_section(self) -> None:
        out = _ok(upsert_branch(CHAINS, _update(chains="release-v0.25.x"), TABLES))
        data = yaml.safe_load(out)
        assert data["branches"] == [
            {
                "name": "release-v1.21.x",
                "upstream": "release-v0.25.x",
                "patches": data["patches"],
                "versions": ["1.21"],
            }
        ]
        assert out.count("branches:") == 1

    def test_bytes_outside_section_unchanged(self) -> None:
        out = _ok(upsert_branch(CHAINS, _update(), TABLES))
        start, _ = find_branches_section(CHAINS) or (0, 0)
        assert out[:start] == CHAINS[:start]
        assert out.endswith("\ntekton:\n  watched-sources: true\n")
        assert out.startswith("# chains component\n")

    def test_idempotent(self) -> None:
        update = _update(chains="release-v0.25.x")
        once = _ok(upsert_branch(CHAINS, update, TABLES))
        twice = _ok(upsert_branch(once, update, TABLES))
        assert once == twice

    def test_appends_when_missing(self) -> None:
        doc = "name: operator\nupstream: tektoncd/operator\n"
        out = _ok(upsert_branch(doc, _update(), TABLES))
        assert out == (
            "name: operator\n"
            "upstream: tektoncd/operator\n"
            "branches:\n"
            "  - name: release-v1.21.x\n"
            "    versions:\n"
            '      - "1.21"\n'
        )
        assert _ok(upsert_branch(out, _update(), TABLES)) == out

    def test_append_without_trailing_newline(self) -> None:
        out = _ok(upsert_branch("name: operator", _update(), TABLES))
        assert out.startswith("name: operator\nbranches:\n")
        assert yaml.safe_load(out)["branches"][0]["name"] == "release-v1.21.x"

    def test_special_component_document(self) -> None:
        doc = "name: tekton-caches\nupstream: openshift-pipelines/tekton-caches\nbranches:\n  - name: main\n"
        out = _ok(upsert_branch(doc, _update(cache="release-v0.1.x"), TABLES))
        branches = yaml.safe_load(out)["branches"]
        assert branches == [{"name": "release-v0.1.x", "versions": ["1.21"]}]

    def test_section_with_trailing_blank_lines(self) -> None:
        doc = "name: tektoncd-hub\nbranches:\n  - name: next\n\n\nextra: true\n"
        out = _ok(upsert_branch(doc, _update(), TABLES))
        assert out.endswith('      - "1.21"\n\n\nextra: true\n')

    def test_section_at_end_without_trailing_newline(self) -> None:
        doc = "name: tektoncd-hub\nbranches:\n  - name: next"
        out = _ok(upsert_branch(doc, _update(), TABLES))
        assert out == (
            "name: tektoncd-hub\n"
            "branches:\n"
            "  - name: release-v1.21.x\n"
            "    versions:\n"
            '      - "1.21"'
        )
        assert _ok(upsert_branch(out, _update(), TABLES)) == out

    def test_crlf_document_replaced_in_place(self) -> None:
        doc = "name: tektoncd-hub\r\nbranches:\r\n  - name: next\r\nextra: true\r\n"
        out = _ok(upsert_branch(doc, _update(), TABLES))
        assert out == (
            "name: tektoncd-hub\r\n"
            "branches:\r\n"
            "  - name: release-v1.21.x\r\n"
            "    versions:\r\n"
            '      - "1.21"\r\n'
            "extra: true\r\n"
        )
        assert out.count("branches:") == 1
        assert _ok(upsert_branch(out, _update(), TABLES)) == out

    def test_crlf_header_only_section(self) -> None:
        doc = "name: tektoncd-hub\r\nbranches:\r\n"
        out = _ok(upsert_branch(doc, _update(), TABLES))
        assert out.count("branches:") == 1
        assert out.endswith('      - "1.21"\r\n')
        assert "\n" not in out.replace("\r\n", "")

    def test_missing_name_is_error(self) -> None:
        result = upsert_branch("branches:\n  - name: a\n", _update(), TABLES)
        assert isinstance(result, Err)
        assert result.error.kind == "document_invalid"


class TestUpdateRepoBranches:
    def test_failures_do_not_stop_siblings(self, tmp_path: Path) -> None:
        (tmp_path / "a-chains.yaml").write_text(CHAINS, encoding="utf-8")
        (tmp_path / "b-broken.yaml").write_text("branches:\n  - name: x\n", encoding="utf-8")
        (tmp_path / "c-hub.yaml").write_text("name: tektoncd-hub\n", encoding="utf-8")
        (tmp_path / "notes.txt").write_text("name: ignored\n", encoding="utf-8")
        console = MockConsole()

        result = update_repo_branches(
            repos_dir=tmp_path,
            update=_update(chains="release-v0.25.x"),
            tables=TABLES,
            console=console,
        )

        assert isinstance(result, Ok)
        assert [p.name for p in result.value.updated] == ["a-chains.yaml", "c-hub.yaml"]
        assert [p.name for p, _ in result.value.failed] == ["b-broken.yaml"]
        assert console.has_warning()
        assert "release-v0.25.x" in (tmp_path / "a-chains.yaml").read_text(encoding="utf-8")
        assert "release-v1.21.x" in (tmp_path / "c-hub.yaml").read_text(encoding="utf-8")
        assert (tmp_path / "b-broken.yaml").read_text(encoding="utf-8") == "branches:\n  - name: x\n"
        assert (tmp_path / "notes.txt").read_text(encoding="utf-8") == "name: ignored\n"

    def test_missing_directory(self, tmp_path: Path) -> None:
        result = update_repo_branches(
            repos_dir=tmp_path / "missing",
            update=_update(),
            tables=TABLES,
            console=MockConsole(),
        )
        assert isinstance(result, Err)


def test_replace_next_references(tmp_path: Path) -> None:
    (tmp_path / "repos").mkdir()
    (tmp_path / "repos" / "x.yaml").write_text("branch: next\n", encoding="utf-8")
    (tmp_path / "a.yaml").write_text("version: next\nimage: nextgen\nref: release-next\n", encoding="utf-8")
    (tmp_path / "b.yaml").write_text("version: 1.20\n", encoding="utf-8")

    result = replace_next_references(tmp_path, "1.21")

    assert isinstance(result, Ok)
    assert [p.name for p in result.value] == ["a.yaml"]
    assert (tmp_path / "a.yaml").read_text(encoding="utf-8") == (
        "version: 1.21\nimage: nextgen\nref: release-1.21\n"
    )
    assert (tmp_path / "repos" / "x.yaml").read_text(encoding="utf-8") == "branch: next\n"
