"""Branch-section surgery for hack repo component configs.

Each ``config/konflux/repos/*.yaml`` file carries a top-level ``branches:``
list. Registering a release replaces that list with a single entry for the
new release branch. Only the header keys (``name``, ``upstream``,
``patches``) are parsed; the rest of the file is edited as text so that
comments, anchors and aliases survive untouched.

A ``branches:`` section is the header line plus every following line that
is indented or starts with ``-``. Blank lines belong to the section only
when more section lines follow them; trailing blank lines and the final
newline stay outside. CRLF files keep their CRLF line endings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

import yaml

from tekrel.core.result import Err, Ok, Result
from tekrel.core.structured import as_str_dict
from tekrel.output.console import ConsoleProtocol
from tekrel.platform.files import write_text_atomic
from tekrel.services.release.config import BranchTables
from tekrel.services.release.errors import ReleaseError
from tekrel.services.release.model import BranchEntry, BranchUpdate
from tekrel.services.release.version import release_branch_name

_INDENT = "  "
_HEADER_RE = re.compile(r"^branches:(?:[ \t][^\r\n]*)?\r?$", re.MULTILINE)
_NEXT_RE = re.compile(r"\bnext\b")


@dataclass(frozen=True, slots=True)
class RepoHeader:
    name: str
    has_upstream: bool
    has_patches: bool


@dataclass(frozen=True, slots=True)
class RepoBranchReport:
    updated: tuple[Path, ...]
    failed: tuple[tuple[Path, ReleaseError], ...]


def read_header(document: str) -> Result[RepoHeader, ReleaseError]:
    try:
        data_obj: object = yaml.safe_load(document)
    except yaml.YAMLError as e:
        return Err(ReleaseError(kind="document_invalid", message="invalid YAML", hint=str(e)))

    data = as_str_dict(data_obj)
    if data is None:
        return Err(ReleaseError(kind="document_invalid", message="document is not a mapping"))

    name = data.get("name")
    if not isinstance(name, str):
        return Err(ReleaseError(kind="document_invalid", message="missing or non-string 'name'"))

    return Ok(
        RepoHeader(
            name=name,
            has_upstream=data.get("upstream") is not None,
            has_patches=data.get("patches") is not None,
        )
    )


def build_branch_entry(header: RepoHeader, update: BranchUpdate, tables: BranchTables) -> BranchEntry:
    minor = update.minor_version
    default = BranchEntry(name=release_branch_name(minor), versions=(minor,))

    component = tables.component_names.get(header.name)
    if component is None:
        return default

    upstream = update.upstream_versions.get(component)
    if component in tables.special_components and upstream:
        return BranchEntry(name=upstream, versions=(minor,))

    if header.has_upstream and upstream:
        return BranchEntry(name=default.name, versions=default.versions, upstream=upstream)
    return default


def format_branch_block(entry: BranchEntry, *, has_patches: bool, indent: str = _INDENT) -> list[str]:
    lines = [f"{indent}- name: {entry.name}"]
    if entry.upstream:
        lines.append(f"{indent}  upstream: {entry.upstream}")
    if has_patches:
        lines.append(f"{indent}  patches: *patches")
    lines.append(f"{indent}  versions:")
    lines += [f'{indent}    - "{version}"' for version in entry.versions]
    return lines


def _belongs_to_section(line: str) -> bool:
    return line[:1] in (" ", "\t") or line.startswith("-")


def _line_ending(document: str) -> str:
    return "\r\n" if "\r\n" in document else "\n"


def _strip_cr(document: str, line_end: int) -> int:
    """Step line_end back over the ``\\r`` of a CRLF terminator."""
    return line_end - 1 if document[line_end - 1 : line_end] == "\r" else line_end


def find_branches_section(document: str) -> tuple[int, int] | None:
    """Return [start, end) offsets of the ``branches:`` section, or None.

    ``end`` stops before the line terminator (``\\n`` or ``\\r\\n``) of the
    last section line.
    """
    match = _HEADER_RE.search(document)
    if match is None:
        return None

    end = _strip_cr(document, match.end())
    cursor = match.end()  # at the newline ending the previous line, or EOF
    while cursor < len(document):
        line_start = cursor + 1
        nl = document.find("\n", line_start)
        line_end = len(document) if nl == -1 else nl
        line = document[line_start:line_end]
        if line.strip() and not _belongs_to_section(line):
            break
        if line.strip():
            end = _strip_cr(document, line_end)
        cursor = line_end
    return match.start(), end


def upsert_branch(
    document: str,
    update: BranchUpdate,
    tables: BranchTables,
) -> Result[str, ReleaseError]:
    """Replace (or append) the ``branches:`` section for the new release.

    Bytes outside the section are preserved; applying the same update twice
    yields the same document. The section is written with the document's own
    line ending.
    """
    header = read_header(document)
    if isinstance(header, Err):
        return header

    entry = build_branch_entry(header.value, update, tables)
    eol = _line_ending(document)
    section = eol.join(["branches:", *format_branch_block(entry, has_patches=header.value.has_patches)])

    bounds = find_branches_section(document)
    if bounds is None:
        prefix = document if not document or document.endswith("\n") else document + eol
        return Ok(prefix + section + eol)

    start, end = bounds
    return Ok(document[:start] + section + document[end:])


def update_repo_branches(
    *,
    repos_dir: Path,
    update: BranchUpdate,
    tables: BranchTables,
    console: ConsoleProtocol,
) -> Result[RepoBranchReport, ReleaseError]:
    """Apply ``upsert_branch`` to every ``*.yaml`` in repos_dir.

    Files are handled one at a time; a file that cannot be parsed or written
    is reported and the remaining files are still processed.
    """
    if not repos_dir.is_dir():
        return Err(
            ReleaseError(kind="write_failed", message="repos directory not found", hint=str(repos_dir))
        )

    try:
        paths = sorted(p for p in repos_dir.glob("*.yaml") if p.is_file())
    except OSError as e:
        return Err(ReleaseError(kind="write_failed", message="failed to read repos directory", hint=str(e)))

    updated: list[Path] = []
    failed: list[tuple[Path, ReleaseError]] = []
    for path in paths:
        result = _update_one(path, update, tables)
        if isinstance(result, Err):
            console.warning(f"{path.name}: {result.error.pretty()}")
            failed.append((path, result.error))
            continue
        console.print(f"updated {path.name} for {update.minor_version}")
        updated.append(path)

    return Ok(RepoBranchReport(updated=tuple(updated), failed=tuple(failed)))


def _update_one(path: Path, update: BranchUpdate, tables: BranchTables) -> Result[None, ReleaseError]:
    try:
        document = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="document_invalid", message="failed to read file", hint=str(e)))

    edited = upsert_branch(document, update, tables)
    if isinstance(edited, Err):
        return edited

    try:
        write_text_atomic(path, edited.value)
    except OSError as e:
        return Err(ReleaseError(kind="write_failed", message="failed to write file", hint=str(e)))
    return Ok(None)


def replace_next_references(konflux_dir: Path, minor: str) -> Result[tuple[Path, ...], ReleaseError]:
    """Point top-level konflux configs at the release instead of ``next``.

    Only whole-word ``next`` is replaced, so names like ``nextgen`` survive.
    Subdirectories are not visited.
    """
    changed: list[Path] = []
    try:
        paths = sorted(p for p in konflux_dir.glob("*.yaml") if p.is_file())
        for path in paths:
            content = path.read_text(encoding="utf-8")
            updated = _NEXT_RE.sub(minor, content)
            if updated != content:
                write_text_atomic(path, updated)
                changed.append(path)
    except OSError as e:
        return Err(
            ReleaseError(kind="write_failed", message="failed to update konflux configs", hint=str(e))
        )
    return Ok(tuple(changed))
