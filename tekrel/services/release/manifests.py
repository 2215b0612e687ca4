"""ReleasePlanAdmission / ReleasePlan manifest rendering.

Documents are rendered line by line from a ``GenerationTask``. Values of the
form ``{{ git_sha }}`` and ``{{ OCP_VERSION }}`` are placeholders for the
release pipeline and are emitted verbatim.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from tekrel.core.result import Err, Ok, Result
from tekrel.platform.files import write_text_atomic
from tekrel.services.release.errors import ReleaseError
from tekrel.services.release.matrix import fbc_settings
from tekrel.services.release.model import GenerationTask
from tekrel.services.release.version import ResolvedRelease

_PRODUCT_ID = 604
_PRODUCT_NAME = "Red Hat OpenShift Pipelines"
_DOCS_URL = "https://docs.redhat.com/en/documentation/red_hat_openshift_pipelines"
_RELEASE_NAMESPACE = "rhtap-releng-tenant"
_ORIGIN_TENANT = "tekton-ecosystem-tenant"
_CATALOG_URL = "https://github.com/konflux-ci/release-service-catalog.git"
_FBC_PIPELINE = "pipelines/managed/fbc-release/fbc-release.yaml"
_ADVISORY_PIPELINE = "pipelines/managed/rh-advisories/rh-advisories.yaml"

_SOLUTION = (
    "Red Hat OpenShift Pipelines is a cloud-native, continuous integration and",
    "continuous delivery (CI/CD) solution based on Kubernetes resources.",
    "It uses Tekton building blocks to automate deployments across multiple",
    "platforms by abstracting away the underlying implementation details.",
    "Tekton introduces a number of standard custom resource definitions (CRDs)",
    "for defining CI/CD pipelines that are portable across Kubernetes distributions.",
)

_TITLE_EXCEPTIONS = {"cli": "CLI", "fbc": "FBC"}


@dataclass(frozen=True, slots=True)
class RenderedDocuments:
    admission: str
    release_plan: str | None


@dataclass(frozen=True, slots=True)
class WrittenDocuments:
    admissions: tuple[Path, ...]
    release_plans: tuple[Path, ...]


def component_title(group: str) -> str:
    """Human-readable group name: "core" -> "Core", "cli" -> "CLI"."""
    if group in _TITLE_EXCEPTIONS:
        return _TITLE_EXCEPTIONS[group]
    return re.sub(r"\b[a-z]", lambda m: m.group().upper(), group)


def admission_name(task: GenerationTask, minor: str) -> str:
    if task.is_fbc:
        return f"openshift-pipelines-{minor}-fbc-{task.environment}"
    return f"openshift-pipelines-{task.group}-{minor}-{task.environment}"


def admission_file_name(task: GenerationTask, minor: str) -> str:
    return f"{admission_name(task, minor)}.yaml"


def release_plan_file_name(task: GenerationTask, minor: str) -> str:
    return f"openshift-pipelines-{task.group}-{minor}-{task.environment}-release-as-op.yaml"


def _fbc_data_lines(task: GenerationTask) -> list[str]:
    fbc = fbc_settings(task.environment)
    lines = ["    fbc:", "      allowedPackages:"]
    lines += [f"        - {pkg}" for pkg in fbc.allowed_packages]
    lines.append(f"      buildTimeoutSeconds: {fbc.build_timeout_seconds}")
    lines.append(f"      fromIndex: {fbc.from_index}")
    lines.append(f"      publishingCredentials: {fbc.publishing_credentials}")
    lines.append(f"      requestTimeoutSeconds: {fbc.request_timeout_seconds}")
    if fbc.staged_index:
        lines.append("      stagedIndex: true")
    target = fbc.target_index or '""'
    lines.append(f"      targetIndex: {target}")
    return lines


def _mapping_lines(task: GenerationTask, minor: str, full_version: str) -> list[str]:
    lines = ["    mapping:", "      components:"]
    for sub in task.sub_components:
        lines.append(f"        - name: tektoncd-{task.group}-{minor}-{sub.name}")
        lines.append(
            f'          repository: "{task.profile.registry_host}/openshift-pipelines/{sub.repository}"'
        )
        lines.append("          pushSourceContainer: true")
    lines += [
        "      defaults:",
        "        tags:",
        '          - "{{ git_sha }}"',
        '          - "{{ git_short_sha }}"',
        f'          - "v{full_version}"',
        f'          - "v{full_version}-{{{{ timestamp }}}}"',
    ]
    return lines


def render_admission(task: GenerationTask, minor: str, resolved: ResolvedRelease) -> str:
    """Render the ReleasePlanAdmission for one matrix cell."""
    profile = task.profile
    lines = [
        "apiVersion: appstudio.redhat.com/v1alpha1",
        "kind: ReleasePlanAdmission",
        "metadata:",
        "  labels:",
        '    release.appstudio.openshift.io/block-releases: "false"',
        f"    pp.engineering.redhat.com/business-unit: {profile.business_unit}",
        f"  name: {admission_name(task, minor)}",
        f"  namespace: {_RELEASE_NAMESPACE}",
        "  annotations:",
        "    rhel_target: el9",
        "spec:",
    ]
    if task.is_fbc:
        lines.append("  applications:")
        lines += [f"    - openshift-pipelines-index-{ocp}-{minor}" for ocp in task.ocp_versions]
    else:
        lines.append(f"  applications: [ openshift-pipelines-{task.group}-{minor} ]")

    lines += [
        f"  origin: {_ORIGIN_TENANT}",
        f"  policy: {profile.policy}",
        "  data:",
        "    releaseNotes:",
        f"      product_id: [ {_PRODUCT_ID} ]",
        f'      product_name: "{_PRODUCT_NAME}"',
        f"      product_version: {'fbc' if task.is_fbc else resolved.full_version}",
    ]
    if task.is_fbc:
        lines += ["      references:", f'        - "{_DOCS_URL}/"']
    lines.append(f'      type: "{resolved.release_type}"')

    if task.is_fbc:
        lines += _fbc_data_lines(task)
    else:
        lines += _mapping_lines(task, minor, resolved.full_version)

    lines += [
        f"    intention: {profile.intention}",
        "  pipeline:",
        f"    serviceAccountName: {profile.service_account}",
        "    timeouts:",
        '      pipeline: "10h0m0s"',
        "      tasks: 10h0m0s",
        "    pipelineRef:",
        "      resolver: git",
        "      params:",
        "        - name: url",
        f'          value: "{_CATALOG_URL}"',
        "        - name: revision",
        "          value: production",
        "        - name: pathInRepo",
        f'          value: "{_FBC_PIPELINE if task.is_fbc else _ADVISORY_PIPELINE}"',
    ]
    return "\n".join(lines) + "\n"


def render_release_plan(task: GenerationTask, minor: str, resolved: ResolvedRelease) -> str:
    title = component_title(task.group)
    full = resolved.full_version
    rpa = admission_name(task, minor)
    lines = [
        "apiVersion: appstudio.redhat.com/v1alpha1",
        "kind: ReleasePlan",
        "metadata:",
        "  labels:",
        '    release.appstudio.openshift.io/auto-release: "false"',
        '    release.appstudio.openshift.io/standing-attribution: "true"',
        f"    release.appstudio.openshift.io/releasePlanAdmission: {rpa}",
        f"  name: {rpa}-release-as-op",
        "spec:",
        f"  application: openshift-pipelines-{task.group}-{minor}",
        f"  target: {_RELEASE_NAMESPACE}",
        "  data:",
        "    releaseNotes:",
        "      references:",
        f'        - "{_DOCS_URL}"',
        f'      type: "{resolved.release_type}"',
        "      solution: |",
        *(f"        {line}" for line in _SOLUTION),
        f'      description: "The {full} release of {_PRODUCT_NAME} {title}."',
        "      topic: |",
        f"        The {full} GA release of {_PRODUCT_NAME} {title}.",
        f"        For more details see [product documentation]({_DOCS_URL}).",
        f'      synopsis: "{_PRODUCT_NAME} Release {full}"',
    ]
    return "\n".join(lines) + "\n"


def render(task: GenerationTask, minor: str, resolved: ResolvedRelease) -> RenderedDocuments:
    """Render the admission and, for non-FBC groups, the release plan."""
    admission = render_admission(task, minor, resolved)
    if task.is_fbc:
        return RenderedDocuments(admission=admission, release_plan=None)
    return RenderedDocuments(
        admission=admission,
        release_plan=render_release_plan(task, minor, resolved),
    )


def write_documents(
    *,
    admission_dir: Path,
    release_plan_dir: Path,
    tasks: Sequence[GenerationTask],
    minor: str,
    resolved: ResolvedRelease,
) -> Result[WrittenDocuments, ReleaseError]:
    """Render and write every task; existing files are overwritten.

    Stops at the first failure. Files already written stay on disk.
    """
    admissions: list[Path] = []
    plans: list[Path] = []
    for task in tasks:
        docs = render(task, minor, resolved)
        outputs = [(admission_dir / admission_file_name(task, minor), docs.admission)]
        if docs.release_plan is not None:
            outputs.append((release_plan_dir / release_plan_file_name(task, minor), docs.release_plan))

        for path, content in outputs:
            try:
                write_text_atomic(path, content)
            except OSError as e:
                return Err(
                    ReleaseError(
                        kind="write_failed",
                        message=f"failed to write {path.name}",
                        hint=str(e),
                    )
                )
        admissions.append(outputs[0][0])
        if len(outputs) > 1:
            plans.append(outputs[1][0])

    return Ok(WrittenDocuments(admissions=tuple(admissions), release_plans=tuple(plans)))


def update_kustomization(path: Path, file_names: Sequence[str]) -> Result[bool, ReleaseError]:
    """List file_names under ``resources:``; returns whether the file changed.

    Names already listed are left alone. A file without ``resources:`` gets
    the key appended.
    """
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        return Err(
            ReleaseError(kind="write_failed", message="failed to read kustomization.yaml", hint=str(e))
        )

    lines = content.splitlines()
    listed = {ln.strip() for ln in lines}
    missing = [f"  - {name}" for name in file_names if f"- {name}" not in listed]
    if not missing:
        return Ok(False)

    updated: list[str] = []
    found = False
    for line in lines:
        updated.append(line)
        if not found and line.strip() == "resources:":
            found = True
            updated += missing
    if not found:
        updated += ["resources:", *missing]

    try:
        write_text_atomic(path, "\n".join(updated) + "\n")
    except OSError as e:
        return Err(
            ReleaseError(kind="write_failed", message="failed to write kustomization.yaml", hint=str(e))
        )
    return Ok(True)
