"""Static release tables for OpenShift Pipelines.

All tables are immutable. Operations receive them as arguments so tests and
alternate deployments can inject their own.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType

from tekrel.services.release.model import (
    BranchRepo,
    EnvironmentProfile,
    FbcSettings,
    SubComponent,
)

# Locations inside the hack repository.
HACK_KONFLUX_DIR = ("config", "konflux")
HACK_REPOS_DIR = ("config", "konflux", "repos")

# Locations inside konflux-release-data.
RPA_DIR = (
    "config",
    "kflux-prd-rh02.0fk9.p1",
    "product",
    "ReleasePlanAdmission",
    "tekton-ecosystem",
)
RP_DIR = ("tenants-config", "cluster", "kflux-prd-rh02", "tenants", "tekton-ecosystem-tenant")
KUSTOMIZATION_FILE = "kustomization.yaml"
BUILD_MANIFESTS_SCRIPT = ("tenants-config", "build-manifests.sh")

ENVIRONMENTS: tuple[str, ...] = ("stage", "prod")
DEFAULT_OCP_VERSIONS: tuple[str, ...] = ("4-15", "4-16", "4-17", "4-18", "4-19")

BRANCH_REPOS: tuple[BranchRepo, ...] = (
    BranchRepo(name="pipeline", remote="tektoncd-pipeline"),
    BranchRepo(name="triggers", remote="tektoncd-triggers"),
    BranchRepo(name="chains", remote="tektoncd-chains"),
    BranchRepo(name="results", remote="tektoncd-results"),
    BranchRepo(name="cli", remote="tektoncd-cli"),
    BranchRepo(name="hub", remote="tektoncd-hub"),
    BranchRepo(name="pac", remote="pac-downstream"),
    BranchRepo(name="cache", remote="tekton-caches"),
    BranchRepo(name="git-init", remote="tektoncd-git-clone"),
    BranchRepo(name="operator", remote="operator"),
    BranchRepo(name="hack", remote="hack"),
    BranchRepo(name="manual-approval-gate", remote=None, skip=True),
    BranchRepo(name="opc", remote=None, skip=True),
    BranchRepo(name="console-plugin", remote=None, skip=True),
    BranchRepo(name="tektoncd-pruner", remote=None, skip=True),
    BranchRepo(name="tekton-caches", remote=None, skip=True),
)

# Insertion order is generation order.
RELEASE_GROUPS: Mapping[str, tuple[SubComponent, ...]] = MappingProxyType(
    {
        "cli": (SubComponent(name="tkn", repository="pipelines-cli-tkn-rhel9"),),
        "core": (
            SubComponent(name="controller", repository="pipelines-core-controller-rhel9"),
            SubComponent(name="webhook", repository="pipelines-core-webhook-rhel9"),
        ),
        "operator": (
            SubComponent(name="operator", repository="pipelines-rhel9-operator"),
            SubComponent(name="proxy", repository="pipelines-operator-proxy-rhel9"),
            SubComponent(name="webhook", repository="pipelines-operator-webhook-rhel9"),
        ),
        "fbc": (),
    }
)

ENVIRONMENT_PROFILES: Mapping[tuple[str, bool], EnvironmentProfile] = MappingProxyType(
    {
        ("stage", False): EnvironmentProfile(
            registry_host="registry.stage.redhat.io",
            policy="registry-standard-stage",
            intention="staging",
            service_account="release-registry-staging",
            business_unit="application-developer",
        ),
        ("prod", False): EnvironmentProfile(
            registry_host="registry.redhat.io",
            policy="registry-standard",
            intention="production",
            service_account="release-registry-prod",
            business_unit="application-developer",
        ),
        ("stage", True): EnvironmentProfile(
            registry_host="registry.stage.redhat.io",
            policy="fbc-tekton-ecosystem-stage",
            intention="staging",
            service_account="release-index-image-staging",
            business_unit="hybrid-platforms",
        ),
        ("prod", True): EnvironmentProfile(
            registry_host="registry.redhat.io",
            policy="fbc-tekton-ecosystem-prod",
            intention="production",
            service_account="release-index-image-prod",
            business_unit="hybrid-platforms",
        ),
    }
)

_OCP_PLACEHOLDER = "{{ OCP_VERSION }}"

FBC_SETTINGS: Mapping[str, FbcSettings] = MappingProxyType(
    {
        "stage": FbcSettings(
            staged_index=True,
            from_index=f"registry-proxy.engineering.redhat.com/rh-osbs/iib-pub-pending:{_OCP_PLACEHOLDER}",
            target_index="",
            publishing_credentials="staged-index-fbc-publishing-credentials",
            request_timeout_seconds=1500,
            build_timeout_seconds=1500,
            allowed_packages=("openshift-pipelines-operator-rh",),
        ),
        "prod": FbcSettings(
            from_index=f"registry-proxy.engineering.redhat.com/rh-osbs/iib-pub:{_OCP_PLACEHOLDER}",
            target_index=f"quay.io/redhat-prod/redhat----redhat-operator-index:{_OCP_PLACEHOLDER}",
            publishing_credentials="fbc-production-publishing-credentials-redhat-prod",
            request_timeout_seconds=1500,
            build_timeout_seconds=1500,
            allowed_packages=("openshift-pipelines-operator-rh",),
        ),
    }
)


@dataclass(frozen=True, slots=True)
class BranchTables:
    """Lookup tables for the hack repo branch editor.

    Attributes:
        component_names: repo config ``name`` -> logical component name
        special_components: components whose branch is named after their
            own upstream version instead of the release train
    """

    component_names: Mapping[str, str]
    special_components: frozenset[str]


DEFAULT_BRANCH_TABLES = BranchTables(
    component_names=MappingProxyType(
        {
            "tektoncd-pipeline": "pipeline",
            "tektoncd-chains": "chains",
            "tektoncd-git-clone": "git-init",
            "operator": "operator",
            "pac-downstream": "pac",
            "tektoncd-cli": "cli",
            "tektoncd-hub": "hub",
            "tektoncd-results": "results",
            "tektoncd-triggers": "triggers",
            "manual-approval-gate": "manual-approval-gate",
            "tekton-caches": "cache",
            "tektoncd-pruner": "pruner",
        }
    ),
    special_components=frozenset({"manual-approval-gate", "cache", "pruner"}),
)
