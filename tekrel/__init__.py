"""Release automation tools for OpenShift Pipelines."""

__version__ = "0.1.0"
