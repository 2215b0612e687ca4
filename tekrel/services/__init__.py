"""Service layer: release operations built on git, gh and the filesystem."""
