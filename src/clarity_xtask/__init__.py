"""clarity-xtask: project-local build tasks for the clarity-lsp workspace."""

__version__ = "0.1.0"
