"""Controller logic for MarkdownView resources: model, admission, manifests, reconciliation."""

__version__ = "0.1.0"