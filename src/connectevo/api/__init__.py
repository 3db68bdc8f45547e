"""HTTP surface for training previews and human-vs-agent play."""

from .app import create_app  # noqa: F401
