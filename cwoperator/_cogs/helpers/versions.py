"""
Detecting the operator's own version.

The codebase does not contain the version directly: it comes from the package
metadata when installed. The version is determined only once at import time.
"""
import importlib.metadata

version: str | None = None

try:
    name, *_ = __name__.split('.')  # usually "cwoperator", unless renamed/forked.
    version = importlib.metadata.version(name)
except importlib.metadata.PackageNotFoundError:
    pass  # running from a source tree, not installed.
