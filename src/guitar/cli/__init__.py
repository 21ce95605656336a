"""guitar CLI — export tar archives to directories and back."""

from ._helpers import main  # noqa: F401 — entry point

# Import command modules to register Click commands with the main group.
from . import _archive, _basic  # noqa: F401
