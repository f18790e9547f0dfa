from __future__ import annotations

TOOL_NAME = "Discord Share"
__version__ = "0.3.0"

__all__ = ["TOOL_NAME", "__version__"]
