"""waffles-mcp entry point.

Supports: python -m waffles_mcp
"""

from .app import main

if __name__ == "__main__":
    main()
