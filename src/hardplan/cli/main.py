"""
CLI entry point using Typer.

Provides commands for program management:
- generate: Build a program from a profile
- blocks: Preview the weekly split
- validate: Check a program against programming rules
- log: Apply workout logs and advance targets
- shift / session: Handle missed or short days
- assess: Close a block and pick the next phase
- volume / progress / report / substitutes: Analysis helpers
"""

from .app import app
from .commands import analysis, planning, sessions  # noqa: F401  (register commands)

if __name__ == "__main__":
    app()
