"""Entry point for ``python -m mythicdm <command>``.

Commands:
    narrate    : narrate one turn from a JSON input file (or stdin)
    spell-name : escalated spell name for a base spell, rank, rarity and escalation
    board      : board intro (opener + lead line) for a board type
    title      : reputation tier, display name and title
    spectacle  : spectacle line for a cast
    mode       : resolved narrator mode (ai / procedural / hybrid)
"""
from mythicdm.cli import main

if __name__ == "__main__":
    main()
