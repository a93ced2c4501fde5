"""
Morpion Solitaire core Python package.

Pure rules engine plus the thin adapters that drive it.
Modules:
- board.py: Point, Line, geometry helpers
- state.py: GridState, Variant
- moves.py: legality, move application and undo, possibility enumeration
- seed.py: starting cross
- session.py: GameSession and the turn state machine
- config.py, logging_config.py: settings and logging
- export.py, db.py: game files and score storage
- cli.py: terminal driver
"""
