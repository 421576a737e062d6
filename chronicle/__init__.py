"""
Crown Chronicle - Narrative card engine for a court-intrigue game

A data-driven engine that deals characters and event cards into a
reign, draws events by weighted chance and resolves the player's
choices. It provides:
- Event card pools gated by activation, removal and trigger conditions
- Weighted event selection
- Choice effects on the emperor, characters and factions
- Game-over detection and turn history
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
