"""
hull_gen/enums.py - Hull generation enumerations.
"""

from enum import Enum


class ModelStyle(Enum):
    """Render style tag. Passed through to the viewer; geometry ignores it."""
    WIREFRAME = "Wireframe Blueprint"
    CLAY = "Clay Render"
    PHOTOREALISTIC = "Photorealistic Metallic"
    CYBERPUNK = "Cyberpunk Hologram"


class MeshPart(Enum):
    """Named parts of a generated ship mesh, in emission order."""
    HULL = "hull"
    DECK = "deck"
    SUPERSTRUCTURE = "superstructure"
    TURRET = "turret"
