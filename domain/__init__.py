"""RF Link Planner Domain Layer.

This package contains the core business logic organized by bounded contexts:
- terrain: Great-circle math, tangent-plane projection, elevation profiles
- coverage: Fresnel-zone geometry for point-to-point radio links
- siting: Towers, links, the link graph store and placement rules
"""

# Imports alphabetized per project style (isort)
from domain import coverage, siting, terrain

__all__ = ["coverage", "siting", "terrain"]
