"""Coverage Bounded Context.

Responsible for RF clearance geometry:
- Value Objects: FresnelPolygon, LinkSummary
- Services: Fresnel radius formulas and the Fresnel envelope builder
"""
