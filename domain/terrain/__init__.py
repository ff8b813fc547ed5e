"""Terrain Bounded Context.

Responsible for physical geography and spatial calculations:
- Value Objects: GeoPoint, BoundingBox, TerrainGrid, ElevationProfile
- Services: haversine distance, tangent-plane scaling, elevation sampling
- Ports: ElevationRepository
"""
