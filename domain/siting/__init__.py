"""Siting Bounded Context.

Responsible for where towers go and how they connect:
- Entities: Tower, Link (with canonical LinkKey identity)
- Aggregate: LinkGraphStore (towers, links and derived caches)
- Services: land/water placement classification
- Ports: GeocodingRepository
"""
