"""
Disasters Service package for the Disaster Response API.

This package exposes the FastAPI application for reporting disasters and
enriching them with third-party lookups:

- app.main: Application entrypoint that wires routes and lifecycle.
- app.caching: Cache-aside resolver, key convention and cache stores.
- app.adapters: HTTP clients for the external lookups.
- app.enrichment: Geocoding pipeline and the other cached lookups.
- app.records: Disaster/resource persistence and audit trail handling.
- app.auth: Header-based mock authentication.

Design notes:
- Module import must not perform network calls. All IO happens in
  route handlers or the lifespan hooks.
- Every external lookup goes through the resolver; adapters never cache.
"""
