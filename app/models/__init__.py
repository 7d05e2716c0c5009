# =============================================================================
# Models Package — Pydantic V2 Schemas
# =============================================================================
# Defines the response schemas for the API.
# These are SEPARATE from the database models (app/db/models.py) and from the
# service-layer dataclasses (app/services/records.py): the API contract can
# evolve without touching storage.
# =============================================================================
