# =============================================================================
# API Package — FastAPI Route Handlers
# =============================================================================
#   - records.py: list / get-by-id / export endpoints
#   - health.py: liveness probe
#   - deps.py: dependency wiring (store, service, record id guard)
#   - middleware.py: request timer, security headers, rate limiting
#   - errors.py: exception handlers (uniform error envelope)
# =============================================================================
