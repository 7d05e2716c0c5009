# =============================================================================
# Services Package — Business Logic
# =============================================================================
# Contains the query contract, separated from API handlers:
#   - query_builder.py: untrusted params → validated QueryDescriptor
#   - record_store.py: RecordStore protocol (SQL and in-memory backends)
#   - records.py: RecordService (list, get-by-id, export)
#   - rate_limiter.py: Redis sliding-window limiter per client IP
# =============================================================================
