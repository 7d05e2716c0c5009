# =============================================================================
# Personal Records API
# =============================================================================
# A searchable, sortable, paginated read API over the `personaldata` table.
#
# Package structure:
#   app/
#   ├── api/          → FastAPI routers, dependencies, middleware, handlers
#   ├── db/           → Database engine, session, and ORM models
#   ├── models/       → Pydantic V2 response schemas
#   └── services/     → Query builder, record store backends, record service
# =============================================================================
