"""
Salesforce Integration API Package

Directory Structure:
├── routers/           # FastAPI route handlers
├── schemas/           # Pydantic models for API requests/responses
│   └── api_schemas.py # HTTP request/response structures
├── application/       # Use-case services (unit of work, accounts, PDF, Data Cloud)
├── domain/            # Record graph, errors, events and ports
├── infrastructure/    # Salesforce REST, connection resolver, Playwright renderer
└── config.py          # Application configuration

Record Identity Clarification:
1. **Temporary references** (domain.record_graph.RecordReference): placeholders
   for records registered in a unit of work that have no id yet
2. **Record ids**: permanent ids assigned by the org when the graph is committed

The API never persists anything itself; the invoking org owns every record
created through it.
"""
