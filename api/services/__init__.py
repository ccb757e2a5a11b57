"""Service layer for business logic.

Layer hierarchy:
    Routes (HTTP) -> Services (Business Logic) -> Repositories (Database)

Services should:
- Contain all business rules
- Orchestrate calls to repositories
- Signal failures with domain exceptions

Services should NOT:
- Directly execute SQL queries (use repositories)
- Know about HTTP request/response details (status codes, response formatting)
"""
