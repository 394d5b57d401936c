"""RTB Core Platform Module.

Shared infrastructure used by the admin console:
- Repository base over the PostgreSQL pool
- Authentication user model and profile lookup
- Logging configuration and API helpers
"""
