"""
Coaching Trends Backend Package.

FastAPI service that turns per-call sales coaching evaluations into trend
analyses for a rep, a team, or the whole organization. Small batches are
synthesized in one pass, mid-sized batches are stratified-sampled, and large
batches are summarized week by week before a final synthesis.

Subpackages:
    - api: FastAPI route handlers
    - core: Configuration, database, errors and dependencies
    - models: Pydantic schemas and enums
    - services: Tiering, sampling, chunking, synthesis, caching, orchestration
    - sql: Parameterized SQL queries
"""

__version__ = "1.0.0"
