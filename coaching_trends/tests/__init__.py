'''
Coaching Trends Test Suite

Test Modules:
-------------
- test_tiering.py: Tier thresholds (50 / 100), week grouping from Sunday
- test_sampling.py: Stratified weekly sampling
  - Exact target size, date order, first and last call kept
  - Sparse-week trimming keeps the earliest and latest weeks
- test_chunking.py: Week-aligned chunks between the min and max size
  - Small trailing chunks merged, oversized weeks split
- test_synthesis.py: Failure classification and the synthesis invoker
- test_synthesis_client.py: Gateway payloads and responses (httpx.MockTransport)
- test_hierarchical.py: Map/reduce over chunks, fail-fast chunk errors,
  bounded concurrent chunk runner
- test_cache.py: Count-keyed rep cache, TTL-keyed aggregate cache
- test_contributions.py: Per-rep contributions for team/org analyses
- test_coaching_summary.py: Statistical summary without synthesis
- test_trends.py: TrendService end to end over in-memory fakes
- test_stores.py: Postgres stores over a mocked asyncpg pool
- test_api.py: HTTP status mapping and request validation

Running Tests:
--------------
    pip install -e ".[test]"
    pytest -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
