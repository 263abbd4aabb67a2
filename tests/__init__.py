"""
StreamWaves Test Suite

Test Categories:
- unit/: Fast, isolated unit tests
- integration/: API tests against a mocked upstream
- e2e/: Full player workflows
"""
