"""
Pytest configuration for the deptree test suite.

Environment Variables:
    DEPTREE_*: Resolver settings. The shared fixtures build their own
        Settings with ``_env_file=None`` so a local .env does not leak in.
"""


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "integration: mark test as a full resolution run")
    config.addinivalue_line("markers", "slow: mark test as using simulated latency")
