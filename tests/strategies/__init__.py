"""
Strategy Tests

Test suites for the strategy registry, the per-family action streams and
chart signal points.
"""
