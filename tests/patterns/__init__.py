"""
Pattern Detector Tests

Test suites for band reversal, capitulation gap, cup with handle and
market sentiment detection.
"""
