"""
Test suite for the chat load test.

This package contains:
- unit/: parsing, session tracking, metrics, thresholds and Locust
  users driven through a fake HTTP session
- integration/: the stub chat server and live end-to-end user runs
"""
