"""Helpers for tests: a mock chain client, comparisons and test contracts."""