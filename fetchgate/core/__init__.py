"""Fetch verification and orchestration core."""
