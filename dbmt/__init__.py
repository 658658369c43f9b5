"""
Database Migration Tool

Backend for the migration dashboard: a step-gated configuration wizard and a
small orchestration service that records migrations, scores their complexity
and simulates their progress.

Supports:
- Dry-run complexity analysis (score, time estimate, recommendations)
- Simulated migration runs with progress logs
- Canned post-migration validation reports
- A requests-based client for the HTTP surface
"""

__version__ = "0.1.0"
