"""
API routes for the stats tracker.

This module organizes routes into:
- teams: Team CRUD
- players: Player CRUD (created under a team)
- games: Game CRUD and live state transitions (roster, lineup, quarters, substitutions)
- stats: Stat recording/undo, game box scores and career stats
"""
