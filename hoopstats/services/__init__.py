"""
Services module for the live-game core and its persistence wrappers.

This module organizes services into:
- game_state: Pure game state machine (roster, lineup, quarters, substitutions)
- base_service: Shared session holder and write guard (rollback + logging)
- stat_ledger: Pure action log and box score folding
- career_aggregator: Pure career totals/averages over completed games
- game_service, stats_service, team_service, player_service: Database-backed
  read-modify-write wrappers used by the API routes
"""
