"""RedFox engine modules."""
