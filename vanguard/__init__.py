"""Tactical grid reasoning and utility-based decision making for turn-based agents."""
