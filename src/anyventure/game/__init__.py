"""Game rules for Anyventure characters."""
