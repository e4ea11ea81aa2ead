"""Domain entities, money helpers and engine errors."""
