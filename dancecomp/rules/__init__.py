"""Engine rules: pydantic schema and YAML loader."""

from .loader import load_rules, parse_rules
from .models import DEFAULT_RULES, Rules

__all__ = ["DEFAULT_RULES", "Rules", "load_rules", "parse_rules"]
