"""
Decision table mapping vertex count and solidity to a shape type.

The thresholds were tuned empirically against a small image corpus. They are
kept as data so the table can be retuned from the YAML config.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from shapedetect.models import ShapeType


class ShapeRule(BaseModel):
    """One row of the decision table."""
    vertices: int = Field(..., ge=1)
    shape_type: ShapeType
    confidence: float = Field(..., ge=0.0, le=1.0)
    min_solidity: Optional[float] = None  # exclusive
    max_solidity: Optional[float] = None
    max_inclusive: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)

    def matches(self, vertex_count, solidity):
        """Check a corrected vertex count and solidity against this row."""
        if vertex_count != self.vertices:
            return False
        if self.min_solidity is not None and not solidity > self.min_solidity:
            return False
        if self.max_solidity is not None:
            if self.max_inclusive:
                return solidity <= self.max_solidity
            return solidity < self.max_solidity
        return True


DEFAULT_RULES = (
    ShapeRule(vertices=3, min_solidity=0.9, shape_type=ShapeType.TRIANGLE, confidence=0.90),
    ShapeRule(vertices=4, min_solidity=0.9, shape_type=ShapeType.RECTANGLE, confidence=0.92),
    ShapeRule(vertices=5, min_solidity=0.8, shape_type=ShapeType.PENTAGON, confidence=0.88),
    ShapeRule(vertices=5, min_solidity=0.3, max_solidity=0.8, max_inclusive=True,
              shape_type=ShapeType.STAR, confidence=0.82),
    # Stars whose inner corners survive simplification
    ShapeRule(vertices=10, max_solidity=0.8, shape_type=ShapeType.STAR, confidence=0.82),
)


def load_rules(rule_data=None):
    """
    Build the decision table from config entries.

    Falls back to DEFAULT_RULES when no entries are given.
    """
    if not rule_data:
        return DEFAULT_RULES
    return tuple(ShapeRule.model_validate(entry) for entry in rule_data)


def match_rule(rules, vertex_count, solidity):
    """Return the first rule matching, or None."""
    for rule in rules:
        if rule.matches(vertex_count, solidity):
            return rule
    return None
