"""
Pydantic data models for detection results.

Everything the pipeline hands back to a caller is one of these validated,
immutable records.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ShapeType(str, Enum):
    """Shape classes the classifier can emit."""
    CIRCLE = "circle"
    TRIANGLE = "triangle"
    RECTANGLE = "rectangle"
    PENTAGON = "pentagon"
    STAR = "star"


class Coordinate(BaseModel):
    """A 2D position in image pixels."""
    x: float = 0.0
    y: float = 0.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class BoundingBox(BaseModel):
    """Axis-aligned box given by its top-left corner and extents."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class Metrics(BaseModel):
    """Geometry derived from one contour."""
    area: float = 0.0
    perimeter: float = 0.0
    bounding_box: BoundingBox = Field(default_factory=BoundingBox)
    center: Coordinate = Field(default_factory=Coordinate)

    model_config = ConfigDict(extra="forbid", frozen=True)


class ShapeFeatures(BaseModel):
    """Scores the classifier decides on."""
    circularity: float = 0.0
    hull_area: float = 0.0
    solidity: float = 0.0
    vertex_count: int = 0
    aspect_ratio: float = 0.0

    model_config = ConfigDict(extra="forbid", frozen=True)


class DetectedShape(BaseModel):
    """A classified shape found in the image."""
    type: ShapeType
    confidence: float = Field(..., ge=0.0, le=1.0)
    bounding_box: BoundingBox
    center: Coordinate
    area: float

    model_config = ConfigDict(extra="forbid", frozen=True)


class ContourCandidate(BaseModel):
    """One filtered contour and what the classifier made of it."""
    index: int
    point_count: int
    metrics: Metrics
    features: Optional[ShapeFeatures] = None
    shape: Optional[DetectedShape] = None
    rejection: str = ""

    model_config = ConfigDict(extra="forbid", frozen=True)


class DetectionResult(BaseModel):
    """Output of one detection pass."""
    shapes: List[DetectedShape] = Field(default_factory=list)
    image_width: int
    image_height: int
    processing_time_ms: float = 0.0

    model_config = ConfigDict(extra="forbid")

    def count_by_type(self):
        """Count detected shapes per type."""
        counts = {}
        for shape in self.shapes:
            counts[shape.type.value] = counts.get(shape.type.value, 0) + 1
        return counts
