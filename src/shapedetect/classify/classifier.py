"""
Shape classification from contour geometry.

Each contour either becomes exactly one DetectedShape or is rejected. The
checks run in a fixed order and the first decisive one wins:

1. circularity above the threshold is a circle
2. boxes more elongated than the aspect limit are strokes or text, rejected
3. the decision table maps corrected vertex count and solidity to a type
"""

from shapedetect.classify.features import compute_features
from shapedetect.classify.rules import load_rules, match_rule
from shapedetect.models import DetectedShape, ShapeType

REJECT_ELONGATED = "elongated"
REJECT_NO_RULE = "no_rule"


def classify_features(features, metrics, config, rules=None):
    """
    Decide the shape for precomputed features.

    Returns:
        (DetectedShape or None, rejection reason or "")
    """
    if rules is None:
        rules = load_rules(config.classify.rules)

    if features.circularity > config.classify.circularity_threshold:
        return _make_shape(ShapeType.CIRCLE, min(features.circularity, 0.99), metrics), ""

    if features.aspect_ratio > config.classify.aspect_ratio_reject_above:
        return None, REJECT_ELONGATED

    rule = match_rule(rules, features.vertex_count, features.solidity)
    if rule is None:
        return None, REJECT_NO_RULE

    return _make_shape(rule.shape_type, rule.confidence, metrics), ""


def classify_contour(contour, metrics, config, rules=None):
    """
    Classify one contour.

    Returns:
        DetectedShape, or None when the contour is rejected
    """
    features = compute_features(contour, metrics, config)
    shape, _ = classify_features(features, metrics, config, rules)
    return shape


def _make_shape(shape_type, confidence, metrics):
    return DetectedShape(
        type=shape_type,
        confidence=confidence,
        bounding_box=metrics.bounding_box,
        center=metrics.center,
        area=metrics.area,
    )
