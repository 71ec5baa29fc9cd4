"""
Main pipeline orchestrator for shape detection.

Runs grayscale conversion, edge detection, contour tracing, filtering and
classification in order over one image. detect() works on a raw pixel
buffer and needs no image library; the OpenCV-based io layer is only
loaded for file input and output.
"""

import os
import time
from collections.abc import Mapping

from shapedetect.classify.classifier import classify_features
from shapedetect.classify.features import compute_features
from shapedetect.classify.rules import load_rules
from shapedetect.config import PipelineConfig, load_config
from shapedetect.contours.filter import filter_contours, measure_contours
from shapedetect.contours.trace import find_contours
from shapedetect.geometry.simplify import simplify_contours
from shapedetect.models import ContourCandidate, DetectionResult
from shapedetect.preprocess.edges import sobel_edges
from shapedetect.preprocess.grayscale import to_grayscale
from shapedetect.tracer import get_tracer, trace


@trace(label="detect")
def detect(pixel_buffer, width, height, config=None, debug_writer=None):
    """
    Detect shapes in an RGBA pixel buffer.

    Args:
        pixel_buffer: interleaved RGBA values, width * height * 4 of them
        width: image width in pixels
        height: image height in pixels
        config: PipelineConfig, or a mapping of flat interface keys
            (see PipelineConfig.from_flat); defaults when None
        debug_writer: optional DebugArtifactWriter for stage artifacts

    Returns:
        DetectionResult; an image without shapes gives an empty shape list
    """
    tracer = get_tracer()
    start_time = time.perf_counter()

    if config is None:
        config = PipelineConfig()
    elif isinstance(config, Mapping):
        config = PipelineConfig.from_flat(config)

    with tracer.span("stage1_grayscale", module="pipeline", buffer=pixel_buffer, width=width, height=height):
        gray = to_grayscale(pixel_buffer, width, height)
        if debug_writer:
            debug_writer.save_image(gray, "stage1", "01_gray.png")

    with tracer.span("stage2_edges", module="pipeline", gray=gray):
        edges = sobel_edges(gray, config.edges.threshold, config.edges.border_policy)
        if debug_writer:
            debug_writer.save_image(edges, "stage2", "01_edges.png")

    with tracer.span("stage3_contours", module="pipeline", edges=edges):
        contours = find_contours(edges, config.contours.min_length, config.contours.max_trace_steps)
        if debug_writer:
            debug_writer.save_contour_overlay(gray, contours, "stage3", "01_contours_overlay.png")
            debug_writer.save_json(
                {"contour_count": len(contours), "point_counts": [len(c) for c in contours]},
                "stage3", "stage3_metrics.json",
            )

    with tracer.span("stage4_classify", module="pipeline", contours=contours):
        candidates = analyze_contours(contours, config)
        shapes = [c.shape for c in candidates if c.shape is not None]
        tracer.event("Classified", candidates=len(candidates), shapes=shapes)
        if debug_writer:
            debug_writer.save_json(
                [c.model_dump(mode="json") for c in candidates],
                "stage4", "candidates.json",
            )

    processing_time = (time.perf_counter() - start_time) * 1000
    result = DetectionResult(
        shapes=shapes,
        image_width=width,
        image_height=height,
        processing_time_ms=processing_time,
    )
    tracer.event(f"Detection complete in {processing_time:.1f}ms", counts=result.count_by_type())

    return result


def analyze_contours(contours, config):
    """
    Measure, filter, simplify and classify traced contours.

    Returns:
        list of ContourCandidate, one per contour that survived filtering,
        in discovery order
    """
    tracer = get_tracer()
    rules = load_rules(config.classify.rules)

    measured = measure_contours(contours)
    survivors = filter_contours(measured, config)
    index_of = {id(mc.contour): i for i, mc in enumerate(measured)}

    polygons = simplify_contours(
        [mc.contour for mc in survivors],
        config.simplify.epsilon_fraction,
        perimeters=[mc.metrics.perimeter for mc in survivors],
    )

    candidates = []
    for mc, vertices in zip(survivors, polygons):
        features = compute_features(mc.contour, mc.metrics, config, vertices=vertices)
        shape, rejection = classify_features(features, mc.metrics, config, rules)

        if shape is None:
            tracer.event(
                f"Rejected contour: {rejection} vertices={features.vertex_count} "
                f"solidity={features.solidity:.2f}",
                level="DEBUG",
                contour=mc.contour,
            )

        candidates.append(ContourCandidate(
            index=index_of[id(mc.contour)],
            point_count=len(mc.contour),
            metrics=mc.metrics,
            features=features,
            shape=shape,
            rejection=rejection,
        ))

    return candidates


@trace(label="detect_image_file")
def detect_image_file(path, config=None, config_path=None, out_dir=None, debug=False):
    """
    Load an image file, detect shapes and optionally write outputs.

    When out_dir is given, writes <stem>_detections.json and
    <stem>_overlay.png there, so several inputs can share one directory;
    with debug, stage artifacts go under out_dir/debug/<stem>/.

    Raises ValueError when the input cannot be read as an image.
    """
    from shapedetect.io.load_image import load_image, validate_image_inputs
    from shapedetect.io.save_artifacts import (
        DebugArtifactWriter, draw_detections, ensure_dir, save_image, save_json,
    )

    tracer = get_tracer()

    if config is None:
        config = load_config(config_path)

    if debug:
        config.debug.enabled = True

    errors = validate_image_inputs([path])
    if errors:
        for error in errors:
            tracer.event(error, level="ERROR")
        raise ValueError(f"Input validation failed: {errors}")

    rgba, metadata = load_image(path)
    stem = os.path.splitext(os.path.basename(path))[0]

    debug_writer = None
    if out_dir and config.debug.enabled:
        debug_writer = DebugArtifactWriter(
            out_dir, stem,
            enabled=True,
            max_edge=config.debug.max_edge_scale,
        )

    result = detect(rgba, metadata["width"], metadata["height"], config, debug_writer)

    if out_dir:
        ensure_dir(out_dir)
        save_json(result, os.path.join(out_dir, f"{stem}_detections.json"))
        save_image(draw_detections(rgba, result.shapes), os.path.join(out_dir, f"{stem}_overlay.png"))

    return result
