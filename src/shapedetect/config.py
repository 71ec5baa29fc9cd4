"""
Configuration management for shape detection.

Every tuned constant of the pipeline lives here. Values load from YAML with
defaults for anything the file leaves out.
"""

import os
from dataclasses import dataclass, field, fields
from typing import List

import yaml


@dataclass
class EdgeConfig:
    """Configuration for Sobel edge detection."""
    threshold: float = 128.0
    border_policy: str = "zero"  # "zero" or "replicate"


@dataclass
class ContourConfig:
    """Configuration for contour tracing."""
    min_length: int = 30
    max_trace_steps: int = 20000


@dataclass
class FilterConfig:
    """Configuration for noise and duplicate contour filtering."""
    min_area: float = 50.0
    duplicate_center_tolerance: float = 15.0


@dataclass
class SimplifyConfig:
    """Configuration for contour simplification."""
    epsilon_fraction: float = 0.06  # of each contour's perimeter


@dataclass
class ClassifyConfig:
    """Configuration for shape classification."""
    circularity_threshold: float = 0.80
    closed_loop_tolerance: float = 10.0
    aspect_ratio_reject_above: float = 5.0
    # Empty means the built-in decision table
    rules: List[dict] = field(default_factory=list)


@dataclass
class TracingConfig:
    """Configuration for runtime tracing."""
    enabled: bool = False
    level: str = "INFO"
    file_path: str = None
    json_output: bool = False


@dataclass
class DebugConfig:
    """Configuration for debug artifact generation."""
    enabled: bool = False
    max_edge_scale: int = 1600


# Flat interface names of the tuned detection constants
FLAT_KEYS = {
    "edgeThreshold": ("edges", "threshold"),
    "minContourLength": ("contours", "min_length"),
    "minContourArea": ("filter", "min_area"),
    "duplicateCenterTolerance": ("filter", "duplicate_center_tolerance"),
    "simplifyEpsilonFraction": ("simplify", "epsilon_fraction"),
    "closedLoopTolerance": ("classify", "closed_loop_tolerance"),
    "aspectRatioRejectAbove": ("classify", "aspect_ratio_reject_above"),
    "circularityThreshold": ("classify", "circularity_threshold"),
}


@dataclass
class PipelineConfig:
    """Complete pipeline configuration."""
    edges: EdgeConfig = field(default_factory=EdgeConfig)
    contours: ContourConfig = field(default_factory=ContourConfig)
    filter: FilterConfig = field(default_factory=FilterConfig)
    simplify: SimplifyConfig = field(default_factory=SimplifyConfig)
    classify: ClassifyConfig = field(default_factory=ClassifyConfig)
    tracing: TracingConfig = field(default_factory=TracingConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)

    def as_flat(self):
        """Return the tuned detection constants under their interface names."""
        return {
            key: getattr(getattr(self, section), name)
            for key, (section, name) in FLAT_KEYS.items()
        }

    @classmethod
    def from_flat(cls, flat):
        """
        Build a config from interface names, as returned by as_flat().

        Missing keys keep their defaults and unknown keys are ignored.
        """
        config = cls()
        for key, value in flat.items():
            if key in FLAT_KEYS:
                section, name = FLAT_KEYS[key]
                setattr(getattr(config, section), name, value)
        return config


SECTIONS = ("edges", "contours", "filter", "simplify", "classify", "tracing", "debug")


def load_config(config_path=None):
    """
    Load configuration from YAML file.

    Falls back to defaults for any missing values.
    """
    config = PipelineConfig()

    if config_path and os.path.exists(config_path):
        with open(config_path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f) or {}

        config = _merge_config(config, yaml_data)

    return config


def _merge_config(config, yaml_data):
    """Merge YAML data into config dataclass, ignoring unknown keys."""
    for section_name in SECTIONS:
        section_data = yaml_data.get(section_name)
        if not section_data:
            continue
        section = getattr(config, section_name)
        for key, value in section_data.items():
            if hasattr(section, key):
                setattr(section, key, value)

    return config


def config_to_dict(config):
    """Convert a PipelineConfig into plain nested dicts."""
    return {
        section_name: {
            f.name: getattr(getattr(config, section_name), f.name)
            for f in fields(getattr(config, section_name))
        }
        for section_name in SECTIONS
    }


def save_default_config(path):
    """Save default configuration to YAML file for reference."""
    yaml_data = config_to_dict(PipelineConfig())

    # The decision table is written out so it can be edited in place
    from shapedetect.classify.rules import DEFAULT_RULES
    yaml_data["classify"]["rules"] = [rule.model_dump(mode="json") for rule in DEFAULT_RULES]

    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(yaml_data, f, default_flow_style=False, sort_keys=False)
