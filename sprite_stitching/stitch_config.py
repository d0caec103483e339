# Configuration for sprite rotation and stitching
import json
import logging
import math
import os

from sprite_stitching.domain.errors import StitchJobError
from sprite_stitching.domain.models import StitchJob, StitchingOrder, StitchingQuality

logger = logging.getLogger(__name__)

# Pixel defaults (RGBA, fully transparent gaps)
DEFAULT_CHANNELS = 4
DEFAULT_EMPTY_PIXEL = (0, 0, 0, 0)

# Rotation quality: 3 passes of Scale2x = 8x working resolution
FANCY_UPSCALE_PASSES = 3

DEFAULT_STITCHING_ORDER = StitchingOrder.APPENDAGE_ON_TOP.value
DEFAULT_STITCHING_QUALITY = StitchingQuality.FANCY.value

# Opt-in tracing of pipeline stages
TRACE_ENV_VAR = "SPRITE_STITCH_TRACE"
_TRUTHY = ("1", "true", "yes", "on")
_trace_override = None


def is_trace_enabled():
    """True when pipeline stages should log their intermediate geometry."""
    if _trace_override is not None:
        return _trace_override
    return os.environ.get(TRACE_ENV_VAR, "").strip().lower() in _TRUTHY


def set_trace_enabled(enabled):
    """Force tracing on or off; None falls back to the environment variable."""
    global _trace_override
    _trace_override = None if enabled is None else bool(enabled)


def degrees_to_radians(angle_degrees):
    return math.pi * float(angle_degrees) / 180.0


def _read_angle(entry, where):
    if "angle_degrees" in entry:
        return degrees_to_radians(entry["angle_degrees"])
    if "angle" in entry:
        return float(entry["angle"])
    raise StitchJobError(f"{where} needs 'angle' (radians) or 'angle_degrees'")


def _read_anchor(entry, where):
    anchor = entry.get("anchor")
    if not isinstance(anchor, (list, tuple)) or len(anchor) != 2:
        raise StitchJobError(f"{where} needs an 'anchor' of the form [x, y]")
    x, y = anchor
    if not isinstance(x, int) or not isinstance(y, int) or x < 0 or y < 0:
        raise StitchJobError(f"{where} anchor must hold two non-negative integers, got {anchor}")
    return (x, y)


def parse_stitch_job(job_data):
    """Build a StitchJob from the decoded JSON structure of a job file."""
    if not isinstance(job_data, dict):
        raise StitchJobError("Stitch job must be a JSON object")
    appendage = job_data.get("appendage")
    if not isinstance(appendage, dict):
        raise StitchJobError("Stitch job is missing the 'appendage' entry")
    frames = job_data.get("frames")
    if not isinstance(frames, list) or not frames:
        raise StitchJobError("Stitch job needs a non-empty 'frames' list")

    try:
        order = StitchingOrder(job_data.get("order", DEFAULT_STITCHING_ORDER))
        quality = StitchingQuality(job_data.get("quality", DEFAULT_STITCHING_QUALITY))
    except ValueError as e:
        raise StitchJobError(f"Invalid stitch job option: {e}") from e

    return StitchJob(
        appendage_anchor=_read_anchor(appendage, "appendage"),
        appendage_angle=_read_angle(appendage, "appendage"),
        frame_anchors=[_read_anchor(f, f"frame {i}") for i, f in enumerate(frames)],
        frame_angles=[_read_angle(f, f"frame {i}") for i, f in enumerate(frames)],
        order=order,
        quality=quality
    )


def load_stitch_job(job_file_path):
    """Loads anchors and angles for a stitching run from a JSON file."""
    try:
        with open(job_file_path, "r") as f:
            job_data = json.load(f)
    except json.JSONDecodeError as e:
        raise StitchJobError(f"Could not parse stitch job {job_file_path}: {e}") from e
    job = parse_stitch_job(job_data)
    logger.info("Stitch job loaded: %s (%d frames)", job_file_path, len(job.frame_anchors))
    return job


def save_stitch_job(job_file_path, job):
    """Saves a StitchJob to a JSON file, angles stored in radians."""
    job_data = {
        "appendage": {
            "anchor": [job.appendage_anchor.x, job.appendage_anchor.y],
            "angle": job.appendage_angle
        },
        "frames": [
            {"anchor": [anchor.x, anchor.y], "angle": angle}
            for anchor, angle in zip(job.frame_anchors, job.frame_angles)
        ],
        "order": job.order.value,
        "quality": job.quality.value
    }
    directory = os.path.dirname(job_file_path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(job_file_path, "w") as f:
        json.dump(job_data, f, indent=4)
    logger.info("Stitch job saved: %s", job_file_path)
