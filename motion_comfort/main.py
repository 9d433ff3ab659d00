"""
Motion Comfort - Main Entry Point

Ties the per-frame pipeline together:
    Pose source -> Motion Analyzer -> Adaptive FOV  -> Camera
                                   -> Vignette Map  -> Compositor

The host render loop owns the clock and calls step() once per rendered
frame. For offline use the CLI replays a pose recording through the
same pipeline and reports the resulting intensities and latency.

Usage:
    python -m motion_comfort.main --input walk.bin
    python -m motion_comfort.main --input walk.bin --config config/settings.yaml -v
    python -m motion_comfort.main --input walk.bin --preview peak.npy
"""

import argparse
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

import numpy as np

from motion_comfort.effects.adaptive_fov import AdaptiveFovController
from motion_comfort.effects.compositor import VignetteCompositor
from motion_comfort.effects.vignette import VignetteMapper
from motion_comfort.motion.analyzer import MotionAnalyzer
from motion_comfort.recording import PoseFrame, load_recording
from motion_comfort.shared.types import PerspectiveCamera, VignetteUniforms
from motion_comfort.utils.config import (
    MotionConfig,
    config_from_dict,
    load_config,
    validate_config,
)
from motion_comfort.utils.safety import FrameLimiter, as_quaternion, as_vector3

logger = logging.getLogger(__name__)

# Per-frame processing above this is logged as a warning (ms)
LATENCY_WARN_MS = 5.0

# Progress is logged every this many replayed frames
LOG_INTERVAL_FRAMES = 60

# Size of the --preview frame (rows, columns)
PREVIEW_SHAPE = (180, 320)


@dataclass(frozen=True)
class FrameResult:
    """Everything the pipeline produced for one frame."""

    intensity: float
    fov: float
    fov_applied: bool
    uniforms: VignetteUniforms


class ComfortPipeline:
    """
    Main application class that orchestrates all components.

    Flow:
        Pose -> Analyzer -> {FOV Controller -> Camera, Vignette Mapper -> Compositor}

    The FOV controller and vignette mapper only read the analyzer output,
    so their order does not matter.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None,
                 compositor_sink: Optional[Callable[[VignetteUniforms], None]] = None):
        """
        Initialize the pipeline.

        Args:
            config: Full configuration dict (see DEFAULT_CONFIG). Loaded
                from config/settings.yaml when None.
            compositor_sink: Called with the vignette uniforms every frame
        """
        self.config = config if config is not None else load_config()
        self.compositor_sink = compositor_sink

        self.motion_config: Optional[MotionConfig] = None
        self.analyzer: Optional[MotionAnalyzer] = None
        self.fov_controller: Optional[AdaptiveFovController] = None
        self.vignette: Optional[VignetteMapper] = None
        self.camera: Optional[PerspectiveCamera] = None
        self.frame_limiter: Optional[FrameLimiter] = None

        # latency tracking
        self._latency_samples: list = []
        self._max_latency_samples = 100
        self._slow_frames = 0
        self._frame_count = 0

    @property
    def frame_count(self) -> int:
        return self._frame_count

    def setup(self):
        """Initialize all components."""
        logger.info("Setting up comfort pipeline...")

        self.motion_config = validate_config(config_from_dict(self.config.get("motion")))
        # an empty section in the settings file loads as None
        vignette_cfg = self.config.get("vignette") or {}
        pipeline_cfg = self.config.get("pipeline") or {}

        self.analyzer = MotionAnalyzer(self.motion_config)
        self.fov_controller = AdaptiveFovController(
            self.motion_config,
            tolerance=pipeline_cfg.get("fov_tolerance", 0.01)
        )
        self.vignette = VignetteMapper(
            self.motion_config,
            feather=vignette_cfg.get("feather", 0.4),
            base_radius=vignette_cfg.get("base_radius", 0.8),
            radius_shrink=vignette_cfg.get("radius_shrink", 0.3)
        )
        self.camera = PerspectiveCamera(
            fov=self.motion_config.max_fov,
            aspect=pipeline_cfg.get("aspect", 16.0 / 9.0),
            near=pipeline_cfg.get("near", 0.1),
            far=pipeline_cfg.get("far", 1000.0)
        )
        self.frame_limiter = FrameLimiter(pipeline_cfg.get("max_delta_time", 0.1))

        # feather is static, so the pass is configured once up front
        if self.compositor_sink:
            self.compositor_sink(self.vignette.initial_uniforms())

        logger.info(f"Setup complete. FOV range {self.motion_config.min_fov:.0f}-"
                    f"{self.motion_config.max_fov:.0f} deg.")

    def step(self, position, orientation, delta_time: float) -> FrameResult:
        """
        Process one rendered frame.

        Args:
            position: Observer position (Vector3 or 3 numbers)
            orientation: Observer orientation (Quaternion or x, y, z, w)
            delta_time: Seconds since previous frame

        Returns:
            FrameResult for this frame

        Raises:
            PoseError: If the pose is malformed. Pipeline state is unchanged.
        """
        if self.analyzer is None:
            raise RuntimeError("Pipeline not set up. Call setup() first.")

        start_time = time.perf_counter()

        position = as_vector3(position)
        orientation = as_quaternion(orientation)
        delta_time = self.frame_limiter.clamp_delta_time(delta_time)

        intensity = self.analyzer.update(position, orientation, delta_time)

        fov_applied = self.fov_controller.apply(self.camera, intensity, delta_time)

        uniforms = self.vignette.update(intensity)
        if self.compositor_sink:
            self.compositor_sink(uniforms)

        latency_ms = (time.perf_counter() - start_time) * 1000
        self._record_latency(latency_ms)
        self._frame_count += 1

        return FrameResult(
            intensity=intensity,
            fov=self.camera.fov,
            fov_applied=fov_applied,
            uniforms=uniforms
        )

    def update_config(self, changes: Optional[Dict[str, Any]] = None, **kwargs):
        """
        Public API to update configuration at runtime.

        The merged snapshot is validated here, at the boundary, then handed
        to every component. Analyzer state is kept.

        Args:
            changes: Partial mapping of MotionConfig fields
            **kwargs: Same, as keyword arguments

        Raises:
            ConfigError: If the merged config is invalid. Nothing is applied.
        """
        if self.analyzer is None:
            raise RuntimeError("Pipeline not set up. Call setup() first.")

        changes = dict(changes or {}, **kwargs)
        self.motion_config = validate_config(self.motion_config.merged(changes))

        self.analyzer.set_config(changes)
        self.fov_controller.set_config(changes)
        self.vignette.set_config(changes)

        logger.info(f"Config updated: {changes}")

    def run_recording(self, frames: Iterable[PoseFrame]) -> List[FrameResult]:
        """
        Replay recorded frames through the pipeline.

        Frame time is taken from the recorded timestamps.
        """
        results = []
        previous_timestamp = None

        for frame in frames:
            if previous_timestamp is None:
                delta_time = 0.0
            else:
                delta_time = frame.timestamp - previous_timestamp
            previous_timestamp = frame.timestamp

            result = self.step(frame.pose.position, frame.pose.orientation, delta_time)
            results.append(result)

            if self._frame_count % LOG_INTERVAL_FRAMES == 0:
                logger.info(
                    f"Frame {self._frame_count}: t={frame.timestamp:.2f}s "
                    f"intensity={result.intensity:.3f} fov={result.fov:.2f} "
                    f"vignette={result.uniforms.intensity:.3f}"
                )

        return results

    def _record_latency(self, latency_ms: float):
        """
        Record latency sample for monitoring.

        Keeps the last _max_latency_samples samples and warns on slow frames.
        """
        self._latency_samples.append(latency_ms)
        if len(self._latency_samples) > self._max_latency_samples:
            self._latency_samples.pop(0)

        if latency_ms > LATENCY_WARN_MS:
            self._slow_frames += 1
            logger.warning(f"Slow frame: {latency_ms:.2f}ms (> {LATENCY_WARN_MS}ms)")

    def latency_stats(self) -> Dict[str, float]:
        """Average / max latency over the rolling window, slow frame share overall."""
        if not self._latency_samples:
            return {"avg_ms": 0.0, "max_ms": 0.0, "slow_pct": 0.0}

        return {
            "avg_ms": sum(self._latency_samples) / len(self._latency_samples),
            "max_ms": max(self._latency_samples),
            "slow_pct": 100.0 * self._slow_frames / max(self._frame_count, 1),
        }

    def _log_latency_stats(self):
        stats = self.latency_stats()
        logger.info(
            f"Latency: {stats['avg_ms']:.3f}ms avg, {stats['max_ms']:.3f}ms max, "
            f"{stats['slow_pct']:.1f}% > {LATENCY_WARN_MS}ms"
        )

    def cleanup(self):
        """Log final stats."""
        if self._frame_count:
            self._log_latency_stats()
        logger.info(f"Cleanup complete. {self._frame_count} frames processed.")


def write_preview(compositor: VignetteCompositor, output_file: str,
                  uniforms: Optional[VignetteUniforms] = None) -> np.ndarray:
    """
    Darken a white frame with the compositor and save it as .npy.

    Uses the compositor's latest uniforms when none are given.
    """
    frame = np.full(PREVIEW_SHAPE + (3,), 255, dtype=np.uint8)
    preview = compositor.apply(frame, uniforms)
    np.save(output_file, preview)
    logger.info(f"Vignette preview saved to {output_file}")
    return preview


def main(argv=None):
    parser = argparse.ArgumentParser(description="Motion Comfort replay")
    parser.add_argument("--input", "-i", required=True, help="Pose recording file")
    parser.add_argument("--config", "-c", default=None, help="Settings YAML file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--preview", "-p", default=None,
                        help="Write the vignette at peak intensity over a white frame (.npy)")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    compositor = VignetteCompositor()
    pipeline = ComfortPipeline(config=load_config(args.config),
                               compositor_sink=compositor.set_uniforms)
    pipeline.setup()

    frames = load_recording(args.input)
    try:
        results = pipeline.run_recording(frames)
    except KeyboardInterrupt:
        logger.info("Shutting down...")
        results = []
    finally:
        pipeline.cleanup()

    peak_uniforms = None
    if results:
        peak = max(results, key=lambda r: r.intensity)
        narrowest = min(r.fov for r in results)
        peak_uniforms = peak.uniforms
        logger.info(f"Peak intensity {peak.intensity:.3f}, narrowest FOV {narrowest:.2f} deg")

    if args.preview:
        write_preview(compositor, args.preview, peak_uniforms)


if __name__ == "__main__":
    main()
