"""
navalforge/pipeline.py - Blueprint to mesh pipeline v1.0

Runs the full flow for one request:

  1. Decode inputs (separate plan/profile images, or one sheet split
     into its two views)
  2. Trace top and side silhouettes concurrently
  3. Merge hints: explicit GeometricMap, annotation provider, detected turrets
  4. Build the mesh

Every run() takes a generation ticket. When a newer run() starts before
an older one finishes, the older one raises SupersededRequestError
instead of returning stale geometry.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Union
import asyncio
import logging

from navalforge.errors import LoadError, SupersededRequestError
from navalforge.annotations.protocol import AnnotationProvider, AnnotationResult
from navalforge.hull_gen.generator import HullMeshBuilder
from navalforge.hull_gen.parameters import GeometricMap, ShipParameters
from navalforge.vision.contracts import AxisOrientation, ProfileCurve, TraceConfig
from navalforge.vision.decoder import ImageSource, PixelGrid, read_source
from navalforge.vision.extractor import ProfileExtractor
from navalforge.vision.regions import ViewLabel, split_blueprint
from navalforge.vision.turrets import detect_turrets
from navalforge.webgl.exporter import ExportFormat, ExportResult, GeometryExporter
from navalforge.webgl.schema import MeshBuffer

logger = logging.getLogger("navalforge.pipeline")


# =============================================================================
# REQUEST / RESULT
# =============================================================================

@dataclass
class PipelineRequest:
    """Inputs for one pipeline run."""

    params: ShipParameters = field(default_factory=ShipParameters)

    top: Optional[ImageSource] = None
    """Plan-view image (bytes or path)."""

    side: Optional[ImageSource] = None
    """Profile-view image (bytes or path)."""

    blueprint: Optional[ImageSource] = None
    """Combined sheet holding both views; used when top/side are absent."""

    geometry: Optional[GeometricMap] = None
    """Manual hints. Fields set here win over annotation and detection."""

    smoothing_radius: int = 3
    detection_sensitivity: float = 128.0
    """Recorded on both TraceConfigs; the column scan uses a fixed cutoff."""

    detect_turrets: bool = False
    annotate: bool = True
    """Ask the annotation provider, when one is configured."""

    reverse_top: bool = False
    reverse_side: bool = False


@dataclass
class PipelineResult:
    """Outputs of a completed run."""
    ticket: int
    params: ShipParameters
    geometry: GeometricMap
    mesh: MeshBuffer
    top_profile: Optional[ProfileCurve] = None
    side_profile: Optional[ProfileCurve] = None
    annotation: Optional[AnnotationResult] = None
    warnings: List[str] = field(default_factory=list)

    def export(self, format: Union[str, ExportFormat] = ExportFormat.OBJ) -> ExportResult:
        return GeometryExporter().export(self.mesh, self.params, format)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ticket": self.ticket,
            "params": self.params.to_dict(),
            "geometry": self.geometry.to_dict(),
            "vertex_count": self.mesh.vertex_count,
            "face_count": self.mesh.face_count,
            "top_profile": self.top_profile.to_dict() if self.top_profile else None,
            "side_profile": self.side_profile.to_dict() if self.side_profile else None,
            "annotation": self.annotation.to_dict() if self.annotation else None,
            "warnings": list(self.warnings),
        }


async def _gather_all(*aws) -> List[Any]:
    """
    Await every stage, then raise the first failure.

    Every stage runs to completion before anything is raised.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    failures = [r for r in results if isinstance(r, BaseException)]
    for extra in failures[1:]:
        logger.debug(f"Additional stage failure: {extra!r}")
    if failures:
        raise failures[0]
    return results


# =============================================================================
# PIPELINE
# =============================================================================

class BlueprintPipeline:
    """
    Orchestrates tracing, annotation and mesh generation.

    Usage:
        pipeline = BlueprintPipeline()
        result = await pipeline.run(PipelineRequest(top=top_png, side=side_png))
        obj_text = result.export().text
    """

    def __init__(
        self,
        extractor: Optional[ProfileExtractor] = None,
        builder: Optional[HullMeshBuilder] = None,
        provider: Optional[AnnotationProvider] = None,
    ):
        self._extractor = extractor or ProfileExtractor()
        self._builder = builder or HullMeshBuilder()
        self._provider = provider
        self._latest = 0

    @property
    def latest_ticket(self) -> int:
        return self._latest

    def _check_current(self, ticket: int) -> None:
        if ticket != self._latest:
            logger.info(f"Discarding request {ticket}, latest is {self._latest}")
            raise SupersededRequestError(ticket=ticket, latest=self._latest)

    async def run(self, request: PipelineRequest) -> PipelineResult:
        """
        Execute one request.

        Raises:
            LoadError: If an input image cannot be decoded
            GeometryParameterError: If ship parameters are invalid
            SupersededRequestError: If a newer run() started meanwhile
        """
        self._latest += 1
        ticket = self._latest
        request.params.check()
        warnings: List[str] = []

        logger.info(f"Pipeline request {ticket} started")

        top_config = TraceConfig(
            smoothing_radius=request.smoothing_radius,
            detection_sensitivity=request.detection_sensitivity,
            orientation=AxisOrientation.PLAN,
        )
        side_config = TraceConfig(
            smoothing_radius=request.smoothing_radius,
            detection_sensitivity=request.detection_sensitivity,
            orientation=AxisOrientation.PROFILE,
        )

        top_grid, side_grid = await self._load_views(request)

        top_profile, side_profile, annotation = await _gather_all(
            self._trace(top_grid, top_config),
            self._trace(side_grid, side_config),
            self._annotate(request),
        )
        self._check_current(ticket)

        if request.reverse_top and top_profile is not None:
            top_profile = top_profile.reversed()
        if request.reverse_side and side_profile is not None:
            side_profile = side_profile.reversed()

        detected = None
        if request.detect_turrets and top_grid is not None:
            detected = await asyncio.to_thread(detect_turrets, top_grid)
            self._check_current(ticket)

        geometry = self._merge_hints(
            request.geometry, annotation, detected, top_profile, side_profile, warnings
        )
        params = request.params
        if annotation is not None and annotation.dimensions is not None:
            params = annotation.suggest_parameters(params)

        mesh = self._builder.build(params, geometry)
        self._check_current(ticket)

        logger.info(f"Pipeline request {ticket} complete: {mesh.vertex_count} vertices")
        return PipelineResult(
            ticket=ticket,
            params=params,
            geometry=geometry,
            mesh=mesh,
            top_profile=top_profile,
            side_profile=side_profile,
            annotation=annotation,
            warnings=warnings,
        )

    # =========================================================================
    # STAGES
    # =========================================================================

    async def _decode(self, source: Optional[ImageSource]) -> Optional[PixelGrid]:
        if source is None:
            return None
        data = read_source(source)
        return await asyncio.to_thread(self._extractor.decoder.decode, data)

    async def _load_views(self, request: PipelineRequest):
        if request.top is not None or request.side is not None:
            return await _gather_all(
                self._decode(request.top),
                self._decode(request.side),
            )

        if request.blueprint is None:
            return None, None

        sheet = await self._decode(request.blueprint)
        views = await asyncio.to_thread(split_blueprint, sheet)
        if not views:
            raise LoadError(reason="could not find a plan view and a profile view on the sheet")
        return views.get(ViewLabel.TOP), views.get(ViewLabel.SIDE)

    async def _trace(
        self,
        grid: Optional[PixelGrid],
        config: TraceConfig,
    ) -> Optional[ProfileCurve]:
        if grid is None:
            return None
        return await asyncio.to_thread(self._extractor.extract_grid, grid, config)

    async def _annotate(self, request: PipelineRequest) -> Optional[AnnotationResult]:
        if self._provider is None or not request.annotate:
            return None
        source = request.top if request.top is not None else request.blueprint
        if source is None:
            return None
        return await self._provider.annotate(read_source(source))

    def _merge_hints(
        self,
        manual: Optional[GeometricMap],
        annotation: Optional[AnnotationResult],
        detected: Optional[List[float]],
        top_profile: Optional[ProfileCurve],
        side_profile: Optional[ProfileCurve],
        warnings: List[str],
    ) -> GeometricMap:
        geometry = manual or GeometricMap()

        if annotation is not None:
            hints = annotation.geometry
            if geometry.turrets is None and hints.turrets is not None:
                geometry = replace(geometry, turrets=hints.turrets)
            if geometry.superstructure is None and hints.superstructure is not None:
                geometry = replace(geometry, superstructure=hints.superstructure)

        if geometry.turrets is None and detected:
            geometry = replace(geometry, turrets=tuple(detected))

        # Degenerate traces fall back to the parametric taper.
        usable = {}
        for name, curve in (("top", top_profile), ("side", side_profile)):
            if curve is not None and curve.is_degenerate:
                message = f"{name} trace found no silhouette, using parametric {name} profile"
                logger.warning(message)
                warnings.append(message)
                curve = None
            usable[name] = curve

        return geometry.with_profiles(
            top_profile=usable["top"],
            side_profile=usable["side"],
        )


async def run_pipeline(
    request: PipelineRequest,
    provider: Optional[AnnotationProvider] = None,
) -> PipelineResult:
    """One-shot convenience wrapper."""
    return await BlueprintPipeline(provider=provider).run(request)
