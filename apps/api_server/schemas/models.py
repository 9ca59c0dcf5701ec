"""Pydantic models for the grezzi clustering HTTP service."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

from grezzi.spatial import Area, Cluster, ToleranceRange, Unit


class UnitModel(BaseModel):
    """A single measured piece."""

    width: float = Field(..., ge=0, allow_inf_nan=False, description="Measured width")
    height: float = Field(..., ge=0, allow_inf_nan=False, description="Measured height (length)")

    def to_unit(self) -> Unit:
        return Unit(width=self.width, height=self.height)


class ToleranceModel(BaseModel):
    min: float = Field(..., allow_inf_nan=False, description="Lower offset")
    max: float = Field(..., allow_inf_nan=False, description="Upper offset")

    def to_range(self) -> ToleranceRange:
        return ToleranceRange(min=self.min, max=self.max)


class AreaModel(BaseModel):
    """Envelope rectangle of a cluster."""

    min_width: float = Field(..., alias="minWidth")
    min_height: float = Field(..., alias="minHeight")
    max_width: float = Field(..., alias="maxWidth")
    max_height: float = Field(..., alias="maxHeight")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_area(cls, area: Area) -> "AreaModel":
        return cls(**area.to_dict())


class ClusterModel(BaseModel):
    size: int
    area: AreaModel
    units: List[UnitModel]

    @classmethod
    def from_cluster(cls, cluster: Cluster) -> "ClusterModel":
        return cls(
            size=cluster.size,
            area=AreaModel.from_area(cluster.area),
            units=[UnitModel(width=u.width, height=u.height) for u in cluster.units],
        )


class ClusterRequest(BaseModel):
    groups: Dict[str, List[UnitModel]] = Field(
        ..., description="Identifier -> units in measurement order"
    )
    tolerance: Optional[ToleranceModel] = Field(
        default=None, description="Tolerance range; profile default when omitted"
    )
    profile: Optional[str] = Field(default=None, description="Config profile name")
    max_workers: Optional[int] = Field(default=None, ge=1, le=64, alias="maxWorkers")

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def _require_groups(self) -> "ClusterRequest":
        if not self.groups:
            raise ValueError("At least one group is required")
        return self


class ClusterResponse(BaseModel):
    tolerance: ToleranceModel
    clusters: Dict[str, List[ClusterModel]]
    summary: Dict[str, Any] = Field(default_factory=dict)
