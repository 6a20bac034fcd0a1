from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Any, Dict, Optional


class SymptomRequest(BaseModel):
    symptoms: str

    @field_validator("symptoms")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Symptoms are required")
        return value


class AnalysisResponse(BaseModel):
    analysis: str


class ErrorResponse(BaseModel):
    error: str


class PickRequest(BaseModel):
    # either viewport pixels (x, y, width, height) or normalized ndc_x / ndc_y
    x: Optional[float] = None
    y: Optional[float] = None
    width: Optional[float] = Field(default=None, gt=0)
    height: Optional[float] = Field(default=None, gt=0)
    ndc_x: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    ndc_y: Optional[float] = Field(default=None, ge=-1.0, le=1.0)
    camera: Optional[Dict[str, Any]] = None

    @model_validator(mode="after")
    def _one_coordinate_form(self):
        pixels = [self.x, self.y, self.width, self.height]
        ndc = [self.ndc_x, self.ndc_y]
        has_pixels = all(v is not None for v in pixels)
        has_ndc = all(v is not None for v in ndc)
        if has_pixels == has_ndc:
            raise ValueError("Provide either x, y, width, height or ndc_x, ndc_y")
        return self


class PickResponse(BaseModel):
    label: Optional[str] = None
