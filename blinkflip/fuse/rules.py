from __future__ import annotations
import yaml
from pathlib import Path
from typing import Optional, Tuple
from pydantic import BaseModel, Field, field_validator
from ..eye.blink import EyeIndices, LEFT_EYE, RIGHT_EYE
from .state import GestureSM, GestureThresholds

class CalibrationConfig(BaseModel):
    blinks: int = Field(5, ge=1)
    interval_ms: int = Field(50, gt=0)
    offset: float = Field(0.05, ge=0.0)
    ceiling: float = Field(0.35, gt=0.0)

class KeyConfig(BaseModel):
    blink: Optional[str] = "space"
    right_wink: Optional[str] = "f"
    left_wink: Optional[str] = None
    cooldown_ms: int = Field(350, ge=0)

class GestureConfig(BaseModel):
    """Start-up settings. Nothing here is written back at runtime."""
    blink_threshold: float = Field(0.25, gt=0.0, lt=1.0)
    wink_margin: float = Field(0.06, ge=0.0)
    left_eye: Tuple[int,int,int,int,int,int] = tuple(LEFT_EYE)
    right_eye: Tuple[int,int,int,int,int,int] = tuple(RIGHT_EYE)
    calibration: CalibrationConfig = Field(default_factory=CalibrationConfig)
    keys: KeyConfig = Field(default_factory=KeyConfig)

    @field_validator("left_eye", "right_eye")
    @classmethod
    def _non_negative(cls, v):
        if any(i < 0 for i in v):
            raise ValueError("landmark ids must be non-negative")
        return v

    def eyes(self) -> Tuple[EyeIndices, EyeIndices]:
        return EyeIndices(*self.left_eye), EyeIndices(*self.right_eye)

def build_state_machine(cfg: GestureConfig) -> GestureSM:
    return GestureSM(GestureThresholds(blink_threshold=cfg.blink_threshold, wink_margin=cfg.wink_margin))

def load_config(path: Optional[str|Path]=None) -> GestureConfig:
    if path is None:
        return GestureConfig()
    with open(path,"r") as f: cfg=yaml.safe_load(f) or {}
    return GestureConfig.model_validate(cfg)
