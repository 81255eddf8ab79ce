from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from pushcount.config import CounterConfig
from pushcount.landmarks import Joint, LandmarkFrame, LandmarkPoint


class LandmarkPayload(BaseModel):
    x: float
    y: float
    z: float = 0.0
    visibility: float = Field(..., ge=0.0, le=1.0, description="Detector confidence in [0, 1].")


class FramePayload(BaseModel):
    """
    One landmark frame. Provide either `joints` (joint name -> landmark) or `pose_landmarks`
    (the MediaPipe-indexed list of 33 landmarks). Both empty means no person was detected.
    """
    joints: Optional[Dict[str, LandmarkPayload]] = Field(
        None, description="Landmarks keyed by joint name, e.g. LEFT_ELBOW."
    )
    pose_landmarks: Optional[List[LandmarkPayload]] = Field(
        None, description="MediaPipe Pose landmarks in index order."
    )
    image_width: int = Field(0, ge=0)
    image_height: int = Field(0, ge=0)
    timestamp_ms: Optional[int] = Field(None, ge=0)

    @field_validator("joints")
    @classmethod
    def joint_names_known(cls, v: Optional[Dict[str, LandmarkPayload]]) -> Optional[Dict[str, LandmarkPayload]]:
        if v is not None:
            for name in v:
                Joint.from_name(name)
        return v

    @model_validator(mode="after")
    def one_landmark_form(self) -> "FramePayload":
        if self.joints and self.pose_landmarks:
            raise ValueError("provide either joints or pose_landmarks, not both")
        return self

    def to_frame(self) -> LandmarkFrame:
        if self.pose_landmarks:
            return LandmarkFrame.from_pose_landmarks(
                self.pose_landmarks,
                image_width=self.image_width,
                image_height=self.image_height,
                timestamp_ms=self.timestamp_ms,
            )
        points = {
            Joint.from_name(name): LandmarkPoint(x=lm.x, y=lm.y, z=lm.z, visibility=lm.visibility)
            for name, lm in (self.joints or {}).items()
        }
        return LandmarkFrame(
            points,
            image_width=self.image_width,
            image_height=self.image_height,
            timestamp_ms=self.timestamp_ms,
        )


class CounterSettings(BaseModel):
    visibility_threshold: float = Field(0.8, ge=0.0, le=1.0)
    down_elbow_angle: float = Field(90.0, gt=0.0, le=180.0)
    up_elbow_angle: float = Field(150.0, gt=0.0, le=180.0)
    straight_body_angle: float = Field(150.0, gt=0.0, le=180.0)

    @model_validator(mode="after")
    def thresholds_ordered(self) -> "CounterSettings":
        if self.down_elbow_angle >= self.up_elbow_angle:
            raise ValueError("down_elbow_angle must be below up_elbow_angle")
        return self

    def to_config(self) -> CounterConfig:
        return CounterConfig(**self.model_dump())


class SessionCreateRequest(BaseModel):
    settings: CounterSettings = Field(default_factory=CounterSettings)


class UpdateResponse(BaseModel):
    rep_count: int
    instruction: str
    phase: str


class SessionResponse(UpdateResponse):
    session_id: str
    frames_processed: int = 0
    image_width: int = 0
    image_height: int = 0


class ReplayRequest(BaseModel):
    frames: List[FramePayload] = Field(..., description="Frames in temporal order.")
    settings: CounterSettings = Field(default_factory=CounterSettings)


class ReplayResponse(BaseModel):
    rep_count: int
    updates: List[UpdateResponse]
