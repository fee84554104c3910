"""
Pose API Schemas

Pydantic models for pose-related API requests and responses.
These define the JSON structure for communication with frontend.
"""

from pydantic import BaseModel, Field
from typing import Optional, List
from enum import Enum

from swingiq.core.domain import RawFrame, RawLandmark


class RawLandmarkSchema(BaseModel):
    """
    Single landmark as reported by the pose provider.

    Coordinates are normalized to the provider's letterboxed input square
    and may fall slightly outside 0-1.
    """
    index: int = Field(..., ge=0, le=32, description="MediaPipe landmark index")
    x: float = Field(..., description="Horizontal position in the input square")
    y: float = Field(..., description="Vertical position in the input square")
    visibility: float = Field(0.0, ge=0.0, le=1.0, description="Likelihood of not being occluded")
    presence: float = Field(0.0, ge=0.0, le=1.0, description="Likelihood of being inside the image")

    class Config:
        json_schema_extra = {
            "example": {
                "index": 15,
                "x": 0.42,
                "y": 0.61,
                "visibility": 0.97,
                "presence": 0.99
            }
        }

    def to_domain(self) -> RawLandmark:
        return RawLandmark(
            index=self.index,
            x=self.x,
            y=self.y,
            visibility=self.visibility,
            presence=self.presence,
        )


class RawFrameSchema(BaseModel):
    """
    Provider output for one video frame.

    An empty landmark list means nobody was detected in the frame.
    """
    frame_number: int = Field(..., ge=0, description="Sequential frame number")
    timestamp: float = Field(..., ge=0.0, description="Capture time in seconds")
    image_width: int = Field(..., gt=0, description="True image width in pixels")
    image_height: int = Field(..., gt=0, description="True image height in pixels")
    landmarks: List[RawLandmarkSchema] = Field(default_factory=list, description="Detected landmarks")

    class Config:
        json_schema_extra = {
            "example": {
                "frame_number": 45,
                "timestamp": 1.5,
                "image_width": 1080,
                "image_height": 1920,
                "landmarks": [
                    {"index": 0, "x": 0.5, "y": 0.2, "visibility": 0.99, "presence": 0.99}
                ]
            }
        }

    def to_domain(self) -> RawFrame:
        return RawFrame(
            frame_number=self.frame_number,
            timestamp=self.timestamp,
            image_width=self.image_width,
            image_height=self.image_height,
            landmarks=tuple(lm.to_domain() for lm in self.landmarks),
        )


class KeypointSchema(BaseModel):
    """
    Normalized, smoothed keypoint in API response.

    Coordinates are normalized to the true image (0.0 to 1.0).
    Frontend multiplies by canvas dimensions to get pixel positions.
    A confidence of 0 marks a landmark that was not tracked.
    """
    body_part: str = Field(..., description="Body part name (e.g., 'LEFT_SHOULDER')")
    x: float = Field(..., ge=0.0, le=1.0, description="Horizontal position (0=left, 1=right)")
    y: float = Field(..., ge=0.0, le=1.0, description="Vertical position (0=top, 1=bottom)")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Combined provider confidence")


# =============================================================================
# WebSocket Message Schemas
# =============================================================================

class WebSocketMessageType(str, Enum):
    """Types of WebSocket messages."""
    # Client -> Server
    FRAME = "frame"                    # Send provider landmarks for one frame
    START_SESSION = "start_session"    # Start new analysis session
    END_SESSION = "end_session"        # End analysis session

    # Server -> Client
    PHASE_RESULT = "phase_result"      # Classified phase and live metrics
    ERROR = "error"                    # Error message
    SESSION_STARTED = "session_started"
    SESSION_ENDED = "session_ended"


class WebSocketMessage(BaseModel):
    """
    Base WebSocket message structure.

    All WebSocket communication uses this format.
    """
    type: WebSocketMessageType = Field(..., description="Message type")
    data: dict = Field(default_factory=dict, description="Message payload")
    timestamp: Optional[int] = Field(None, description="Unix timestamp in milliseconds")

    class Config:
        json_schema_extra = {
            "example": {
                "type": "frame",
                "data": {
                    "timestamp": 0.033,
                    "image_width": 1080,
                    "image_height": 1920,
                    "landmarks": []
                },
                "timestamp": 1704067200000
            }
        }


class FrameMessage(BaseModel):
    """
    WebSocket payload containing provider landmarks for one frame.

    Sent from frontend to backend for live phase classification.
    """
    timestamp: float = Field(..., ge=0.0, description="Capture time in seconds")
    image_width: int = Field(..., gt=0, description="True image width in pixels")
    image_height: int = Field(..., gt=0, description="True image height in pixels")
    landmarks: List[RawLandmarkSchema] = Field(default_factory=list, description="Detected landmarks")
    frame_number: Optional[int] = Field(None, ge=0, description="Frame sequence number")
