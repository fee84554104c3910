"""
WebSocket Handler

Real-time swing phase classification via WebSocket connection.
The client runs pose detection on its camera stream and sends provider
landmarks frame by frame; each connection owns one analysis session.
"""

import json
import time
import logging
from typing import Optional
from fastapi import WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from .schemas import (
    FrameMessage,
    PhaseResultMessage,
    SwingMetricsSchema,
    WebSocketMessageType,
)
from swingiq.core.services import AnalysisSession, FrameOrderError, SwingAnalyzer

# Configure logging
logger = logging.getLogger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ConnectionManager:
    """
    Manages WebSocket connections.

    Handles multiple concurrent connections, each with its own
    AnalysisSession so that streams never share swing state.
    """

    def __init__(self):
        self.active_connections: list[WebSocket] = []
        self.sessions: dict[WebSocket, AnalysisSession] = {}

    @property
    def active_count(self) -> int:
        return len(self.active_connections)

    async def connect(self, websocket: WebSocket, analyzer: SwingAnalyzer) -> AnalysisSession:
        """Accept new WebSocket connection."""
        await websocket.accept()
        self.active_connections.append(websocket)

        # Dedicated session for this connection
        session = analyzer.new_session()
        self.sessions[websocket] = session

        logger.info(f"New WebSocket connection (session {session.id}). Total: {self.active_count}")
        return session

    def disconnect(self, websocket: WebSocket) -> None:
        """Handle WebSocket disconnection."""
        if websocket in self.active_connections:
            self.active_connections.remove(websocket)

        session = self.sessions.pop(websocket, None)
        if session is not None:
            logger.info(
                f"Session {session.id} closed after {session.frames_received} frames "
                f"({session.frames_valid} valid)"
            )

        logger.info(f"WebSocket disconnected. Remaining: {self.active_count}")

    def get_session(self, websocket: WebSocket) -> Optional[AnalysisSession]:
        """Get analysis session for a connection."""
        return self.sessions.get(websocket)

    async def send_json(self, websocket: WebSocket, data: dict) -> None:
        """Send JSON data to a specific connection."""
        try:
            await websocket.send_json(data)
        except Exception as e:
            logger.error(f"Failed to send WebSocket message: {e}")

    async def send_message(self, websocket: WebSocket, msg_type: WebSocketMessageType, data: dict) -> None:
        await self.send_json(websocket, {
            "type": msg_type.value,
            "data": data,
            "timestamp": _now_ms(),
        })

    async def send_error(self, websocket: WebSocket, error: str) -> None:
        await self.send_message(websocket, WebSocketMessageType.ERROR, {"error": error})


# Global connection manager
manager = ConnectionManager()


async def websocket_endpoint(websocket: WebSocket) -> None:
    """
    WebSocket endpoint for live swing analysis.

    Protocol:
    1. Client connects and receives session_started
    2. Client sends provider landmarks for each camera frame
    3. Server responds with the classified phase and live metrics
    4. Client sends start_session to begin a fresh swing session,
       end_session to close

    Message format (client -> server):
    {
        "type": "frame",
        "data": {
            "timestamp": 0.033,
            "image_width": 1080,
            "image_height": 1920,
            "landmarks": [{"index": 15, "x": 0.4, "y": 0.6, "visibility": 0.9, "presence": 0.9}]
        },
        "timestamp": 1704067200000
    }

    Message format (server -> client):
    {
        "type": "phase_result",
        "data": {
            "frame_number": 0,
            "phase": "address",
            "phase_changed": true,
            "keypoints": [ ... ],
            "metrics": { ... },
            "phase_timing": {}
        },
        "timestamp": 1704067200025
    }
    """
    from .routes import get_analyzer

    analyzer = get_analyzer()
    session = await manager.connect(websocket, analyzer)

    try:
        # Send session started message
        await manager.send_message(websocket, WebSocketMessageType.SESSION_STARTED, {
            "message": "Connected to SwingIQ swing analysis",
            "session_id": session.id,
        })

        # Main message loop
        while True:
            try:
                # Receive message from client
                data = await websocket.receive_json()

                # Process based on message type
                msg_type = data.get("type") if isinstance(data, dict) else None

                if msg_type == WebSocketMessageType.FRAME.value:
                    await handle_frame(websocket, analyzer, session, data)

                elif msg_type == WebSocketMessageType.START_SESSION.value:
                    session.reset()
                    logger.info(f"Session {session.id} restarted")
                    await manager.send_message(websocket, WebSocketMessageType.SESSION_STARTED, {
                        "message": "Session reset",
                        "session_id": session.id,
                    })

                elif msg_type == WebSocketMessageType.END_SESSION.value:
                    await manager.send_message(websocket, WebSocketMessageType.SESSION_ENDED, {
                        "message": "Session ended",
                        "session_id": session.id,
                        "frames_received": session.frames_received,
                        "frames_valid": session.frames_valid,
                        "final_phase": session.current_phase.value,
                        "metrics": SwingMetricsSchema.from_domain(
                            analyzer.current_metrics(session)
                        ).model_dump(),
                    })
                    break

                else:
                    await manager.send_error(websocket, f"Unknown message type: {msg_type}")

            except json.JSONDecodeError:
                await manager.send_error(websocket, "Invalid JSON")

    except WebSocketDisconnect:
        logger.info("Client disconnected")
    except Exception as e:
        logger.error(f"WebSocket error: {e}")
    finally:
        manager.disconnect(websocket)


async def handle_frame(
    websocket: WebSocket,
    analyzer: SwingAnalyzer,
    session: AnalysisSession,
    message: dict,
) -> None:
    """
    Ingest one frame of provider landmarks and return the phase result.
    """
    try:
        frame = FrameMessage.model_validate(message.get("data") or {})
    except ValidationError as e:
        await manager.send_error(websocket, f"Invalid frame data: {e.errors()[0]['msg']}")
        return

    try:
        result = analyzer.ingest(
            session,
            [lm.to_domain() for lm in frame.landmarks],
            frame.image_width,
            frame.image_height,
            timestamp=frame.timestamp,
            frame_number=frame.frame_number,
        )
    except FrameOrderError as e:
        await manager.send_error(websocket, str(e))
        return
    except Exception as e:
        logger.error(f"Frame processing error: {e}")
        await manager.send_error(websocket, str(e))
        return

    await manager.send_message(
        websocket,
        WebSocketMessageType.PHASE_RESULT,
        PhaseResultMessage.from_domain(result).model_dump(mode="json"),
    )
