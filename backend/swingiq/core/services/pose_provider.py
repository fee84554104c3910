"""
Pose Provider Boundary

The pose-estimation model runs outside this package. Anything that turns
an image into landmarks can be plugged in as a PoseProvider; this module
wraps the call with a per-frame timeout and feeds the results into an
analysis session.

A failed or timed-out frame is dropped and the stream moves on to the
next one.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterable, AsyncIterator, Iterable, Optional, Protocol, Union

from ..domain.analysis import FrameResult
from ..domain.config import DEFAULT_CONFIG
from ..domain.pose import RawLandmark
from .session import AnalysisSession
from .swing_analyzer import SwingAnalyzer

logger = logging.getLogger(__name__)

DEFAULT_FRAME_TIMEOUT = DEFAULT_CONFIG.frame_timeout


@dataclass(frozen=True)
class ProviderResult:
    """
    Landmarks the provider found in one image.

    landmarks is empty when nobody was detected. Coordinates are
    normalized to the provider's letterboxed input square.
    """
    landmarks: tuple[RawLandmark, ...]
    image_width: int
    image_height: int


@dataclass(frozen=True)
class TimedImage:
    """An image to run through the provider and its capture time."""
    timestamp: float
    image: Any
    frame_number: Optional[int] = None


class PoseProvider(Protocol):
    """Anything that can detect pose landmarks in an image."""

    async def detect(self, image: Any) -> ProviderResult:
        ...


async def detect_with_timeout(
    provider: PoseProvider,
    image: Any,
    timeout: float = DEFAULT_FRAME_TIMEOUT,
) -> Optional[ProviderResult]:
    """
    Run the provider on one image with a deadline.

    Returns:
        The provider result, or None if the call failed or timed out
    """
    try:
        return await asyncio.wait_for(provider.detect(image), timeout=timeout)
    except asyncio.TimeoutError:
        logger.warning("Pose detection timed out after %.1fs - dropping frame", timeout)
    except Exception as e:
        logger.warning("Pose detection failed - dropping frame: %s", e)
    return None


async def _iterate(
    images: Union[Iterable[TimedImage], AsyncIterable[TimedImage]],
) -> AsyncIterator[TimedImage]:
    if hasattr(images, "__aiter__"):
        async for item in images:
            yield item
    else:
        for item in images:
            yield item


async def run_stream(
    analyzer: SwingAnalyzer,
    session: AnalysisSession,
    images: Union[Iterable[TimedImage], AsyncIterable[TimedImage]],
    provider: PoseProvider,
    timeout: Optional[float] = None,
) -> AsyncIterator[FrameResult]:
    """
    Detect, ingest and yield results for a stream of images.

    Images must arrive in capture order. Frames the provider fails on
    are counted in session.frames_dropped and skipped.
    The per-frame timeout defaults to the analyzer's frame_timeout.

    Usage:
        async for result in run_stream(analyzer, session, frames, provider):
            print(result.phase)
    """
    if timeout is None:
        timeout = analyzer.config.frame_timeout

    async for item in _iterate(images):
        detected = await detect_with_timeout(provider, item.image, timeout)
        if detected is None:
            analyzer.record_dropped(session)
            continue

        yield analyzer.ingest(
            session,
            detected.landmarks,
            detected.image_width,
            detected.image_height,
            timestamp=item.timestamp,
            frame_number=item.frame_number,
        )
