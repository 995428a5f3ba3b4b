"""
API route handlers for the sync service.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from tubesync import __version__
from tubesync.api.models import (
    ChannelResultInfo,
    EntryResultInfo,
    ErrorResponse,
    HealthResponse,
    StatusResponse,
    SyncStatsInfo,
    TriggerResponse,
)
from tubesync.config import get_settings
from tubesync.sync import SyncAlreadyRunning, SyncScheduler, SyncStats, YtDlp

logger = logging.getLogger(__name__)

router = APIRouter()


def verify_admin_key(x_admin_key: Optional[str] = Header(None)) -> str:
    """Verify admin API key for protected endpoints."""
    settings = get_settings()
    if not x_admin_key or x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing admin key")
    return x_admin_key


def get_scheduler(request: Request) -> SyncScheduler:
    """The scheduler created by the application lifespan."""
    scheduler = getattr(request.app.state, "scheduler", None)
    if scheduler is None:
        raise HTTPException(status_code=503, detail="Scheduler not initialized")
    return scheduler


def _stats_to_info(stats: SyncStats) -> SyncStatsInfo:
    return SyncStatsInfo(
        channels_total=stats.channels_total,
        channels_synced=stats.channels_synced,
        channels_failed=stats.channels_failed,
        downloaded=stats.downloaded,
        skipped_existing=stats.skipped_existing,
        failed=stats.failed,
        deleted=stats.deleted,
        errors=stats.errors,
        started_at=stats.started_at,
        finished_at=stats.finished_at,
        channels=[
            ChannelResultInfo(
                channel_id=c.channel_id,
                status=c.status,
                display_name=c.display_name,
                directory=str(c.directory) if c.directory else None,
                deleted=[str(p) for p in c.deleted],
                error=c.error,
                entries=[
                    EntryResultInfo(
                        title=e.title,
                        url=e.url,
                        outcome=e.outcome.value,
                        exit_code=e.exit_code,
                        error=e.error,
                    )
                    for e in c.entries
                ],
            )
            for c in stats.channels
        ],
    )


@router.get("/status", response_model=StatusResponse)
async def sync_status(scheduler: SyncScheduler = Depends(get_scheduler)):
    """
    Current scheduler state and the result of the last completed run.
    """
    status = scheduler.status
    return StatusResponse(
        running=status.running,
        progress=status.progress,
        last_started_at=status.last_started_at,
        last_finished_at=status.last_finished_at,
        last_error=status.last_error,
        next_run_at=status.next_run_at,
        last_run=_stats_to_info(status.last_stats) if status.last_stats else None,
    )


@router.post(
    "/sync",
    response_model=TriggerResponse,
    status_code=202,
    responses={401: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def trigger_sync(
    scheduler: SyncScheduler = Depends(get_scheduler),
    _: str = Depends(verify_admin_key),
):
    """
    Start a sync run in the background.

    Requires admin API key in X-Admin-Key header.
    """
    try:
        scheduler.trigger()
    except SyncAlreadyRunning:
        raise HTTPException(status_code=409, detail="A sync run is already in progress")

    logger.info("Sync run triggered via API")
    return TriggerResponse(status="started", message="Sync run started")


@router.post(
    "/sync/cancel",
    response_model=TriggerResponse,
    responses={401: {"model": ErrorResponse}},
)
async def cancel_sync(
    scheduler: SyncScheduler = Depends(get_scheduler),
    _: str = Depends(verify_admin_key),
):
    """
    Cancel the sync run in progress, stopping any running download.

    Requires admin API key in X-Admin-Key header.
    """
    if scheduler.cancel():
        return TriggerResponse(status="cancelling", message="Cancellation requested")
    return TriggerResponse(status="idle", message="No sync run in progress")


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """
    Health check endpoint.

    Reports whether yt-dlp can be run and how much is configured.
    """
    settings = get_settings()
    yt_dlp_version = YtDlp(executable=settings.yt_dlp_path).version()

    return HealthResponse(
        status="healthy" if yt_dlp_version else "degraded",
        version=__version__,
        yt_dlp_version=yt_dlp_version,
        channels_configured=len(settings.channel_list),
        video_location=settings.video_location or None,
    )
