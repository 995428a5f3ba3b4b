"""
Pydantic models for API request/response schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


# === Response Models ===

class EntryResultInfo(BaseModel):
    """Outcome for one feed entry."""
    title: str
    url: str
    outcome: str = Field(..., description="'downloaded', 'skipped_existing' or 'failed'")
    exit_code: Optional[int] = None
    error: Optional[str] = None


class ChannelResultInfo(BaseModel):
    """Outcome for one channel."""
    channel_id: str
    status: str = Field(..., description="'synced' or 'failed'")
    display_name: Optional[str] = None
    directory: Optional[str] = None
    entries: list[EntryResultInfo] = []
    deleted: list[str] = []
    error: Optional[str] = None


class SyncStatsInfo(BaseModel):
    """Totals from a completed run."""
    channels_total: int
    channels_synced: int
    channels_failed: int
    downloaded: int
    skipped_existing: int
    failed: int
    deleted: int
    errors: list[str]
    channels: list[ChannelResultInfo]
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


class StatusResponse(BaseModel):
    """Response body for status endpoint."""
    running: bool
    progress: float = Field(..., ge=0, le=100)
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_error: Optional[str] = None
    next_run_at: Optional[datetime] = None
    last_run: Optional[SyncStatsInfo] = None


class TriggerResponse(BaseModel):
    """Response body for sync trigger/cancel endpoints."""
    status: str
    message: str


class HealthResponse(BaseModel):
    """Response body for health endpoint."""
    status: str
    version: str
    yt_dlp_version: Optional[str] = None
    channels_configured: int
    video_location: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
