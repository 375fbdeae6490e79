"""API endpoints for profiles, friendships, leaderboard and activity feed."""

from datetime import datetime
from typing import List, Literal, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.friendship import FriendshipStatus
from app.models.user_profile import UserProfile
from app.services.activity_service import activity_service
from app.services.auth.dependencies import get_request_context
from app.services.context import RequestContext
from app.services.file_service import file_service
from app.services.friend_service import friend_service
from app.services.leaderboard_service import leaderboard_service

router = APIRouter(prefix="/friends", tags=["friends"])


# =============================================================================
# Request/Response Models
# =============================================================================


class ProfileResponse(BaseModel):
    user_id: UUID
    display_name: str
    email: str
    avatar_url: Optional[str]
    friend_code: str


class ProfileSummaryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    display_name: str
    avatar_url: Optional[str]
    friend_code: Optional[str] = None


class FriendshipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: UUID
    friend_user_id: UUID
    status: FriendshipStatus
    created_at: Optional[datetime]
    profile: Optional[ProfileSummaryResponse]


class AddFriendRequest(BaseModel):
    friend_code: str = Field(min_length=6, max_length=10)


class AddFriendResponse(BaseModel):
    success: bool = True
    status: FriendshipStatus


class RespondFriendRequest(BaseModel):
    accept: bool


class RespondFriendResponse(BaseModel):
    success: bool = True
    status: Literal["accepted", "declined"]


class LeaderboardEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    is_me: bool
    display_name: str
    avatar_url: Optional[str]
    daily_total: int
    weekly_total: int
    all_time_total: int
    daily_goal: int
    daily_percentage: int
    streak: int
    total_days: int
    avg_daily: int


class LeaderboardResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    daily: List[LeaderboardEntryResponse]
    weekly: List[LeaderboardEntryResponse]
    all_time: List[LeaderboardEntryResponse]


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    user_id: UUID
    display_name: str
    avatar_url: Optional[str]
    type: Literal["intake", "goal_reached", "streak"]
    message: str
    timestamp: datetime
    amount: Optional[int] = None
    streak: Optional[int] = None


def _profile_response(profile: UserProfile) -> ProfileResponse:
    return ProfileResponse(
        user_id=profile.user_id,
        display_name=profile.display_name,
        email=profile.email,
        avatar_url=file_service.get_file_url(profile.avatar_path),
        friend_code=profile.friend_code,
    )


# =============================================================================
# Profile
# =============================================================================


@router.get("/profile")
async def get_my_profile(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Get the caller's profile, issuing one with a friend code on first use."""
    profile = friend_service.get_or_create_profile(db, ctx)
    return {"profile": _profile_response(profile)}


@router.post("/profile")
async def update_my_profile(
    display_name: str = Form(...),
    avatar: Optional[UploadFile] = File(None),
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Update display name and optionally replace the avatar image."""
    avatar_upload = None
    if avatar and avatar.filename:
        avatar_upload = (await avatar.read(), avatar.content_type)

    profile = friend_service.update_profile(db, ctx, display_name, avatar_upload)
    return {"profile": _profile_response(profile)}


# =============================================================================
# Friendships
# =============================================================================


@router.post("/add", response_model=AddFriendResponse)
async def add_friend(
    body: AddFriendRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Send a friend request by friend code (auto-accepts a crossing request)."""
    status = friend_service.add_friend(db, ctx, body.friend_code)
    return AddFriendResponse(status=status)


@router.get("/requests")
async def list_friend_requests(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Pending requests addressed to the caller."""
    requests = friend_service.list_friend_requests(db, ctx)
    return {
        "requests": [FriendshipResponse.model_validate(r) for r in requests]
    }


@router.post(
    "/requests/{friendship_id}/respond", response_model=RespondFriendResponse
)
async def respond_friend_request(
    friendship_id: int,
    body: RespondFriendRequest,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Accept or decline an incoming friend request."""
    status = friend_service.respond_to_request(db, ctx, friendship_id, body.accept)
    return RespondFriendResponse(status=status)


@router.get("")
async def list_friends(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """The caller's accepted friends."""
    friends = friend_service.list_friends(db, ctx)
    return {"friends": [FriendshipResponse.model_validate(f) for f in friends]}


@router.delete("/{friendship_id}")
async def remove_friend(
    friendship_id: int,
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Remove a friendship in both directions."""
    friend_service.remove_friend(db, ctx, friendship_id)
    return {"success": True}


# =============================================================================
# Aggregates
# =============================================================================


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Daily, weekly and all-time rankings of the caller and friends."""
    leaderboard = leaderboard_service.compute_leaderboard(db, ctx)
    return LeaderboardResponse.model_validate(leaderboard)


@router.get("/activity")
async def get_friend_activity(
    ctx: RequestContext = Depends(get_request_context),
    db: Session = Depends(get_db),
):
    """Most recent friend activity, newest first."""
    activities = activity_service.compute_activity_feed(db, ctx)
    return {
        "activities": [ActivityResponse.model_validate(a) for a in activities]
    }
