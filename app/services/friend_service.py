"""
Friend graph and profile management.

Friendships are directed edges. A pending request is one row owned by the
requester; an accepted friendship is two rows, one per direction. Every path
that accepts a request goes through `_accept_pair` so the pair is always
completed the same way.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.config import settings
from app.models.friendship import Friendship, FriendshipStatus
from app.models.user import User
from app.models.user_profile import UserProfile
from app.services.context import RequestContext
from app.services.errors import (
    ConflictError,
    InvalidOperationError,
    NotFoundError,
    ResourceExhaustedError,
    UnauthorizedError,
)
from app.services.file_service import AVATAR_DIR, file_service

logger = logging.getLogger(__name__)

# Uppercase alphanumerics without the look-alikes 0/O and 1/I
FRIEND_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"

UNKNOWN_DISPLAY_NAME = "Unknown"


def generate_friend_code(length: Optional[int] = None) -> str:
    """Random friend code drawn from FRIEND_CODE_ALPHABET."""
    length = length or settings.friend_code_length
    return "".join(secrets.choice(FRIEND_CODE_ALPHABET) for _ in range(length))


@dataclass
class ProfileSummary:
    """Public face of a user as shown to friends."""

    user_id: UUID
    display_name: str
    avatar_url: Optional[str]
    friend_code: Optional[str] = None


@dataclass
class FriendshipView:
    """A friendship row enriched with the counterpart's profile."""

    id: int
    user_id: UUID
    friend_user_id: UUID
    status: FriendshipStatus
    created_at: Optional[datetime]
    profile: Optional[ProfileSummary]


def summarize_profile(profile: Optional[UserProfile], user_id: UUID) -> ProfileSummary:
    """
    Build a ProfileSummary, degrading to "Unknown" with no avatar.

    Enrichment must never fail the surrounding list or aggregate.
    """
    if profile is None:
        return ProfileSummary(user_id=user_id, display_name=UNKNOWN_DISPLAY_NAME, avatar_url=None)

    try:
        avatar_url = file_service.get_file_url(profile.avatar_path)
    except Exception as e:
        logger.warning("Could not resolve avatar for user %s: %s", user_id, e)
        avatar_url = None

    return ProfileSummary(
        user_id=user_id,
        display_name=profile.display_name or UNKNOWN_DISPLAY_NAME,
        avatar_url=avatar_url,
        friend_code=profile.friend_code,
    )


class FriendService:
    """Service for profiles and the friendship lifecycle."""

    # =========================================================================
    # Profiles
    # =========================================================================

    @staticmethod
    def get_profile(db: Session, user_id: UUID) -> Optional[UserProfile]:
        """Get a user's profile, if one has been issued."""
        return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()

    @staticmethod
    def get_profiles(db: Session, user_ids: Iterable[UUID]) -> Dict[UUID, UserProfile]:
        """Load profiles for several users in one query, keyed by user id."""
        ids = list(set(user_ids))
        if not ids:
            return {}
        rows = db.query(UserProfile).filter(UserProfile.user_id.in_(ids)).all()
        return {row.user_id: row for row in rows}

    @staticmethod
    def _allocate_friend_code(db: Session) -> str:
        """
        Pick a friend code no other profile holds.

        Raises:
            ResourceExhaustedError: every attempt collided
        """
        attempts = settings.friend_code_max_attempts
        for attempt in range(attempts):
            code = generate_friend_code()
            taken = (
                db.query(UserProfile.id)
                .filter(UserProfile.friend_code == code)
                .first()
            )
            if taken is None:
                return code
            logger.warning(
                "Friend code collision on attempt %d/%d", attempt + 1, attempts
            )

        logger.error("Could not allocate a unique friend code after %d attempts", attempts)
        raise ResourceExhaustedError("Could not allocate a unique friend code")

    @staticmethod
    def get_or_create_profile(db: Session, ctx: RequestContext) -> UserProfile:
        """
        Return the caller's profile, creating it on first access.

        A new profile gets a unique friend code and a display name taken
        from the user's name or the local part of their email.
        """
        profile = FriendService.get_profile(db, ctx.user_id)
        if profile:
            return profile

        user = db.get(User, ctx.user_id)
        if user is None:
            raise NotFoundError("User not found")

        display_name = (user.name or user.email.split("@")[0])[:50]
        profile = UserProfile(
            user_id=user.id,
            display_name=display_name,
            email=user.email,
            avatar_path=None,
            friend_code=FriendService._allocate_friend_code(db),
        )
        db.add(profile)
        try:
            db.commit()
        except IntegrityError:
            # Concurrent first fetch created it already
            db.rollback()
            existing = FriendService.get_profile(db, ctx.user_id)
            if existing is None:
                raise
            return existing

        db.refresh(profile)
        logger.info("Created profile for user %s with friend code %s", user.id, profile.friend_code)
        return profile

    @staticmethod
    def update_profile(
        db: Session,
        ctx: RequestContext,
        display_name: str,
        avatar: Optional[Tuple[bytes, Optional[str]]] = None,
    ) -> UserProfile:
        """
        Update the caller's display name and optionally replace the avatar.

        Args:
            db: Database session
            ctx: Request context
            display_name: New display name (1-50 characters after trimming)
            avatar: Optional (data, content_type) of a new avatar image

        Returns:
            Updated UserProfile
        """
        profile = FriendService.get_profile(db, ctx.user_id)
        if profile is None:
            raise NotFoundError("Profile not found")

        name = display_name.strip()
        if not 1 <= len(name) <= 50:
            raise InvalidOperationError("Display name must be 1-50 characters")

        old_avatar = None
        if avatar is not None:
            data, content_type = avatar
            try:
                new_path = file_service.save_image(AVATAR_DIR, data, content_type)
            except ValueError as e:
                raise InvalidOperationError(str(e)) from e
            old_avatar = profile.avatar_path
            profile.avatar_path = new_path

        profile.display_name = name
        db.commit()
        db.refresh(profile)

        if old_avatar and not file_service.delete_file(old_avatar):
            logger.warning("Old avatar %s was not removed", old_avatar)

        return profile

    # =========================================================================
    # Friendship edges
    # =========================================================================

    @staticmethod
    def _get_edge(db: Session, user_id: UUID, friend_user_id: UUID) -> Optional[Friendship]:
        """The directed edge user_id -> friend_user_id, any status."""
        return (
            db.query(Friendship)
            .filter(
                Friendship.user_id == user_id,
                Friendship.friend_user_id == friend_user_id,
            )
            .first()
        )

    @staticmethod
    def _accept_pair(db: Session, request: Friendship) -> Friendship:
        """
        Accept a request row and make sure its mirror exists.

        Phase 1 marks the request accepted. Phase 2 creates the reverse row,
        or upgrades one that is already there. Running this again after a
        failure between the phases completes the pair without duplicating it.

        Returns:
            The mirror (reverse-direction) row
        """
        if request.status != FriendshipStatus.ACCEPTED:
            request.status = FriendshipStatus.ACCEPTED
            db.commit()

        mirror = FriendService._get_edge(db, request.friend_user_id, request.user_id)
        if mirror is None:
            mirror = Friendship(
                user_id=request.friend_user_id,
                friend_user_id=request.user_id,
                status=FriendshipStatus.ACCEPTED,
            )
            db.add(mirror)
            try:
                db.commit()
            except IntegrityError:
                # Another accept of the same pair inserted the mirror first
                db.rollback()
                mirror = FriendService._get_edge(db, request.friend_user_id, request.user_id)
                if mirror is None:
                    raise
                logger.info("Reverse edge %s was created concurrently", mirror.id)

        if mirror.status != FriendshipStatus.ACCEPTED:
            logger.info("Upgrading existing reverse edge %s to accepted", mirror.id)
            mirror.status = FriendshipStatus.ACCEPTED
            db.commit()

        logger.info(
            "Friendship accepted between %s and %s", request.user_id, request.friend_user_id
        )
        db.refresh(mirror)
        return mirror

    @staticmethod
    def add_friend(db: Session, ctx: RequestContext, friend_code: str) -> FriendshipStatus:
        """
        Send a friend request to the owner of a friend code.

        If the target already has a pending request to the caller, both are
        friends immediately.

        Returns:
            FriendshipStatus.PENDING for a new request,
            FriendshipStatus.ACCEPTED when a crossing request was accepted
        """
        code = friend_code.strip().upper()
        if not 6 <= len(code) <= 10:
            raise InvalidOperationError("Friend code must be 6-10 characters")

        target = db.query(UserProfile).filter(UserProfile.friend_code == code).first()
        if target is None:
            raise NotFoundError("Friend code not found")

        if target.user_id == ctx.user_id:
            raise InvalidOperationError("You can't add yourself as a friend")

        if FriendService._get_edge(db, ctx.user_id, target.user_id):
            raise ConflictError("Friend request already sent or already friends")

        reverse = FriendService._get_edge(db, target.user_id, ctx.user_id)
        if reverse is not None:
            if reverse.status == FriendshipStatus.PENDING:
                FriendService._accept_pair(db, reverse)
                return FriendshipStatus.ACCEPTED
            raise ConflictError("Already friends")

        request = Friendship(
            user_id=ctx.user_id,
            friend_user_id=target.user_id,
            status=FriendshipStatus.PENDING,
        )
        db.add(request)
        try:
            db.commit()
        except IntegrityError as e:
            # Lost a race with an identical request
            db.rollback()
            raise ConflictError("Friend request already sent or already friends") from e

        logger.info("Friend request %s -> %s created", ctx.user_id, target.user_id)
        return FriendshipStatus.PENDING

    @staticmethod
    def respond_to_request(
        db: Session, ctx: RequestContext, friendship_id: int, accept: bool
    ) -> str:
        """
        Accept or decline an incoming friend request.

        Only the target of a pending request may respond. Declining deletes
        the row. Accepting a request whose mirror is missing (an interrupted
        earlier accept) completes the pair.

        Returns:
            "accepted" or "declined"
        """
        request = db.get(Friendship, friendship_id)
        if request is None:
            raise NotFoundError("Friend request not found")

        if request.friend_user_id != ctx.user_id:
            raise UnauthorizedError("Friend request is not addressed to you")

        if request.status != FriendshipStatus.PENDING:
            mirror = FriendService._get_edge(db, request.friend_user_id, request.user_id)
            if accept and mirror is None:
                logger.info("Completing interrupted accept of friendship %s", request.id)
                FriendService._accept_pair(db, request)
                return "accepted"
            raise ConflictError("Friend request already processed")

        if accept:
            FriendService._accept_pair(db, request)
            return "accepted"

        db.delete(request)
        db.commit()
        logger.info("Friend request %s declined", friendship_id)
        return "declined"

    @staticmethod
    def remove_friend(db: Session, ctx: RequestContext, friendship_id: int) -> None:
        """
        Delete a friendship the caller owns, plus its reverse row if present.

        A missing reverse row is tolerated (legacy or partial state).
        """
        friendship = db.get(Friendship, friendship_id)
        if friendship is None:
            raise NotFoundError("Friendship not found")

        if friendship.user_id != ctx.user_id:
            raise UnauthorizedError("Friendship is not yours to remove")

        reverse = FriendService._get_edge(db, friendship.friend_user_id, friendship.user_id)

        db.delete(friendship)
        if reverse is not None:
            db.delete(reverse)
        db.commit()
        logger.info(
            "Friendship %s removed (reverse row %s)",
            friendship_id,
            "deleted" if reverse is not None else "absent",
        )

    # =========================================================================
    # Listing
    # =========================================================================

    @staticmethod
    def accepted_friend_ids(db: Session, user_id: UUID) -> List[UUID]:
        """Users reachable over an accepted outgoing edge, oldest friendship first."""
        rows = (
            db.query(Friendship.friend_user_id)
            .filter(
                Friendship.user_id == user_id,
                Friendship.status == FriendshipStatus.ACCEPTED,
            )
            .order_by(Friendship.created_at, Friendship.id)
            .all()
        )
        return [row.friend_user_id for row in rows]

    @staticmethod
    def _enrich(
        db: Session, rows: List[Friendship], counterpart_of
    ) -> List[FriendshipView]:
        profiles = FriendService.get_profiles(db, (counterpart_of(r) for r in rows))
        views = []
        for row in rows:
            other = counterpart_of(row)
            profile = profiles.get(other)
            views.append(
                FriendshipView(
                    id=row.id,
                    user_id=row.user_id,
                    friend_user_id=row.friend_user_id,
                    status=row.status,
                    created_at=row.created_at,
                    profile=summarize_profile(profile, other) if profile else None,
                )
            )
        return views

    @staticmethod
    def list_friend_requests(db: Session, ctx: RequestContext) -> List[FriendshipView]:
        """Pending requests addressed to the caller, with requester profiles."""
        rows = (
            db.query(Friendship)
            .filter(
                Friendship.friend_user_id == ctx.user_id,
                Friendship.status == FriendshipStatus.PENDING,
            )
            .order_by(Friendship.created_at, Friendship.id)
            .all()
        )
        return FriendService._enrich(db, rows, lambda r: r.user_id)

    @staticmethod
    def list_friends(db: Session, ctx: RequestContext) -> List[FriendshipView]:
        """The caller's accepted friendships, with friend profiles."""
        rows = (
            db.query(Friendship)
            .filter(
                Friendship.user_id == ctx.user_id,
                Friendship.status == FriendshipStatus.ACCEPTED,
            )
            .order_by(Friendship.created_at, Friendship.id)
            .all()
        )
        return FriendService._enrich(db, rows, lambda r: r.friend_user_id)


# Singleton instance
friend_service = FriendService()
