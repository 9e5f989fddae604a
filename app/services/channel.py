"""Channel service for channel profiles and watch history."""

from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.subscription import Subscription
from app.models.user import User
from app.models.video import Video, WatchHistoryEntry


class ChannelService:
    """Read-side queries over users, subscriptions and videos."""

    def get_channel_profile(self, db: Session, username: str | None, viewer_id: int) -> dict[str, Any]:
        """Channel profile with subscriber counts and whether the viewer is subscribed."""
        if not (username or "").strip():
            raise ValidationError("username is missing")

        channel = db.query(User).filter(User.username == username.strip().lower()).first()
        if not channel:
            raise NotFoundError("Channel not found")

        subscribers_count = (
            db.query(func.count(Subscription.id)).filter(Subscription.channel_id == channel.id).scalar() or 0
        )
        subscribed_to_count = (
            db.query(func.count(Subscription.id)).filter(Subscription.subscriber_id == channel.id).scalar() or 0
        )
        is_subscribed = (
            db.query(Subscription.id)
            .filter(Subscription.channel_id == channel.id, Subscription.subscriber_id == viewer_id)
            .first()
            is not None
        )

        return {
            "fullName": channel.full_name,
            "username": channel.username,
            "email": channel.email,
            "avatar": channel.avatar,
            "coverImage": channel.cover_image,
            "subscribersCount": subscribers_count,
            "channelsSubscribedToCount": subscribed_to_count,
            "isSubscribed": is_subscribed,
        }

    def get_watch_history(self, db: Session, user_id: int) -> list[dict[str, Any]]:
        """Videos the user watched, most recent first, each with a compact owner projection."""
        rows = (
            db.query(Video, User, WatchHistoryEntry.watched_at)
            .join(WatchHistoryEntry, WatchHistoryEntry.video_id == Video.id)
            .join(User, User.id == Video.owner_id)
            .filter(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.watched_at.desc(), WatchHistoryEntry.id.desc())
            .all()
        )
        return [
            {
                "id": video.id,
                "videoFile": video.video_file,
                "thumbnail": video.thumbnail,
                "title": video.title,
                "description": video.description,
                "duration": video.duration,
                "views": video.views,
                "isPublished": video.is_published,
                "watchedAt": watched_at.isoformat(),
                "owner": {"fullName": owner.full_name, "username": owner.username, "avatar": owner.avatar},
            }
            for video, owner, watched_at in rows
        ]


_channel_service: ChannelService | None = None


def get_channel_service() -> ChannelService:
    """Get singleton channel service instance."""
    global _channel_service
    if _channel_service is None:
        _channel_service = ChannelService()
    return _channel_service
