"""User profile lookups and the per-request user context."""

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Optional

from closet_app.config import DEFAULT_PREMIUM_PLAN

logger = logging.getLogger(__name__)


@dataclass
class UserProfile:
    user_id: str
    name: str = ""
    last_name: str = ""
    plan: str = "Free"
    email: str = ""


@dataclass(frozen=True)
class UserContext:
    """Identity resolved once per request and handed to every operation."""

    user_id: str
    profile: UserProfile
    premium_plan: str = DEFAULT_PREMIUM_PLAN

    @property
    def is_premium(self) -> bool:
        return self.profile.plan.strip().lower() == self.premium_plan.strip().lower()

    @property
    def outfit_mode(self) -> str:
        return "ai" if self.is_premium else "random"


class UserProfileService:
    """JSON-backed profile store mirrored from the identity service."""

    def __init__(self, base_dir: str | Path = "data/profiles", premium_plan: str = DEFAULT_PREMIUM_PLAN) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.premium_plan = premium_plan

    def _profile_path(self, user_id: str) -> Path:
        return self.base_dir / f"{user_id}.json"

    def get_user_profile(self, user_id: str) -> Optional[UserProfile]:
        path = self._profile_path(user_id)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text())
        except (OSError, ValueError) as exc:
            logger.warning("Unreadable profile file", extra={"profile_path": str(path), "error": str(exc)})
            return None
        if not isinstance(data, dict):
            logger.warning("Profile file is not a JSON object", extra={"profile_path": str(path)})
            return None
        known = {field.name for field in fields(UserProfile)}
        values = {key: str(value) for key, value in data.items() if key in known and value is not None}
        return UserProfile(**{**values, "user_id": user_id})

    def upsert_profile(self, profile: UserProfile) -> UserProfile:
        self._profile_path(profile.user_id).write_text(json.dumps(asdict(profile), indent=2))
        return profile

    def build_context(self, user_id: str) -> Optional[UserContext]:
        """Resolve a user id into a :class:`UserContext`, or ``None`` if unknown."""

        if not user_id or "/" in user_id or user_id.startswith("."):
            return None
        profile = self.get_user_profile(user_id)
        if profile is None:
            return None
        return UserContext(user_id=user_id, profile=profile, premium_plan=self.premium_plan)


__all__ = ["UserProfile", "UserContext", "UserProfileService"]
