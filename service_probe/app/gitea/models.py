"""
Gitea API record models.

Only the fields the probe reads are declared; everything else in the Gitea
payloads is ignored.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GiteaRecord(BaseModel):
    """Base for decoded Gitea records."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class User(GiteaRecord):
    """Gitea user (organization member or pull request poster)."""
    login: str = Field(..., description="Login name")
    id: Optional[int] = Field(None, description="User ID")


class Organization(GiteaRecord):
    """Gitea organization."""
    username: str = Field(..., description="Organization login name")
    full_name: Optional[str] = Field(None, description="Display name")
    visibility: Optional[str] = Field(None, description="public, limited or private")

    @property
    def login_name(self) -> str:
        return self.username


class Repository(GiteaRecord):
    """Gitea repository."""
    name: str = Field(..., description="Repository name")
    full_name: Optional[str] = Field(None, description="owner/name")


class PullRequest(GiteaRecord):
    """Open Gitea pull request."""
    id: int = Field(..., description="Pull request ID")
    number: Optional[int] = Field(None, description="Pull request number within the repository")
    created_at: datetime = Field(..., description="Creation time")
    user: User = Field(..., description="Poster")

    @property
    def poster_username(self) -> str:
        return self.user.login

    @property
    def created_at_seconds(self) -> int:
        """Creation time as whole Unix seconds. Naive timestamps are UTC."""
        created_at = self.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return int(created_at.timestamp())
