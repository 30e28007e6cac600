"""
Schemas for the free-form JSON kept in ``UserDetail.extra``.

Field names follow Python style; the stored JSON keeps the capitalized keys
(``Interests``, ``Preferences``, ``SocialMedia``) through aliases.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ExtraSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Preferences(ExtraSchema):
    theme: Literal["Light", "Dark"] = Field("Light", alias="Theme")
    notifications: bool = Field(True, alias="Notifications")


class SocialMedia(ExtraSchema):
    twitter: Optional[str] = Field(None, alias="Twitter")
    instagram: Optional[str] = Field(None, alias="Instagram")


class UserExtra(ExtraSchema):
    """Interests, preferences and social handles of a user"""
    interests: List[str] = Field(default_factory=list, alias="Interests")
    preferences: Optional[Preferences] = Field(None, alias="Preferences")
    social_media: Optional[SocialMedia] = Field(None, alias="SocialMedia")
