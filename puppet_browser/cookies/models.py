"""Cookie data model shared by drivers and the session file."""

from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class SameSite(str, Enum):
    """SameSite attribute values accepted by browsers."""

    STRICT = "Strict"
    LAX = "Lax"
    NONE = "None"


class Cookie(BaseModel):
    """A browser cookie.

    Accepts both WebDriver (``expiry``, ``httpOnly``) and Playwright
    (``expires``, where -1 means a session cookie) key names, and always
    serializes with the WebDriver names. The domain is passed through to
    the driver unvalidated.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    value: str
    path: str = "/"
    domain: str = ""
    secure: bool = False
    expiry: int | None = Field(
        default=None,
        validation_alias=AliasChoices("expiry", "expires"),
    )
    http_only: bool | None = Field(
        default=None,
        validation_alias=AliasChoices("httpOnly", "http_only"),
        serialization_alias="httpOnly",
    )
    same_site: SameSite | None = Field(
        default=None,
        validation_alias=AliasChoices("sameSite", "same_site"),
        serialization_alias="sameSite",
    )

    @field_validator("expiry", mode="before")
    @classmethod
    def _normalize_expiry(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if value < 0:
                return None
            return int(value)
        return value

    @property
    def key(self) -> tuple[str, str, str]:
        """Identity of the cookie inside a jar."""
        return (self.domain, self.path, self.name)

    @property
    def projection(self) -> tuple[str, str, str, str]:
        """Fields that survive a browser round-trip unchanged."""
        return (self.name, self.value, self.domain, self.path)

    def to_dict(self) -> dict[str, Any]:
        """Serialize with WebDriver key names, omitting unset attributes."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_playwright(self) -> dict[str, Any]:
        """Convert to the dict shape expected by ``BrowserContext.add_cookies``."""
        data: dict[str, Any] = {
            "name": self.name,
            "value": self.value,
            "domain": self.domain,
            "path": self.path,
            "secure": self.secure,
        }
        if self.expiry is not None:
            data["expires"] = self.expiry
        if self.http_only is not None:
            data["httpOnly"] = self.http_only
        if self.same_site is not None:
            data["sameSite"] = self.same_site.value
        return data


def coerce_cookies(cookies: "Cookie | dict | list[Cookie | dict]") -> list[Cookie]:
    """Normalize a single cookie or a sequence of cookies/dicts to a list."""
    if isinstance(cookies, (Cookie, dict)):
        cookies = [cookies]
    return [c if isinstance(c, Cookie) else Cookie.model_validate(c) for c in cookies]
