"""JWT verification for tokens issued by the external auth service.

This service never issues tokens. It only checks the HS256 signature with the
shared JWT_SECRET and reads these claims:
  - sub:  the verified user id (opaque string)
  - role: "admin" unlocks plan management and internal commission endpoints
  - name: optional display name, used as the referral code prefix
"""

from dataclasses import dataclass

from jose import JWTError, jwt

from config.settings import settings


class InvalidTokenError(Exception):
    """Token is malformed, expired, badly signed or lacks a subject."""


@dataclass(frozen=True)
class Identity:
    user_id: str
    role: str = "user"
    name: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def decode_access_token(token: str) -> Identity:
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError as exc:
        raise InvalidTokenError(str(exc)) from exc

    if payload.get("type", "access") != "access":
        raise InvalidTokenError("not an access token")
    user_id = payload.get("sub")
    if not user_id:
        raise InvalidTokenError("missing subject")
    name = payload.get("name")
    return Identity(
        user_id=str(user_id),
        role=str(payload.get("role", "user")),
        name=str(name) if name else None,
    )
