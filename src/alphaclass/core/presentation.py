"""Role presentation tags for clients. Cosmetic only; never used for access decisions."""

from alphaclass.core.enums import Role

ROLE_BADGES: dict[Role, dict[str, str]] = {
    Role.STUDENT: {"icon": "user-graduate", "color": "blue"},
    Role.TEACHER: {"icon": "chalkboard-teacher", "color": "green"},
    Role.ADMIN: {"icon": "user-shield", "color": "purple"},
}


def role_badge(role: Role) -> dict[str, str]:
    return dict(ROLE_BADGES[role])
