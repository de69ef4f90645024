"""Project visibility by role assignment."""

from ..models import Project, Role, UserSession


def is_assigned(project: Project, session: UserSession) -> bool:
    """A user sees a project only when an assignment matches username and role."""
    role = session.role.value if isinstance(session.role, Role) else session.role
    return any(
        a.username == session.username and a.role == role
        for a in project.assigned_to
    )


def visible_projects(projects: list[Project], session: UserSession) -> list[Project]:
    """Filter projects to those assigned to the session's user in its role.

    Admins see everything.
    """
    if session.role == Role.ADMIN:
        return list(projects)
    return [p for p in projects if is_assigned(p, session)]
