"""Tests for project visibility."""

from dubdesk.models import Project, Role, UserSession
from dubdesk.pipeline import is_assigned, visible_projects


def _project(title: str, *assignments: tuple[str, str]) -> Project:
    return Project.model_validate({
        "title": title,
        "assignedTo": [{"username": u, "role": r} for u, r in assignments],
    })


class TestVisibility:
    """Tests for visible_projects."""

    def test_requires_username_and_role(self) -> None:
        """Both the username and the view's role must match."""
        project = _project("Show", ("ana", "transcriber"))
        assert is_assigned(project, UserSession(username="ana", role=Role.TRANSCRIBER))
        assert not is_assigned(project, UserSession(username="ana", role=Role.TRANSLATOR))
        assert not is_assigned(project, UserSession(username="ben", role=Role.TRANSCRIBER))

    def test_filters_projects(self) -> None:
        """Only assigned projects are visible."""
        projects = [
            _project("A", ("ana", "voice-over")),
            _project("B", ("ben", "voice-over")),
        ]
        visible = visible_projects(projects, UserSession(username="ana", role=Role.VOICE_OVER))
        assert [p.title for p in visible] == ["A"]

    def test_admin_sees_everything(self) -> None:
        """Admins are not filtered."""
        projects = [_project("A"), _project("B")]
        visible = visible_projects(projects, UserSession(username="root", role=Role.ADMIN))
        assert len(visible) == 2
