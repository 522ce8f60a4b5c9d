"""Project domain service."""

from typing import Optional

from equitrack.database.base import Database
from equitrack.domain.entities import Project as ProjectEntity
from equitrack.domain.errors import (
    ConflictError,
    NotFoundError,
    ValidationError,
    project_not_found,
)


class ProjectService:
    """Service for managing projects."""

    def __init__(self, db: Database):
        """Initialize project service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_project(self, name: str) -> int:
        """Create a project.

        Raises:
            ValidationError: If the name is empty
            ConflictError: If a project with the same name exists
        """
        if not name or not name.strip():
            raise ValidationError("Project name is required")
        for project in self.db.list_projects():
            if project.name == name:
                raise ConflictError(f"Project with name '{name}' already exists")
        return self.db.create_project(name=name)

    def get_project(self, project_id: int) -> Optional[ProjectEntity]:
        """Get project by ID."""
        return self.db.get_project(project_id)

    def require_project(self, project_id: int) -> ProjectEntity:
        """Get project by ID or raise NotFoundError."""
        project = self.db.get_project(project_id)
        if project is None:
            raise NotFoundError(project_not_found(project_id))
        return project

    def list_projects(self) -> list[ProjectEntity]:
        """List all projects."""
        return self.db.list_projects()
