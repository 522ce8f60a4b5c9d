"""Category domain service."""

import logging

from equitrack.database.base import Database
from equitrack.domain.entities import Category as CategoryEntity, TransactionType

logger = logging.getLogger(__name__)


class CategoryService:
    """Service for managing income and expense categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(self, name: str, category_type: TransactionType) -> int:
        """Create a category.

        Args:
            name: Category name
            category_type: INCOME or EXPENSE

        Returns:
            Category ID

        Raises:
            ValueError: If the category type is not INCOME or EXPENSE
        """
        if category_type not in (TransactionType.INCOME, TransactionType.EXPENSE):
            raise ValueError(f"Categories must be INCOME or EXPENSE, got {category_type.value}")
        return self.db.create_category(name=name, category_type=category_type)

    def list_categories(self) -> list[CategoryEntity]:
        """List all categories."""
        return self.db.list_categories()

    def get_or_create_category(
        self, name: str, category_type: TransactionType
    ) -> CategoryEntity:
        """Find a category by name and type, creating it if missing."""
        for category in self.db.list_categories():
            if category.name == name and category.category_type == category_type:
                return category

        category_id = self.create_category(name=name, category_type=category_type)
        logger.info("Created %s category '%s'", category_type.value.lower(), name)
        return self.db.get_category(category_id)
