import logging
from typing import Iterable

from task_organizer.errors import ConfigurationError
from task_organizer.models import Category, CategoryName

logger = logging.getLogger(__name__)


class CategoryResolver:
    """Maps category labels to stored category ids, falling back to "Other"."""

    def __init__(self, categories: Iterable[Category]):
        self.ids_by_name = {c.name: c.id for c in categories}
        fallback = self.ids_by_name.get(CategoryName.OTHER.value)
        if fallback is None:
            raise ConfigurationError(
                f"Category '{CategoryName.OTHER.value}' is missing; categories must be seeded"
            )
        self.fallback_id = fallback

    def resolve(self, label) -> int:
        # plain value keeps the fallback log message readable
        if isinstance(label, CategoryName):
            label = label.value
        category_id = self.ids_by_name.get(label)
        if category_id is None:
            logger.info(f"Unknown category {label!r}, using '{CategoryName.OTHER.value}'")
            return self.fallback_id
        return category_id
