"""Code list (reference value) domain service."""

from debtbook.database.base import Database

CURRENCIES = "currencies"
LANGUAGES = "languages"

DEFAULT_CODE_LISTS = {
    CURRENCIES: [
        ("USD", "US Dollar"),
        ("EUR", "Euro"),
        ("GBP", "British Pound"),
        ("INR", "Indian Rupee"),
        ("PKR", "Pakistani Rupee"),
        ("BDT", "Bangladeshi Taka"),
        ("AED", "UAE Dirham"),
        ("SAR", "Saudi Riyal"),
    ],
    LANGUAGES: [
        ("en", "English"),
        ("ur", "Urdu"),
        ("hi", "Hindi"),
        ("bn", "Bengali"),
        ("ar", "Arabic"),
    ],
}


class CodeListService:
    """Service for reference value lists such as currencies and languages."""

    def __init__(self, db: Database):
        """Initialize code list service.

        Args:
            db: Database instance
        """
        self.db = db

    def seed_defaults(self) -> int:
        """Create the default code lists that are still empty.

        Returns:
            Number of elements added
        """
        added = 0
        with self.db.write():
            for name, elements in DEFAULT_CODE_LISTS.items():
                if self.db.list_code_list_elements(name):
                    continue
                self.db.create_code_list(name)
                for order, (element, description) in enumerate(elements):
                    self.db.add_code_list_element(name, element, description, sort_order=order)
                    added += 1
        return added

    def list_elements(self, name: str) -> list[str]:
        """Return the active element values of a code list in sort order."""
        return [element.element for element in self.db.list_code_list_elements(name)]

    def is_valid(self, name: str, value: str) -> bool:
        """Check a value against a code list. An unseeded list accepts anything."""
        elements = self.list_elements(name)
        return not elements or value in elements
