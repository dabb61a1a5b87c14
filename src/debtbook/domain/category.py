"""Category domain service."""

from typing import Optional

from debtbook.database.base import Database
from debtbook.domain.entities import Category, touched
from debtbook.domain.errors import NotFoundError, ValidationError, invalid_choice, record_not_found
from debtbook.domain.ledger import ChangeLedger
from debtbook.utils.ids import new_record_id

CATEGORY_TYPES = ("income", "expense", "debt")

CATEGORY_COLORS = [
    "#FF6B6B", "#4ECDC4", "#45B7D1", "#96CEB4", "#FFEAA7",
    "#DDA0DD", "#98D8C8", "#F7DC6F", "#BB8FCE", "#85C1E9",
]

# (name, description, icon) per category type
DEFAULT_CATEGORIES = {
    "income": [
        ("Salary", "Regular employment income", "💼"),
        ("Business", "Business income", "🏢"),
        ("Investment", "Investment returns", "📈"),
        ("Freelance", "Freelance work income", "💻"),
        ("Other Income", "Other sources of income", "💰"),
    ],
    "expense": [
        ("Food & Dining", "Restaurants, groceries, etc.", "🍽️"),
        ("Transportation", "Car, gas, public transport", "🚗"),
        ("Shopping", "Clothing, electronics, etc.", "🛍️"),
        ("Entertainment", "Movies, games, hobbies", "🎬"),
        ("Bills & Utilities", "Electricity, water, internet", "📄"),
        ("Healthcare", "Medical expenses", "🏥"),
        ("Education", "Books, courses, tuition", "📚"),
        ("Travel", "Vacation, business trips", "✈️"),
        ("Home & Garden", "Rent, maintenance, furniture", "🏠"),
        ("Personal Care", "Haircut, cosmetics, etc.", "💄"),
    ],
    "debt": [
        ("Credit Card", "Credit card debt", "💳"),
        ("Personal Loan", "Personal loans", "🏦"),
        ("Mortgage", "Home mortgage", "🏡"),
        ("Student Loan", "Education loans", "🎓"),
        ("Car Loan", "Vehicle financing", "🚙"),
        ("Business Loan", "Business financing", "🏢"),
    ],
}

CATEGORY_FIELDS = frozenset({"name", "description", "color", "icon", "parent_category_id"})


class CategoryService:
    """Service for managing categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db
        self.ledger = ChangeLedger(db)

    def _require(self, category_id: str) -> Category:
        category = self.db.get_record(Category.TABLE, category_id)
        if category is None:
            raise NotFoundError(record_not_found(Category.TABLE, category_id))
        return category

    def create_category(
        self,
        user_id: str,
        name: str,
        category_type: str = "expense",
        description: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
        parent_category_id: Optional[str] = None,
    ) -> str:
        """Create a category.

        Args:
            user_id: Owning user ID
            name: Category name
            category_type: income, expense or debt
            description: Optional description
            color: Optional display color
            icon: Optional display icon
            parent_category_id: Optional parent category ID

        Returns:
            Category ID

        Raises:
            ValidationError: If the type is unknown
            NotFoundError: If parent category doesn't exist
        """
        if category_type not in CATEGORY_TYPES:
            raise ValidationError(invalid_choice("category type", category_type, CATEGORY_TYPES))
        if parent_category_id is not None:
            self._require(parent_category_id)

        category = Category(
            id=new_record_id(),
            name=name,
            user_id=user_id,
            type=category_type,
            description=description,
            color=color,
            icon=icon,
            parent_category_id=parent_category_id,
        )
        with self.db.write():
            self.db.insert_record(category)
            self.ledger.record_create(Category.TABLE, category.id, user_id)
        return category.id

    def get_category(self, category_id: str) -> Optional[Category]:
        return self.db.get_record(Category.TABLE, category_id)

    def list_categories(
        self, user_id: str, category_type: Optional[str] = None, include_inactive: bool = False
    ) -> list[Category]:
        """List a user's categories.

        Args:
            user_id: Owning user ID
            category_type: Optional type filter (income, expense or debt)
            include_inactive: Whether deactivated categories are listed
        """
        filters = {"user_id": user_id}
        if category_type is not None:
            filters["type"] = category_type
        if not include_inactive:
            filters["is_active"] = True
        return self.db.list_records(Category.TABLE, **filters)

    def update_category(self, category_id: str, **changes) -> Category:
        unknown = set(changes) - CATEGORY_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update category field(s): {', '.join(sorted(unknown))}")
        category = touched(self._require(category_id), **changes)
        with self.db.write():
            self.db.save_record(category)
            self.ledger.record_update(Category.TABLE, category.id, category.user_id)
        return category

    def deactivate_category(self, category_id: str) -> Category:
        """Soft-delete a category, keeping it for existing transactions."""
        category = touched(self._require(category_id), is_active=False)
        with self.db.write():
            self.db.save_record(category)
            self.ledger.record_update(Category.TABLE, category.id, category.user_id)
        return category

    def initialize_defaults(self, user_id: str) -> int:
        """Create the default income, expense and debt categories.

        Does nothing if the user already has categories.

        Returns:
            Number of categories created
        """
        if self.db.list_records(Category.TABLE, user_id=user_id):
            return 0

        count = 0
        with self.db.write():
            for category_type, defaults in DEFAULT_CATEGORIES.items():
                for name, description, icon in defaults:
                    self.create_category(
                        user_id,
                        name,
                        category_type=category_type,
                        description=description,
                        color=CATEGORY_COLORS[count % len(CATEGORY_COLORS)],
                        icon=icon,
                    )
                    count += 1
        return count
