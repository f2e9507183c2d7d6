"""Product catalog - homemade powders, pickles and nutrition foods"""
from typing import Optional

from storefront.models import MenuItem, MenuCategory, CustomizationKind

# Masala powders and pickles are sold by spice level, everything else by sweetener
SPICE_CATEGORIES = {"masala-powders", "homemade-pickles"}


def _category(category_id: str, name: str, description: str, items: list[tuple]) -> MenuCategory:
    kind = CustomizationKind.SPICE if category_id in SPICE_CATEGORIES else CustomizationKind.SUGAR
    return MenuCategory(
        id=category_id,
        name=name,
        description=description,
        customization_kind=kind,
        items=[
            MenuItem(
                id=item_id,
                name=item_name,
                price=price,
                category=category_id,
                image=f"/images/products/{image}",
                customization_kind=kind
            )
            for item_id, item_name, price, image in items
        ]
    )


MENU_CATEGORIES: list[MenuCategory] = [
    _category("masala-powders", "Masala Powders", "Authentic spice blends ground fresh", [
        ("rasam-powder", "Rasam Powder", 650, "rasam-powder.jpg"),
        ("sambar-powder", "Sambar Powder", 600, "sambar-powder.png"),
        ("vangibath-powder", "Vangibath Powder", 600, "vangibath-powder.png"),
        ("bisibelebath-powder", "Bisibelebath Powder", 600, "bisibelebath-powder.png"),
        ("methi-powder", "Methi Powder", 560, "methi-powder.png"),
        ("chutney-powder", "Chutney Powder", 600, "chutney-powder.png"),
        ("puliogare-powder", "Puliogare Gojju - Powder", 600, "puliogare-gojju-powder.png"),
        ("coriander-chutney-powder", "Coriander Seeds Chutney Powder", 550, "coriander-seeds-chutney-powder.png"),
    ]),
    _category("homemade-pickles", "Homemade Pickles", "Traditional recipes, authentic taste", [
        ("mango-pickle", "Mango Pickle", 500, "mango-pickle.png"),
        ("lemon-pickle", "Lemon Pickle", 500, "lemon-pickle.png"),
        ("mixed-vegetable-pickle", "Mixed Vegetable Pickle", 500, "mixed-vegetable-pickle.png"),
    ]),
    _category("baby-nutrition", "Baby Nutrition Foods", "Healthy start for little ones", [
        ("ragi-seri-dals", "Ragi Seri – with dals and pulses", 700, "ragi-seri-with-dals-and-pulses.png"),
        ("ragi-seri-dryfruits", "Ragi Seri – with dry fruits", 1300, "ragi-seri-with-dry-fruits.png"),
    ]),
    _category("adult-powders", "Adult Powders", "Nutritious health supplements", [
        ("millet-multigrain", "Millet / Multigrain Powder", 700, "millet-multigrain-powder.png"),
        ("ragi-malt", "Ragi Malt", 700, "ragi-malt.png"),
    ]),
    _category("special-care", "Special Care Products", "Premium nutrition for special needs", [
        ("dryfruit-laddoo", "Dry Fruit Laddoo", 1900, "dry-fruit-laddoo.png"),
    ]),
]

MENU_ITEMS: list[MenuItem] = [item for category in MENU_CATEGORIES for item in category.items]


def get_menu_by_id(item_id: str) -> Optional[MenuItem]:
    """Look up a catalog item by id"""
    for item in MENU_ITEMS:
        if item.id == item_id:
            return item
    return None


def get_menu_by_category(category_id: str) -> list[MenuItem]:
    """Items of one category"""
    return [item for item in MENU_ITEMS if item.category == category_id]


def get_all_categories() -> list[dict]:
    """Category list without items"""
    return [
        {
            "id": cat.id,
            "name": cat.name,
            "description": cat.description,
            "customization_kind": cat.customization_kind.value,
            "item_count": len(cat.items)
        }
        for cat in MENU_CATEGORIES
    ]
