# src/catalog_search/ingestion/catalog.py
from catalog_search.ingestion.models import CatalogEntry

# Canonical menu used to populate an empty index
MENU_ITEMS: tuple[CatalogEntry, ...] = (
    CatalogEntry(
        name="Pork and Shrimp Siomai",
        price=285,
        description="Classic dimsum with pork and shrimp filling.",
    ),
    CatalogEntry(
        name="Sharksfin Dumplings",
        price=285,
        description="Savory dumplings with sharksfin flavor.",
    ),
    CatalogEntry(
        name="Special Kikiam",
        price=370,
        description="Fried meat roll wrapped in bean curd skin.",
    ),
    CatalogEntry(
        name="Siopao Asado",
        price=315,
        description="Steamed buns filled with sweet bbq pork.",
    ),
    CatalogEntry(name="Hakaw", price=335, description="Crystal shrimp dumplings."),
    CatalogEntry(
        name="Chicken Feet",
        price=250,
        description="Braised chicken feet in savory sauce.",
    ),
    CatalogEntry(
        name="Beancurd Roll",
        price=295,
        description="Vegetarian friendly tofu skin rolls.",
    ),
    CatalogEntry(
        name="Xiao Long Bao",
        price=335,
        description="Soup dumplings with pork filling.",
    ),
)
