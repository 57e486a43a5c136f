import asyncio
import logging
from datetime import datetime, timedelta
from decimal import Decimal
from sqlalchemy import select
from storefront.db.database import Database, db
from storefront.models import Brand, Category, Product

logger = logging.getLogger(__name__)


# (name, slug, description)
BRANDS_DATA = [
    ("AUTOart", "autoart", "Highly detailed 1:18 composite and diecast replicas"),
    ("Kyosho", "kyosho", "Japanese diecast manufacturer since 1963"),
    ("Minichamps", "minichamps", "Racing and road car models from Aachen"),
    ("Bburago", "bburago", "Affordable Italian diecast classics"),
    ("CMC", "cmc", "Museum-grade models with hundreds of parts"),
]

# (name, slug, parent slug)
CATEGORIES_DATA = [
    ("Supercars", "supercars", None),
    ("Classic Cars", "classic-cars", None),
    ("Racing", "racing", None),
    ("Formula 1", "formula-1", "racing"),
    ("Le Mans", "le-mans", "racing"),
]

# (name, brand slug, category slug, price, original price, rating, reviews, featured, new)
PRODUCTS_DATA = [
    ("Ferrari F40", "autoart", "supercars", "249.99", "279.99", "4.90", 48, True, False),
    ("Lamborghini Countach LP5000 S", "autoart", "supercars", "229.99", None, "4.70", 31, True, False),
    ("Pagani Zonda R", "autoart", "racing", "259.99", None, "4.80", 12, False, True),
    ("Porsche 911 Carrera RS 2.7", "minichamps", "classic-cars", "139.99", "159.99", "4.60", 22, False, False),
    ("McLaren MP4/4 Senna", "minichamps", "formula-1", "179.99", None, "4.90", 57, True, False),
    ("Porsche 917K Le Mans 1970", "minichamps", "le-mans", "189.99", None, "4.50", 9, False, True),
    ("Nissan Skyline GT-R R34", "kyosho", "supercars", "119.99", None, "4.40", 40, False, False),
    ("Toyota 2000GT", "kyosho", "classic-cars", "109.99", "99.99", "4.20", 15, False, False),
    ("Ferrari 250 GTO", "cmc", "classic-cars", "599.99", None, "5.00", 8, True, False),
    ("Mercedes-Benz W196 Streamliner", "cmc", "formula-1", "549.99", None, "4.80", 6, False, True),
    ("Bugatti Chiron", "bburago", "supercars", "49.99", "59.99", "4.10", 73, False, False),
    ("Ford GT40 MkII", "bburago", "le-mans", "39.99", None, "3.90", 64, False, False),
]


def slugify(name: str) -> str:
    cleaned = "".join(c if c.isalnum() else "-" for c in name.lower())
    return "-".join(part for part in cleaned.split("-") if part)


async def seed_database(database: Database = db):
    await database.create_schema()

    async with database.session() as session:
        # Check if data exists
        result = await session.execute(select(Product).limit(1))
        if result.scalar():
            logger.info("Database already seeded")
            return

        brands = {slug: Brand(name=name, slug=slug, description=desc) for name, slug, desc in BRANDS_DATA}
        session.add_all(brands.values())

        categories = {}
        for name, slug, parent in CATEGORIES_DATA:
            categories[slug] = Category(name=name, slug=slug, parent=categories.get(parent))
        session.add_all(categories.values())

        await session.flush()  # Get IDs

        # Newest first in listing order
        now = datetime.now()
        for i, (name, brand, category, price, original, rating, reviews, featured, new) in enumerate(PRODUCTS_DATA):
            session.add(Product(
                name=name,
                slug=slugify(name),
                brand_id=brands[brand].id,
                category_id=categories[category].id,
                price=Decimal(price),
                original_price=Decimal(original) if original else None,
                description=f"1:18 scale {name} by {brands[brand].name}",
                stock_quantity=5 + i,
                is_featured=featured,
                is_new=new,
                rating=Decimal(rating),
                review_count=reviews,
                created_at=now - timedelta(days=i),
            ))

        await session.commit()
        logger.info(f"Database seeded: {len(brands)} brands, {len(categories)} categories, {len(PRODUCTS_DATA)} products")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(seed_database())
