# shopcompare/sample_data.py
import datetime
from typing import List, Optional

from .models import Availability, Category, Product, RetailerPrice, now_utc


def baseline_products(now: Optional[datetime.datetime] = None) -> List[Product]:
    """
    Fixed catalog used for first start and for a full reset.
    Deal expiries are relative to `now`.
    """
    now = now or now_utc()

    def in_days(days: int) -> datetime.datetime:
        return now + datetime.timedelta(days=days)

    return [
        Product(
            name="iPhone 14 Pro 256GB",
            description="Apple flagship smartphone with Dynamic Island, A16 Bionic chip "
                        "and an upgraded 48MP camera. Great for photo and video.",
            category=Category.ELECTRONICS,
            prices=[
                RetailerPrice("iStore", 3299.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("TechnoMart", 3450.00, shipping_cost=15, delivery_days=2),
                RetailerPrice("MTS Shop", 3399.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("5 Element", 3550.00, shipping_cost=20, delivery_days=3),
            ],
            average_rating=4.8,
            review_count=342,
            specifications={"Display": "6.1\"", "Storage": "256GB", "Chip": "A16 Bionic"},
            is_deal=True,
            deal_expiry_date=in_days(7),
            deal_discount=15,
        ),
        Product(
            name="Samsung Galaxy S23 Ultra",
            description="Premium Android smartphone with S Pen, 200MP camera and "
                        "Snapdragon 8 Gen 2.",
            category=Category.ELECTRONICS,
            prices=[
                RetailerPrice("Samsung Store", 3699.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("TechnoMart", 3799.00, shipping_cost=15, delivery_days=2),
                RetailerPrice("Euroset", 3650.00, shipping_cost=10, delivery_days=2),
            ],
            average_rating=4.7,
            review_count=289,
            specifications={"Display": "6.8\"", "Storage": "512GB", "Chip": "Snapdragon 8 Gen 2"},
        ),
        Product(
            name="Apple AirPods Pro 2",
            description="Wireless earbuds with active noise cancellation, transparency "
                        "mode and spatial audio.",
            category=Category.ELECTRONICS,
            prices=[
                RetailerPrice("iStore", 799.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("MTS Shop", 849.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("TechnoMart", 829.00, shipping_cost=10, delivery_days=2),
            ],
            average_rating=4.9,
            review_count=521,
            specifications={"Noise cancelling": "Yes", "Battery life": "6 hours", "Charging": "USB-C"},
            is_deal=True,
            deal_expiry_date=in_days(3),
            deal_discount=10,
        ),
        Product(
            name="Nike Air Max 270",
            description="Sneakers with the Air Max sole for all-day comfort.",
            category=Category.SPORTS,
            prices=[
                RetailerPrice("Nike Store", 349.00, shipping_cost=0, delivery_days=2),
                RetailerPrice("SportMaster", 369.00, shipping_cost=15, delivery_days=3),
                RetailerPrice("Adidas.by", 359.00, shipping_cost=10, delivery_days=2),
            ],
            average_rating=4.6,
            review_count=187,
            specifications={"Sizes": "36-46", "Material": "Textile + synthetic", "Colors": "5 options"},
        ),
        Product(
            name="Dyson V15 Detect",
            description="Cordless vacuum cleaner with a laser dust detector and smart filtration.",
            category=Category.HOME,
            prices=[
                RetailerPrice("Dyson Store", 1899.00, shipping_cost=0, delivery_days=2),
                RetailerPrice("5 Element", 1950.00, shipping_cost=20, delivery_days=3),
                RetailerPrice("TechnoMart", 1999.00, shipping_cost=15, delivery_days=2),
            ],
            average_rating=4.8,
            review_count=156,
            specifications={"Run time": "60 min", "Power": "230W", "Weight": "3.1 kg"},
            is_deal=True,
            deal_expiry_date=in_days(5),
            deal_discount=20,
        ),
        Product(
            name="Sony PlayStation 5",
            description="Next generation console with SSD storage, 4K output and exclusive games.",
            category=Category.ELECTRONICS,
            prices=[
                RetailerPrice("GameStop", 1599.00, shipping_cost=0, delivery_days=1),
                RetailerPrice(
                    "TechnoMart", 1650.00,
                    availability=Availability.LOW_STOCK, shipping_cost=15, delivery_days=2,
                ),
                RetailerPrice("5 Element", 1699.00, shipping_cost=20, delivery_days=3),
            ],
            average_rating=4.9,
            review_count=678,
            specifications={"Storage": "825GB SSD", "Resolution": "4K", "Controller": "DualSense"},
        ),
        Product(
            name="Levi's 501 Original Jeans",
            description="Classic straight jeans in premium denim.",
            category=Category.CLOTHING,
            prices=[
                RetailerPrice("Levi's Store", 249.00, shipping_cost=10, delivery_days=3),
                RetailerPrice("Zara", 269.00, shipping_cost=15, delivery_days=4),
                RetailerPrice("H&M", 239.00, shipping_cost=10, delivery_days=3),
            ],
            average_rating=4.7,
            review_count=234,
            specifications={"Sizes": "28-38", "Colors": "Blue, Black", "Fit": "Straight"},
        ),
        Product(
            name="IKEA MALM Chest of Drawers",
            description="Chest with 6 drawers for a bedroom or living room.",
            category=Category.HOME,
            prices=[
                RetailerPrice("IKEA", 349.00, shipping_cost=30, delivery_days=5),
                RetailerPrice("Furniture Center", 389.00, shipping_cost=0, delivery_days=3),
            ],
            average_rating=4.5,
            review_count=421,
            specifications={"Size": "80x123 cm", "Material": "Particleboard", "Colors": "White, Black-brown"},
        ),
        Product(
            name="L'Oreal Revitalift Day Cream",
            description="Anti-age day cream with retinol and hyaluronic acid.",
            category=Category.BEAUTY,
            prices=[
                RetailerPrice("Podruzhka", 45.00, shipping_cost=5, delivery_days=2),
                RetailerPrice("Rive Gauche", 49.00, shipping_cost=0, delivery_days=2),
                RetailerPrice("Medovea", 47.00, shipping_cost=5, delivery_days=3),
            ],
            average_rating=4.4,
            review_count=892,
            specifications={"Volume": "50ml", "SPF": "15", "Skin type": "All"},
            is_deal=True,
            deal_expiry_date=in_days(10),
            deal_discount=25,
        ),
        Product(
            name="Apple MacBook Air M2",
            description="Thin and light laptop with the M2 chip, 13.6\" Liquid Retina display "
                        "and up to 18 hours of battery.",
            category=Category.ELECTRONICS,
            prices=[
                RetailerPrice("iStore", 3499.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("TechnoMart", 3599.00, shipping_cost=20, delivery_days=2),
                RetailerPrice("5 Element", 3650.00, shipping_cost=15, delivery_days=3),
            ],
            average_rating=4.9,
            review_count=445,
            specifications={"Chip": "Apple M2", "Memory": "8GB RAM + 256GB SSD", "Display": "13.6\" Retina"},
        ),
        Product(
            name="The Pragmatic Programmer",
            description="20th anniversary edition of the classic software craftsmanship book.",
            category=Category.BOOKS,
            prices=[
                RetailerPrice("Oz.by", 89.00, shipping_cost=5, delivery_days=3),
                RetailerPrice("Belkniga", 95.00, shipping_cost=0, delivery_days=4),
            ],
            average_rating=4.8,
            review_count=97,
            specifications={"Pages": "352", "Cover": "Hardcover", "Language": "English"},
        ),
        Product(
            name="LEGO Technic Porsche 911",
            description="Detailed Technic model with working gearbox and steering.",
            category=Category.TOYS,
            prices=[
                RetailerPrice("Detsky Mir", 459.00, shipping_cost=0, delivery_days=2),
                RetailerPrice("Oz.by", 439.00, shipping_cost=10, delivery_days=3),
                RetailerPrice(
                    "Toy Planet", 449.00,
                    availability=Availability.PRE_ORDER, shipping_cost=0, delivery_days=14,
                ),
            ],
            average_rating=4.9,
            review_count=64,
            specifications={"Pieces": "1458", "Age": "18+", "Series": "Technic"},
            is_deal=True,
            deal_expiry_date=in_days(2),
            deal_discount=12,
        ),
        Product(
            name="Lavazza Qualita Oro Coffee Beans 1kg",
            description="Medium roast Arabica coffee beans.",
            category=Category.FOOD,
            prices=[
                RetailerPrice("Green", 54.00, shipping_cost=0, delivery_days=1),
                RetailerPrice("Evroopt", 51.50, shipping_cost=4, delivery_days=2),
                RetailerPrice(
                    "Gippo", 56.00,
                    availability=Availability.OUT_OF_STOCK, shipping_cost=0, delivery_days=2,
                ),
            ],
            average_rating=4.6,
            review_count=310,
            specifications={"Weight": "1 kg", "Roast": "Medium", "Type": "Beans"},
        ),
        Product(
            name="Xiaomi Travel Umbrella",
            description="Automatic folding umbrella with wind-resistant frame.",
            category=Category.OTHER,
            prices=[
                RetailerPrice("Mi Store", 69.00, shipping_cost=0, delivery_days=2),
                RetailerPrice("Wildberries", 62.00, shipping_cost=7, delivery_days=5),
            ],
            average_rating=4.3,
            review_count=128,
            specifications={"Diameter": "98 cm", "Weight": "320 g", "Opening": "Automatic"},
        ),
    ]
