# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models import ProductModel, ProductSizeModel, ProductColorModel

DEMO_PRODUCTS = [
    {
        "name": "Royal Oxford",
        "description": "Klasyczne skorzane oxfordy",
        "category": "formal",
        "brand": "Royal",
        "price": Decimal("1299.00"),
        "discount_price": Decimal("899.00"),
        "featured": True,
        "sizes": [(8, 5), (9, 3), (10, 0)],
        "colors": [("Black", "#000000"), ("Brown", "#5C4033")],
    },
    {
        "name": "Court Runner",
        "description": "Lekkie buty do biegania",
        "category": "sports",
        "brand": "Stride",
        "price": Decimal("2499.00"),
        "discount_price": None,
        "featured": False,
        "sizes": [(7, 12), (8, 20), (9, 15)],
        "colors": [("White", "#FFFFFF")],
    },
]


def seed():
    db = SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.query(ProductModel).first():
            return
        for data in DEMO_PRODUCTS:
            db.add(
                ProductModel(
                    name=data["name"],
                    description=data["description"],
                    category=data["category"],
                    brand=data["brand"],
                    price=data["price"],
                    discount_price=data["discount_price"],
                    featured=data["featured"],
                    sizes=[ProductSizeModel(size=s, quantity=q) for s, q in data["sizes"]],
                    colors=[
                        ProductColorModel(
                            name=name,
                            code=code,
                            images=[f"/images/products/{data['brand'].lower()}-{name.lower()}.jpg"],
                        )
                        for name, code in data["colors"]
                    ],
                )
            )
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
