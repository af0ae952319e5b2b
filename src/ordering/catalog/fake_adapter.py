"""In-memory catalog: products registered by tests, seed scripts and load tests."""

from protean.exceptions import ObjectNotFoundError

from ordering.catalog.port import CatalogPort, CatalogProduct


class InMemoryCatalog(CatalogPort):
    def __init__(self):
        self.products: dict[str, CatalogProduct] = {}

    def add_product(
        self,
        product_id: str,
        title: str,
        base_price: float,
        offer_price: float | None = None,
        image: str | None = None,
        colors: tuple[str, ...] = (),
    ) -> CatalogProduct:
        product = CatalogProduct(
            product_id=str(product_id),
            title=title,
            base_price=base_price,
            offer_price=base_price if offer_price is None else offer_price,
            image=image,
            colors=tuple(colors),
        )
        self.products[product.product_id] = product
        return product

    def get_product(self, product_id: str) -> CatalogProduct:
        product = self.products.get(str(product_id))
        if product is None:
            raise ObjectNotFoundError({"product_id": [f"Product {product_id} does not exist"]})
        return product

    def reset(self):
        self.products.clear()
