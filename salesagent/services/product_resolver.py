from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from salesagent.models.post_link import PostLink
from salesagent.models.product import Product

logger = logging.getLogger(__name__)

CATALOG_LIMIT = 200
MIN_TOKEN_LENGTH = 3


def _catalog_query(db: Session, user_id: str):
    return db.query(Product).filter(Product.user_id == user_id, Product.is_active.is_(True))


def load_catalog(db: Session, user_id: str) -> list[Product]:
    return _catalog_query(db, user_id).order_by(Product.id.asc()).limit(CATALOG_LIMIT).all()


def name_matches(product_name: str, text: str) -> bool:
    """Full name contained in the text, or any name token longer than 3 chars."""
    name = (product_name or "").casefold().strip()
    haystack = (text or "").casefold()
    if not name or not haystack:
        return False
    if name in haystack:
        return True
    return any(len(token) > MIN_TOKEN_LENGTH and token in haystack for token in name.split())


def match_by_name(catalog: list[Product], text: str) -> Product | None:
    for product in catalog:
        if name_matches(product.name, text):
            return product
    return None


class ProductResolver:
    """Read-only lookup of the catalog item an exchange is about.

    Every result comes from the owner's active catalog; nothing is ever
    synthesized from the message text.
    """

    def __init__(self, db: Session, user_id: str) -> None:
        self.db = db
        self.user_id = user_id
        self._catalog: list[Product] | None = None

    @property
    def catalog(self) -> list[Product]:
        if self._catalog is None:
            self._catalog = load_catalog(self.db, self.user_id)
        return self._catalog

    def resolve(
        self,
        text: str,
        *,
        page_id: str,
        is_comment: bool = False,
        post_id: str | None = None,
    ) -> Product | None:
        if is_comment and post_id:
            product = self.from_post(page_id, post_id)
            if product is not None:
                return product
        return match_by_name(self.catalog, text)

    def from_post(self, page_id: str, post_id: str) -> Product | None:
        link = self.find_post(page_id, post_id)
        if link is None:
            return None
        if link.product_id is not None:
            product = self.by_id(link.product_id)
            if product is not None:
                return product
            logger.warning(
                "post link points to unavailable product page_id=%s post_id=%s product_id=%s",
                page_id,
                post_id,
                link.product_id,
            )
        if link.detected_product_name:
            return match_by_name(self.catalog, link.detected_product_name)
        return None

    def find_post(self, page_id: str, post_id: str | None) -> PostLink | None:
        if not post_id:
            return None
        return (
            self.db.query(PostLink)
            .filter(PostLink.page_id == page_id, PostLink.post_id == post_id)
            .first()
        )

    def by_id(self, product_id: int | None) -> Product | None:
        if product_id is None:
            return None
        return _catalog_query(self.db, self.user_id).filter(Product.id == product_id).first()
