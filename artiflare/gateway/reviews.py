"""
Reviews — customer ratings, one optional artisan response each, and the
product rating aggregate recomputed from them.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from kungfu import Error, Ok, Result

from artiflare.errors import FieldIssue, NotFound, TransactionAborted, ValidationError
from artiflare.gateway._base import Collection, ListPage
from artiflare.gateway.products import ProductGateway
from artiflare.schemas import Product, Review
from artiflare.store import DocumentStore, OrderBy, utcnow

logger = logging.getLogger(__name__)


class ReviewGateway(Collection[Review]):
    name = "reviews"
    schema = Review

    def __init__(self, store: DocumentStore, products: ProductGateway | None = None) -> None:
        super().__init__(store)
        self.products = products or ProductGateway(store)

    async def for_product(self, product_id: str) -> ListPage[Review]:
        """All reviews of a product, newest first."""
        return await self.list(
            [("productId", "==", product_id)],
            order_by=OrderBy("createdAt", descending=True),
            page_size=None,
        )

    async def submit(
        self, data: Mapping[str, Any] | Review
    ) -> Result[Review, ValidationError | NotFound | TransactionAborted]:
        """Create a review of an existing product and refresh its rating aggregate."""
        match self.prepare(data):
            case Error(err):
                return Error(err)
            case Ok(candidate):
                pass
        if not (await self.products.get(candidate.product_id)).found:
            return Error(NotFound(self.products.name, candidate.product_id))

        match await self.create(candidate):
            case Error(err):
                return Error(err)
            case Ok(review):
                pass
        match await self.recompute_rating(review.product_id):
            case Error(err):
                return Error(err)
            case Ok(_):
                return Ok(review)

    async def respond(
        self, review_id: str, response: str
    ) -> Result[Review, ValidationError | NotFound | TransactionAborted]:
        """Attach the artisan's response; a review carries at most one."""
        got = await self.get(review_id)
        if got.entity is None:
            return Error(NotFound(self.name, review_id))
        if got.entity.artisan_response is not None:
            return Error(
                ValidationError(
                    (FieldIssue("artisanResponse", "review already has a response"),)
                )
            )
        if not response.strip():
            return Error(
                ValidationError((FieldIssue("artisanResponse.response", "must not be empty"),))
            )
        return await self.update(
            review_id,
            {"artisanResponse": {"response": response.strip(), "createdAt": utcnow()}},
        )

    async def recompute_rating(
        self, product_id: str
    ) -> Result[Product, ValidationError | NotFound | TransactionAborted]:
        """
        Recompute ``averageRating`` (one decimal) and ``totalReviews`` from scratch.

        A product with no reviews gets ``0`` / ``0``.
        """
        reviews = (await self.for_product(product_id)).items
        if reviews:
            average = round(sum(r.rating for r in reviews) / len(reviews), 1)
        else:
            average = 0.0
        logger.debug("Product %s rating %.1f over %d reviews", product_id, average, len(reviews))
        return await self.products.update(
            product_id, {"averageRating": average, "totalReviews": len(reviews)}
        )


__all__ = ("ReviewGateway",)
