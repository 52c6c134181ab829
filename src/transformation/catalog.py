"""
Product Field Catalog

Field metadata and projections for the single-page product proxy endpoint.
Each field pairs a public name and type with a selector over the raw record.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional


def _nested(key: str, attribute: str) -> Callable[[Mapping[str, Any]], Any]:
    def select(product: Mapping[str, Any]) -> Any:
        value = product.get(key)
        if isinstance(value, Mapping):
            return value.get(attribute)
        return None
    return select


def _plain(key: str) -> Callable[[Mapping[str, Any]], Any]:
    return lambda product: product.get(key)


@dataclass(frozen=True)
class ProductField:
    """Public field with its value selector"""
    name: str
    type: str
    selector: Callable[[Mapping[str, Any]], Any]

    def public(self) -> Dict[str, str]:
        return {"name": self.name, "type": self.type}


PRODUCT_FIELDS = (
    ProductField("id", "integer", _plain("id")),
    ProductField("name", "string", _plain("name")),
    ProductField("sku", "string", _plain("sku")),
    ProductField("price_amount", "float", _nested("price", "amount")),
    ProductField("price_currency", "string", _nested("price", "currency")),
    ProductField("tax_amount", "float", _nested("tax", "amount")),
    ProductField("tax_currency", "string", _nested("tax", "currency")),
    ProductField("quantity", "integer", _plain("quantity")),
    ProductField("sold_quantity", "integer", _plain("sold_quantity")),
    ProductField("status", "string", _plain("status")),
    ProductField("is_available", "boolean", _plain("is_available")),
    ProductField("views", "integer", _plain("views")),
    ProductField("sale_price_amount", "float", _nested("sale_price", "amount")),
    ProductField("sale_price_currency", "string", _nested("sale_price", "currency")),
    ProductField("regular_price_amount", "float", _nested("regular_price", "amount")),
    ProductField("regular_price_currency", "string", _nested("regular_price", "currency")),
    ProductField("weight", "float", _plain("weight")),
    ProductField("weight_type", "string", _plain("weight_type")),
    ProductField("with_tax", "boolean", _plain("with_tax")),
    ProductField("updated_at", "string", _plain("updated_at")),
)

PUBLIC_FIELD_DEFINITIONS = [field.public() for field in PRODUCT_FIELDS]


def map_product_to_variables(product: Mapping[str, Any]) -> Dict[str, Any]:
    """Project a product onto a name -> value mapping"""
    return {field.name: field.selector(product) for field in PRODUCT_FIELDS}


def build_rows(products: List[Mapping[str, Any]]) -> List[List[Any]]:
    """Project products onto value arrays in field order"""
    return [[field.selector(product) for field in PRODUCT_FIELDS] for product in products]


def build_cursor(pagination: Optional[Mapping[str, Any]]) -> Optional[Dict[str, Any]]:
    """
    Derive a page cursor from the upstream pagination block.

    Returns:
        {current, previous, next, count} or None when no pagination is given
    """
    if not isinstance(pagination, Mapping):
        return None

    current = pagination.get("currentPage")
    total_pages = pagination.get("totalPages")
    has_pages = isinstance(current, int) and not isinstance(current, bool)

    previous_page = current - 1 if has_pages and current > 1 else None
    next_page = None
    if has_pages and isinstance(total_pages, int) and current < total_pages:
        next_page = current + 1

    return {
        "current": current,
        "previous": previous_page,
        "next": next_page,
        "count": pagination.get("total"),
    }


def build_product_page(payload: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Build the proxy response body for one upstream page.

    Args:
        payload: Decoded upstream response

    Returns:
        Dict with ``data`` (fields/rows/rowCount/cursor), ``products`` and
        the raw ``pagination`` block
    """
    data = payload.get("data")
    products = [p for p in data if isinstance(p, Mapping)] if isinstance(data, list) else []
    pagination = payload.get("pagination")

    return {
        "data": {
            "fields": PUBLIC_FIELD_DEFINITIONS,
            "rows": build_rows(products),
            "rowCount": len(products),
            "cursor": build_cursor(pagination),
        },
        "products": [map_product_to_variables(p) for p in products],
        "pagination": pagination,
    }
