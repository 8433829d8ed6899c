"""
Catalog Routes - Businesses and their products
"""

from flask import Blueprint, current_app

from api_responses import success_response, handle_api_errors, not_found_response

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


def _service():
    return current_app.catalog_service


@catalog_bp.route("/businesses", methods=["GET"])
@handle_api_errors
def list_businesses_api():
    """Visible businesses"""
    businesses = _service().get_businesses()
    return success_response(data=[b.to_dict() for b in businesses])


@catalog_bp.route("/businesses/<business_id>", methods=["GET"])
@handle_api_errors
def get_business_api(business_id):
    business = _service().get_business(business_id)
    if business is None:
        return not_found_response("Business", business_id)
    return success_response(data=business.to_dict())


@catalog_bp.route("/businesses/<business_id>/products", methods=["GET"])
@handle_api_errors
def get_business_products_api(business_id):
    """Products grouped by category, categories in sheet order"""
    products = _service().get_products(business_id)
    if products is None:
        return not_found_response("Business", business_id)
    groups = [
        {"category": category, "products": [p.to_dict() for p in items]}
        for category, items in products.items()
    ]
    return success_response(data=groups)


@catalog_bp.post("/businesses/refresh")
@handle_api_errors
def refresh_businesses_api():
    businesses = _service().refresh()
    return success_response(data=[b.to_dict() for b in businesses], message="Catalog refreshed")
