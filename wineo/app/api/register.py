from flask import Flask

from wineo.modules.catalog.routes import bp as catalog_bp
from wineo.modules.filters.routes import bp as filters_bp
from wineo.modules.listings.routes import bp as listings_bp
from wineo.modules.regions.routes import bp as regions_bp


def register_api_blueprints(app: Flask) -> None:
    app.register_blueprint(catalog_bp, url_prefix="/api")
    app.register_blueprint(filters_bp, url_prefix="/api")
    app.register_blueprint(listings_bp, url_prefix="/api")
    app.register_blueprint(regions_bp, url_prefix="/api")

    # Root API document
    @app.get("/api")
    def api_index():
        return {
            "name": f"{app.config.get('SITE_NAME', 'wineo')} API",
            "version": "0.1.0",
            "endpoints": {
                "catalog": [
                    "/categories",
                    "/categories/tree",
                    "/categories/picker",
                    "/categories/slug/<slug>",
                ],
                "filters": ["/filters/by-category/<category_id>"],
                "regions": ["/regions", "/cities"],
                "listings": [
                    "/listings/<buy|rent>",
                    "/listings/<buy|rent>/<category_slug>",
                    "/listings/<buy|rent>/item/<slug>",
                    "/listings/latest",
                    "/listings/featured",
                ],
            },
        }, 200
