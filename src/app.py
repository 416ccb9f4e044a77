"""Storefront FastAPI application.

Serves the Orders API: checkout, the gateway's payment callback, order
lookups and manual status changes. The domain is initialized and the
collaborators wired once at module level, so uvicorn workers share them.

Usage:
    python src/manage.py setup-db
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

from storefront.api.application import create_app
from storefront.config import Settings
from storefront.container import Container
from storefront.domain import init_domain

settings = Settings.from_env()
init_domain(settings)

app = create_app(Container.build(settings))
