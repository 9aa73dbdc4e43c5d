import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.config import settings
from app.middleware.exceptions import register_exception_handlers
from app.middleware.security import AdminGateMiddleware, SecurityHeadersMiddleware
from app.routers import (
    auth,
    cart,
    categories,
    dashboard,
    enquiries,
    health,
    intake,
    inventory,
    products,
    replies,
    storefront,
    templates,
    uploads,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Sign Shop",
    description="Signage storefront enquiries, quotations & back office",
    version="0.1.0",
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
# Security headers (first - applies to all responses)
app.add_middleware(SecurityHeadersMiddleware)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Admin page gate (innermost - redirects before any /admin page renders)
app.add_middleware(AdminGateMiddleware)

# ── Routers ──────────────────────────────────────────────────
# Public
app.include_router(health.router)
app.include_router(auth.router, tags=["auth"])
app.include_router(storefront.router, tags=["storefront"])
app.include_router(cart.router, prefix="/api/cart", tags=["cart"])
app.include_router(intake.router, tags=["intake"])
app.include_router(uploads.router, tags=["uploads"])

# Admin (require the admin_session cookie)
app.include_router(replies.router, tags=["replies"])
app.include_router(enquiries.router, prefix="/api/admin/enquiries", tags=["enquiries"])
app.include_router(inventory.router, prefix="/api/admin/inventory", tags=["inventory"])
app.include_router(products.router, prefix="/api/admin/products", tags=["products"])
app.include_router(categories.router, prefix="/api/admin/categories", tags=["categories"])
app.include_router(templates.router, prefix="/api/admin/templates", tags=["templates"])
app.include_router(dashboard.router, tags=["dashboard"])

# Uploaded images
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.upload_dir, check_dir=False),
    name="uploads",
)
