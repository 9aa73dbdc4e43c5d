"""Server-mirrored storefront cart, keyed by the `cart_id` cookie.

Cart storage is blocking file I/O, so the handlers are plain functions
and run in the threadpool.

Route overview:
  GET    /api/cart                    — current cart (a new id is issued if needed)
  PUT    /api/cart                    — replace every line
  DELETE /api/cart                    — empty the cart
  POST   /api/cart/items              — append one line
  PATCH  /api/cart/items/{line_id}    — change one line
  DELETE /api/cart/items/{line_id}    — remove one line
  POST   /api/cart/quotation-draft    — compose the quotation email for this cart
"""

from fastapi import APIRouter, Depends, Request, Response, status

from app.config import settings
from app.middleware.exceptions import ValidationFailed
from app.schemas.cart import (
    CartLineIn,
    CartLinePatch,
    CartOut,
    CartReplace,
    ContactFields,
    QuotationDraft,
)
from app.services.cart import Cart, CartStorage, CartStore, get_cart_storage
from app.services.quotation import draft_quotation

router = APIRouter()

CART_COOKIE_MAX_AGE = 30 * 24 * 3600


def get_cart_store(storage: CartStorage = Depends(get_cart_storage)) -> CartStore:
    return CartStore(storage)


def _load(request: Request, store: CartStore) -> Cart:
    return store.get(request.cookies.get(settings.cart_cookie_name))


def _respond(response: Response, cart: Cart) -> CartOut:
    response.set_cookie(
        key=settings.cart_cookie_name,
        value=cart.cart_id,
        max_age=CART_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
        path="/",
    )
    return CartOut(cart_id=cart.cart_id, items=cart.items)


@router.get("", response_model=CartOut)
def get_cart(request: Request, response: Response, store: CartStore = Depends(get_cart_store)):
    return _respond(response, _load(request, store))


@router.put("", response_model=CartOut)
def replace_cart(
    body: CartReplace,
    request: Request,
    response: Response,
    store: CartStore = Depends(get_cart_store),
):
    cart = _load(request, store)
    cart.replace(body.items)
    store.save(cart)
    return _respond(response, cart)


@router.delete("", response_model=CartOut)
def clear_cart(request: Request, response: Response, store: CartStore = Depends(get_cart_store)):
    cart = _load(request, store)
    cart.clear()
    store.delete(cart.cart_id)
    return _respond(response, cart)


@router.post("/items", response_model=CartOut, status_code=status.HTTP_201_CREATED)
def add_item(
    body: CartLineIn,
    request: Request,
    response: Response,
    store: CartStore = Depends(get_cart_store),
):
    cart = _load(request, store)
    cart.add(body.root)
    store.save(cart)
    return _respond(response, cart)


@router.patch("/items/{line_id}", response_model=CartOut)
def update_item(
    line_id: str,
    body: CartLinePatch,
    request: Request,
    response: Response,
    store: CartStore = Depends(get_cart_store),
):
    cart = _load(request, store)
    cart.update(line_id, body)
    store.save(cart)
    return _respond(response, cart)


@router.delete("/items/{line_id}", response_model=CartOut)
def remove_item(
    line_id: str,
    request: Request,
    response: Response,
    store: CartStore = Depends(get_cart_store),
):
    cart = _load(request, store)
    cart.remove(line_id)
    store.save(cart)
    return _respond(response, cart)


@router.post("/quotation-draft", response_model=QuotationDraft)
def quotation_draft(
    body: ContactFields,
    request: Request,
    store: CartStore = Depends(get_cart_store),
):
    cart = _load(request, store)
    if not cart.items:
        raise ValidationFailed("Cart is empty")
    return draft_quotation(body, cart.items, to=settings.company_mailbox)
