"""
HTTP API for the storefront shell.

Every request names its client with the X-Shell-Id header; the first request of
a client mounts a ViewShell (optionally restoring a stored session from the
Authorization: Bearer header) and every response returns the shell snapshot.

Service exceptions are not caught here, the app-level handler turns them into
a status code plus an error state.
"""

import logging

from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel, Field

from enums.view import AuthMode, DashboardTab, Modal
from services.shell import ViewShell
from web.shell_registry import ShellRegistry, get_registry

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api", tags=["api"])


class SignUpPayload(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)
    full_name: str = Field("", max_length=200)


class SignInPayload(BaseModel):
    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=256)


class AddCartItemPayload(BaseModel):
    product_id: str


class UpdateCartItemPayload(BaseModel):
    quantity: int


class ProfilePayload(BaseModel):
    full_name: str | None = Field(None, max_length=200)
    avatar_url: str | None = Field(None, max_length=2048)


class ModalPayload(BaseModel):
    modal: Modal
    auth_mode: AuthMode | None = None


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


async def get_shell(x_shell_id: str = Header(..., min_length=8, max_length=64),
                    authorization: str | None = Header(None),
                    registry: ShellRegistry = Depends(get_registry)) -> ViewShell:
    return await registry.get_or_mount(x_shell_id, bearer_token(authorization))


def with_token(shell: ViewShell) -> dict:
    # Clients store the token and send it back as Bearer on their next mount
    snapshot = shell.snapshot()
    snapshot["access_token"] = shell.auth.access_token
    return snapshot


@api_router.get("/shell")
async def get_snapshot(shell: ViewShell = Depends(get_shell)):
    return shell.snapshot()


@api_router.delete("/shell", status_code=status.HTTP_204_NO_CONTENT)
async def close_shell(x_shell_id: str = Header(..., min_length=8, max_length=64),
                      authorization: str | None = Header(None),
                      registry: ShellRegistry = Depends(get_registry)):
    await registry.drop(x_shell_id, bearer_token(authorization))


@api_router.post("/catalog/retry")
async def retry_catalog(shell: ViewShell = Depends(get_shell)):
    await shell.retry_catalog()
    return shell.snapshot()


# Auth

@api_router.post("/auth/signup")
async def sign_up(payload: SignUpPayload, shell: ViewShell = Depends(get_shell)):
    await shell.sign_up(payload.email, payload.password, payload.full_name)
    return with_token(shell)


@api_router.post("/auth/signin")
async def sign_in(payload: SignInPayload, shell: ViewShell = Depends(get_shell)):
    await shell.sign_in(payload.email, payload.password)
    return with_token(shell)


@api_router.post("/auth/signout")
async def sign_out(shell: ViewShell = Depends(get_shell)):
    await shell.sign_out()
    return shell.snapshot()


# Cart

@api_router.get("/cart/items")
async def get_cart(shell: ViewShell = Depends(get_shell)):
    await shell.retry_cart()
    return shell.snapshot()["cart"]


@api_router.post("/cart/items")
async def add_cart_item(payload: AddCartItemPayload, shell: ViewShell = Depends(get_shell)):
    added = await shell.add_to_cart(payload.product_id)
    snapshot = shell.snapshot()
    snapshot["added"] = added
    return snapshot


@api_router.patch("/cart/items/{cart_item_id}")
async def update_cart_item(cart_item_id: str, payload: UpdateCartItemPayload,
                           shell: ViewShell = Depends(get_shell)):
    await shell.update_cart_quantity(cart_item_id, payload.quantity)
    return shell.snapshot()


@api_router.delete("/cart/items/{cart_item_id}")
async def remove_cart_item(cart_item_id: str, shell: ViewShell = Depends(get_shell)):
    await shell.remove_from_cart(cart_item_id)
    return shell.snapshot()


@api_router.post("/checkout")
async def checkout(shell: ViewShell = Depends(get_shell)):
    summary = shell.checkout()
    return summary.model_dump(mode="json")


# Page chrome

@api_router.post("/modal")
async def set_modal(payload: ModalPayload, shell: ViewShell = Depends(get_shell)):
    match payload.modal:
        case Modal.CART:
            shell.open_cart()
        case Modal.AUTH:
            shell.open_auth(payload.auth_mode or AuthMode.LOGIN)
        case Modal.NONE:
            shell.close_modal()
    return shell.snapshot()


@api_router.post("/menu/toggle")
async def toggle_menu(shell: ViewShell = Depends(get_shell)):
    shell.toggle_mobile_menu()
    return shell.snapshot()


@api_router.post("/faq/{index}")
async def toggle_faq(index: int, shell: ViewShell = Depends(get_shell)):
    try:
        shell.toggle_faq(index)
    except IndexError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No FAQ entry {index}")
    return shell.snapshot()


@api_router.post("/view/home")
async def go_home(shell: ViewShell = Depends(get_shell)):
    await shell.go_home()
    return shell.snapshot()


@api_router.post("/view/dashboard")
async def go_to_dashboard(shell: ViewShell = Depends(get_shell)):
    await shell.go_to_dashboard()
    return shell.snapshot()


# Dashboard

@api_router.post("/dashboard/tab/{tab}")
async def select_tab(tab: DashboardTab, shell: ViewShell = Depends(get_shell)):
    shell.select_tab(tab)
    return shell.snapshot()


@api_router.post("/dashboard/affiliate")
async def join_affiliate_program(shell: ViewShell = Depends(get_shell)):
    await shell.dashboard.create_affiliate()
    return shell.snapshot()


# Language tutor landing

@api_router.get("/tutors")
async def get_tutor_landing(shell: ViewShell = Depends(get_shell)):
    return shell.tutor_landing.snapshot()


@api_router.post("/tutors/articles/{article_id}")
async def toggle_tutor_article(article_id: int, shell: ViewShell = Depends(get_shell)):
    try:
        shell.tutor_landing.toggle_article(article_id)
    except KeyError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No article {article_id}")
    return shell.tutor_landing.snapshot()


# Settings

@api_router.patch("/profile")
async def update_profile(payload: ProfilePayload, shell: ViewShell = Depends(get_shell)):
    await shell.auth.update_profile(full_name=payload.full_name, avatar_url=payload.avatar_url)
    return shell.snapshot()
