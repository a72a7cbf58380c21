import logging
from decimal import Decimal

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from db import SessionFactory, get_db_session, session_commit
from exceptions import (
    MonetizeProException,
    AuthenticationRequiredException,
    CartItemNotFoundException,
    InvalidQuantityException,
    ProductNotFoundException,
    FetchException,
    WriteConflictException,
)
from models.cartItem import CartItemDTO
from models.session import Session, AuthenticatedSession
from repositories.cartItem import CartItemRepository
from repositories.product import ProductRepository
from services.auth import AuthSessionBridge
from utils.error_handler import ErrorState, handle_service_error

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def line_total(item: CartItemDTO) -> Decimal:
    if item.product is None or item.product.price is None:
        return Decimal("0")
    return item.product.price * item.quantity


class CartStore:
    """
    Client mirror of the signed-in user's cart.

    The backend table is the single source of truth: every mutation is written
    there first and the mirror is re-read afterwards, so two clients of the same
    user never disagree for longer than one refresh.
    """

    def __init__(self, auth: AuthSessionBridge, session_factory: SessionFactory = get_db_session):
        self.auth = auth
        self.session_factory = session_factory
        self.items: tuple[CartItemDTO, ...] = ()
        self.error: ErrorState | None = None

    def total(self) -> Decimal:
        """Sum of price * quantity over all lines, rounded to cents."""
        return sum((line_total(item) for item in self.items), Decimal("0")).quantize(CENTS)

    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    def is_empty(self) -> bool:
        return len(self.items) == 0

    def clear(self) -> None:
        self.items = ()
        self.error = None

    async def on_session_change(self, session: Session) -> None:
        if not isinstance(session, AuthenticatedSession):
            self.clear()
            return
        try:
            await self.refresh()
        except FetchException as e:
            # Kept in self.error, the cart shows it with a retry action
            logger.warning(f"[Cart] Refresh after session change failed: {e}")

    async def refresh(self) -> None:
        user_id = self.auth.user_id
        if user_id is None:
            self.clear()
            return
        try:
            async with self.session_factory() as session:
                items = await CartItemRepository.get_by_user_id(user_id, session)
        except SQLAlchemyError as e:
            raise self._fail(FetchException("cart", str(e)))
        self.items = tuple(items)
        self.error = None

    async def add(self, product_id: str) -> None:
        """
        Add one unit of a product.

        A product already in the cart gets its quantity incremented instead of a
        second line.

        Raises:
            AuthenticationRequiredException: Anonymous session
            ProductNotFoundException: Unknown or inactive product
            WriteConflictException: Backend rejected the write
        """
        user_id = await self._require_user("add items to your cart")
        try:
            try:
                await self._add_unit(user_id, product_id)
            except IntegrityError:
                # Another client of this user created the line first, the retry increments it
                logger.info(f"[Cart] Concurrent add of product {product_id} for user {user_id}, retrying")
                await self._add_unit(user_id, product_id)
        except SQLAlchemyError as e:
            raise self._fail(WriteConflictException("cart", str(e)))
        except ProductNotFoundException as e:
            raise self._fail(e)

        logger.info(f"[Cart] User {user_id} added product {product_id}")
        await self.refresh()

    async def update_quantity(self, cart_item_id: str, quantity: int) -> None:
        """
        Set the quantity of a line. Zero or less removes the line.

        Raises:
            InvalidQuantityException: Quantity is not an integer
            CartItemNotFoundException: Line is not in the user's cart
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise InvalidQuantityException(quantity)
        if quantity <= 0:
            await self.remove(cart_item_id)
            return

        user_id = await self._require_user("change your cart")
        try:
            async with self.session_factory() as session:
                updated = await CartItemRepository.update_quantity(cart_item_id, user_id, quantity, session)
                if not updated:
                    raise CartItemNotFoundException(cart_item_id)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise self._fail(WriteConflictException("cart", str(e)))
        except CartItemNotFoundException as e:
            # Line was removed elsewhere, bring the mirror up to date before reporting
            await self.refresh()
            raise self._fail(e)

        await self.refresh()

    async def remove(self, cart_item_id: str) -> None:
        """Removing a line that is already gone is not an error."""
        user_id = await self._require_user("change your cart")
        try:
            async with self.session_factory() as session:
                removed = await CartItemRepository.delete(cart_item_id, user_id, session)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise self._fail(WriteConflictException("cart", str(e)))

        if removed:
            logger.info(f"[Cart] User {user_id} removed cart item {cart_item_id}")
        await self.refresh()

    async def _add_unit(self, user_id: str, product_id: str) -> None:
        async with self.session_factory() as session:
            if await ProductRepository.get_active_by_id(product_id, session) is None:
                raise ProductNotFoundException(product_id)
            existing = await CartItemRepository.get_by_user_and_product(user_id, product_id, session)
            if existing is None:
                await CartItemRepository.create(
                    CartItemDTO(user_id=user_id, product_id=product_id, quantity=1), session
                )
            else:
                await CartItemRepository.increment_quantity(existing.id, session)
            await session_commit(session)

    async def _require_user(self, action: str) -> str:
        await self.auth.ensure_active()
        user_id = self.auth.user_id
        if user_id is None:
            raise AuthenticationRequiredException(action)
        return user_id

    def _fail(self, exception: MonetizeProException) -> MonetizeProException:
        self.error = handle_service_error(exception)
        return exception
