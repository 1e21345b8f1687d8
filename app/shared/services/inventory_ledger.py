# app/shared/services/inventory_ledger.py
from contextlib import contextmanager
from typing import Iterator, Optional
import logging

from sqlalchemy import select, update
from sqlalchemy.exc import DisconnectionError, OperationalError, TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from app.core.exceptions import InsufficientStock, InvalidArgument, ItemNotFound, StorageUnavailable
from app.shared.database.models import InventoryChange, InventoryItem

logger = logging.getLogger(__name__)

TRANSIENT_DB_ERRORS = (OperationalError, DisconnectionError, PoolTimeoutError)


class InventoryLedger:
    """
    Fuente de verdad de las cantidades de inventario.

    Cada operación es un read-modify-write atómico sobre una sola fila:
    un UPDATE condicional que se confirma por sí mismo. No se abren
    transacciones que abarquen varios items; quien necesite deshacer una
    reserva debe invocar `release` explícitamente.
    """

    def __init__(self, db: Session):
        self.db = db

    def reserve(
        self,
        item_id: int,
        amount: int,
        *,
        reference_id: Optional[int] = None,
        user_id: Optional[int] = None
    ) -> int:
        """
        Descontar `amount` unidades del item.

        Returns:
            int: Cantidad resultante

        Raises:
            InvalidArgument: Si amount <= 0
            ItemNotFound: Si el item no existe
            InsufficientStock: Si amount supera la cantidad disponible
            StorageUnavailable: Si la base de datos no responde
        """
        self._validate_amount(amount)

        with self._storage_errors():
            result = self.db.execute(
                update(InventoryItem)
                .where(InventoryItem.id == item_id, InventoryItem.quantity >= amount)
                .values(quantity=InventoryItem.quantity - amount)
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:
                available = self._current_quantity(item_id)
                self.db.rollback()
                if available is None:
                    raise ItemNotFound(item_id)
                raise InsufficientStock(item_id, requested=amount, available=available)

            new_quantity = self._current_quantity(item_id)
            self._record_change(
                item_id, "sale_reserve", new_quantity + amount, new_quantity,
                reference_id, user_id
            )
            self.db.commit()

        logger.info(f"Reserva item {item_id}: -{amount} (queda {new_quantity})")
        return new_quantity

    def release(
        self,
        item_id: int,
        amount: int,
        *,
        reference_id: Optional[int] = None,
        user_id: Optional[int] = None
    ) -> Optional[int]:
        """
        Devolver `amount` unidades al item.

        Un item borrado no se recrea: se registra un warning y se retorna None.
        """
        self._validate_amount(amount)

        with self._storage_errors():
            result = self.db.execute(
                update(InventoryItem)
                .where(InventoryItem.id == item_id)
                .values(quantity=InventoryItem.quantity + amount)
                .execution_options(synchronize_session=False)
            )

            if result.rowcount == 0:
                self.db.rollback()
                logger.warning(
                    f"Liberación omitida: item {item_id} ya no existe ({amount} unidades)"
                )
                return None

            new_quantity = self._current_quantity(item_id)
            self._record_change(
                item_id, "sale_release", new_quantity - amount, new_quantity,
                reference_id, user_id
            )
            self.db.commit()

        logger.info(f"Liberación item {item_id}: +{amount} (queda {new_quantity})")
        return new_quantity

    def adjust(self, item_id: int, new_quantity: int, user_id: Optional[int] = None) -> int:
        """Ajuste administrativo: fijar la cantidad de un item"""
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int) or new_quantity < 0:
            raise InvalidArgument("La cantidad no puede ser negativa")

        with self._storage_errors():
            item = self.db.query(InventoryItem).filter(
                InventoryItem.id == item_id
            ).with_for_update().first()

            if not item:
                self.db.rollback()
                raise ItemNotFound(item_id)

            quantity_before = item.quantity
            item.quantity = new_quantity
            self._record_change(
                item_id, "adjustment", quantity_before, new_quantity, None, user_id
            )
            self.db.commit()

        logger.info(f"Ajuste item {item_id}: {quantity_before} -> {new_quantity}")
        return new_quantity

    def available(self, item_id: int) -> Optional[int]:
        """Cantidad actual sin bloquear (None si el item no existe)"""
        with self._storage_errors():
            return self._current_quantity(item_id)

    # MÉTODOS PRIVADOS HELPERS

    @staticmethod
    def _validate_amount(amount: int) -> None:
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidArgument(f"Cantidad inválida: {amount!r}")
        if amount <= 0:
            raise InvalidArgument(f"La cantidad debe ser mayor que cero: {amount}")

    def _current_quantity(self, item_id: int) -> Optional[int]:
        return self.db.execute(
            select(InventoryItem.quantity).where(InventoryItem.id == item_id)
        ).scalar_one_or_none()

    def _record_change(
        self,
        item_id: int,
        change_type: str,
        quantity_before: int,
        quantity_after: int,
        reference_id: Optional[int],
        user_id: Optional[int]
    ) -> None:
        self.db.add(InventoryChange(
            item_id=item_id,
            change_type=change_type,
            quantity_before=quantity_before,
            quantity_after=quantity_after,
            reference_id=reference_id,
            user_id=user_id,
            notes=f"Venta #{reference_id}" if reference_id else None
        ))

    @contextmanager
    def _storage_errors(self) -> Iterator[None]:
        try:
            yield
        except TRANSIENT_DB_ERRORS as e:
            logger.error(f"Base de datos no disponible: {e}")
            self.db.rollback()
            raise StorageUnavailable("Base de datos no disponible, intente de nuevo") from e
