# app/modules/sales/service.py
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from typing import Iterable, List, Optional, Tuple
from decimal import Decimal
import logging

from .repository import SalesRepository
from .schemas import SaleCreateRequest, SaleLineItem, SaleStatus, SaleUpdateRequest, StatsPeriod
from app.core.auth.dependencies import can_manage_sale
from app.core.exceptions import (
    Forbidden, InvalidArgument, NotFound, ReservationPersistenceMismatch, StorageUnavailable
)
from app.shared.database.models import Sale
from app.shared.services.inventory_ledger import InventoryLedger, TRANSIENT_DB_ERRORS

logger = logging.getLogger(__name__)

Reservation = Tuple[int, int]

# Transiciones de estado permitidas; Completed y Cancelled son terminales
# Mayor total que admite Sale.total: Numeric(12, 2)
MAX_SALE_TOTAL = Decimal("9999999999.99")

ALLOWED_TRANSITIONS = {
    SaleStatus.PENDING.value: {SaleStatus.COMPLETED.value, SaleStatus.CANCELLED.value},
    SaleStatus.COMPLETED.value: set(),
    SaleStatus.CANCELLED.value: set(),
}


def compute_sale_total(lines: Iterable[SaleLineItem]) -> Decimal:
    """Total de la venta: suma de cantidad x precio de cada línea"""
    return sum((line.subtotal for line in lines), Decimal("0"))


class SalesService:
    def __init__(self, db: Session, ledger: Optional[InventoryLedger] = None):
        self.db = db
        self.repository = SalesRepository(db)
        self.ledger = ledger or InventoryLedger(db)

    async def create_sale(self, sale_data: SaleCreateRequest, owner_id: int) -> Sale:
        """
        Crear venta reservando inventario línea por línea.

        Proceso:
        1. Calcular total y validar que cabe en la columna
        2. Reservar cada línea en orden (cada reserva se confirma sola)
        3. Si una reserva falla, liberar las anteriores en orden inverso
        4. Persistir venta e items

        Raises:
            InvalidArgument: Venta sin items o total fuera de rango
            ItemNotFound / InsufficientStock: Reserva rechazada (inventario intacto)
            StorageUnavailable: BD no disponible durante las reservas
            ReservationPersistenceMismatch: Reservas aplicadas sin venta registrada
        """
        if not sale_data.items:
            raise InvalidArgument("La venta debe tener al menos un item")

        logger.info(f"Iniciando venta - Usuario: {owner_id}, Líneas: {len(sale_data.items)}")

        try:
            item_names = self.repository.get_item_names(line.item_id for line in sale_data.items)
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise StorageUnavailable("Base de datos no disponible, intente de nuevo") from e

        # PASO 1: total calculado, nunca tomado del cliente
        total = compute_sale_total(sale_data.items)
        if total > MAX_SALE_TOTAL:
            raise InvalidArgument(f"El total de la venta excede el máximo permitido ({MAX_SALE_TOTAL})")

        # PASO 2-3: reservas con compensación
        reservations = self._reserve_lines(sale_data.items, owner_id)

        # PASO 4: persistir
        lines = [
            {
                'item_id': line.item_id,
                'item_name': item_names.get(line.item_id),
                'quantity': line.quantity,
                'price': line.price,
                'subtotal': line.subtotal
            }
            for line in sale_data.items
        ]
        try:
            sale = self.repository.create_sale(
                sale_data={
                    'customer': sale_data.customer,
                    'payment_method': sale_data.payment_method.value,
                    'status': sale_data.status.value,
                    'notes': sale_data.notes
                },
                lines=lines,
                total=total,
                user_id=owner_id
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            detail = ", ".join(f"item {item_id} x{quantity}" for item_id, quantity in reservations)
            logger.critical(
                f"Reservas aplicadas sin venta registrada (usuario {owner_id}): {detail}. Error: {e}"
            )
            raise ReservationPersistenceMismatch(
                "El inventario fue descontado pero la venta no pudo guardarse; requiere conciliación",
                reservations
            ) from e

        logger.info(f"Venta {sale.id} completada - Total: {sale.total}")
        return sale

    async def delete_sale(self, sale_id: int, requester_id: int, requester_role: str) -> None:
        """
        Eliminar venta devolviendo sus cantidades al inventario.

        Items borrados de forma independiente se omiten sin error.
        """
        sale = self._get_sale_or_404(sale_id)

        if not can_manage_sale(requester_id, requester_role, sale.user_id):
            raise Forbidden(f"Usuario {requester_id} no autorizado para eliminar la venta {sale_id}")

        lines = [(item.item_id, item.quantity) for item in sale.items]
        released: List[Reservation] = []

        try:
            for item_id, quantity in lines:
                new_quantity = self.ledger.release(
                    item_id, quantity, reference_id=sale_id, user_id=requester_id
                )
                if new_quantity is not None:
                    released.append((item_id, quantity))
        except StorageUnavailable:
            logger.error(f"Fallo liberando venta {sale_id}; revirtiendo {len(released)} liberaciones")
            self._rereserve(released, sale_id, requester_id)
            raise

        try:
            self.repository.delete_sale(sale)
        except SQLAlchemyError as e:
            self.db.rollback()
            detail = ", ".join(f"item {item_id} x{quantity}" for item_id, quantity in released)
            logger.critical(
                f"Inventario liberado pero la venta {sale_id} no pudo eliminarse: {detail}. Error: {e}"
            )
            raise ReservationPersistenceMismatch(
                f"Inventario liberado pero la venta {sale_id} sigue registrada; requiere conciliación",
                released,
                sale_id=sale_id
            ) from e

        logger.info(f"Venta {sale_id} eliminada por usuario {requester_id}")

    async def update_sale(
        self,
        sale_id: int,
        patch: SaleUpdateRequest,
        requester_id: int,
        requester_role: str
    ) -> Sale:
        """
        Actualizar campos que no afectan inventario.

        Las cantidades no se editan: eliminar y volver a crear la venta.
        """
        if patch.items is not None:
            raise InvalidArgument(
                "Los items de una venta no pueden modificarse; elimine la venta y regístrela de nuevo"
            )

        sale = self._get_sale_or_404(sale_id)

        if not can_manage_sale(requester_id, requester_role, sale.user_id, allow_manager=True):
            raise Forbidden(f"Usuario {requester_id} no autorizado para modificar la venta {sale_id}")

        updates = patch.model_dump(exclude_unset=True, exclude={'items'})
        if updates.get('payment_method') is not None:
            updates['payment_method'] = updates['payment_method'].value
        if updates.get('status') is not None:
            new_status = updates['status'].value
            if new_status == sale.status:
                updates.pop('status')
            elif new_status not in ALLOWED_TRANSITIONS.get(sale.status, set()):
                raise InvalidArgument(f"Transición de estado inválida: {sale.status} -> {new_status}")
            else:
                updates['status'] = new_status

        updates = {field: value for field, value in updates.items() if value is not None or field == 'notes'}
        if not updates:
            return sale

        return self.repository.update_sale(sale, updates)

    async def get_sale(self, sale_id: int) -> Sale:
        return self._get_sale_or_404(sale_id)

    async def list_sales(self, status: Optional[SaleStatus] = None) -> List[Sale]:
        return self.repository.list_sales(status.value if status else None)

    async def get_stats(self, period: StatsPeriod) -> list:
        return self.repository.get_stats_by_period(period.value)

    # MÉTODOS PRIVADOS HELPERS

    def _get_sale_or_404(self, sale_id: int) -> Sale:
        try:
            sale = self.repository.get_sale(sale_id)
        except TRANSIENT_DB_ERRORS as e:
            self.db.rollback()
            raise StorageUnavailable("Base de datos no disponible, intente de nuevo") from e
        if not sale:
            raise NotFound(f"Venta {sale_id} no encontrada")
        return sale

    def _reserve_lines(self, lines: List[SaleLineItem], owner_id: int) -> List[Reservation]:
        """Reservar en orden; ante cualquier fallo se compensan las ya aplicadas"""
        applied: List[Reservation] = []
        try:
            for line in lines:
                self.ledger.reserve(line.item_id, line.quantity, user_id=owner_id)
                applied.append((line.item_id, line.quantity))
        except Exception as e:
            logger.info(
                f"Reserva rechazada en línea {len(applied) + 1} de {len(lines)} ({e!r}); "
                f"revirtiendo {len(applied)} reservas"
            )
            self._compensate(applied, owner_id)
            raise
        return applied

    def _compensate(self, applied: List[Reservation], owner_id: int) -> None:
        failed: List[Reservation] = []
        for item_id, quantity in reversed(applied):
            try:
                self.ledger.release(item_id, quantity, user_id=owner_id)
            except (StorageUnavailable, SQLAlchemyError) as e:
                logger.error(f"Compensación fallida item {item_id} x{quantity}: {e}")
                failed.append((item_id, quantity))

        if failed:
            raise ReservationPersistenceMismatch(
                "No se pudieron revertir todas las reservas; requiere conciliación",
                failed
            )

    def _rereserve(self, released: List[Reservation], sale_id: int, requester_id: int) -> None:
        failed: List[Reservation] = []
        for item_id, quantity in reversed(released):
            try:
                self.ledger.reserve(item_id, quantity, reference_id=sale_id, user_id=requester_id)
            except Exception as e:
                logger.error(f"No se pudo re-reservar item {item_id} x{quantity} de venta {sale_id}: {e}")
                failed.append((item_id, quantity))

        if failed:
            raise ReservationPersistenceMismatch(
                f"Liberación parcial de la venta {sale_id}; requiere conciliación",
                failed,
                sale_id=sale_id
            )
