# app/core/exceptions.py
"""
Errores tipados del dominio.

Todos heredan de HTTPException para que FastAPI los serialice sin
handlers adicionales; el servicio que los lanza decide el tipo y el
router solo los deja propagar.
"""
from typing import Any, Dict, List, Optional, Tuple

from fastapi import HTTPException, status


class DomainError(HTTPException):
    """Base de los errores de negocio e infraestructura"""
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code: str = "domain_error"

    def __init__(self, message: str, **extra: Any):
        self.message = message
        self.extra = extra
        detail: Dict[str, Any] = {"error_code": self.error_code, "message": message}
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail)


class InvalidArgument(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "invalid_argument"


class NotFound(DomainError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "not_found"


class ItemNotFound(NotFound):
    error_code = "item_not_found"

    def __init__(self, item_id: int):
        self.item_id = item_id
        super().__init__(f"Item de inventario {item_id} no encontrado", item_id=item_id)


class InsufficientStock(DomainError):
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "insufficient_stock"

    def __init__(self, item_id: int, requested: int, available: int):
        self.item_id = item_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Stock insuficiente para item {item_id} (stock: {available}, necesario: {requested})",
            item_id=item_id,
            requested=requested,
            available=available,
        )


class Forbidden(DomainError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "forbidden"


class StorageUnavailable(DomainError):
    """Fallo transitorio de la base de datos; el cliente puede reintentar"""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = "storage_unavailable"


class ReservationPersistenceMismatch(DomainError):
    """
    Reservas aplicadas al inventario sin venta que las respalde.

    Requiere conciliación manual: `reservations` lista los pares
    (item_id, cantidad) que quedaron descontados.
    """
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error_code = "reservation_persistence_mismatch"

    def __init__(self, message: str, reservations: List[Tuple[int, int]], sale_id: Optional[int] = None):
        self.reservations = list(reservations)
        self.sale_id = sale_id
        super().__init__(
            message,
            sale_id=sale_id,
            reservations=[
                {"item_id": item_id, "quantity": quantity}
                for item_id, quantity in self.reservations
            ],
        )
