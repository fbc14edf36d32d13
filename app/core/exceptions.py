"""
Errores del motor de liquidación.

Se exponen como HTTPException para que los servicios puedan lanzarlos
directamente y FastAPI los convierta en respuestas.
"""
from fastapi import HTTPException, status


class ValidationError(HTTPException):
    """Entrada mal formada (conteos negativos, proveedor desconocido, ...)."""

    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class SettlementStateError(HTTPException):
    """Estado de negocio esperado; el llamador decide cómo ramificar."""
    outcome = "error"

    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class AlreadySettledError(SettlementStateError):
    outcome = "already_settled"


class NoActivityError(SettlementStateError):
    outcome = "no_activity"
