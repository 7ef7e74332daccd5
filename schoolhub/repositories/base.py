from dataclasses import dataclass
from typing import Callable, Generic, Optional, TypeVar

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = structlog.get_logger(__name__)

T = TypeVar("T")


@dataclass
class GatewayResult(Generic[T]):
    """Outcome of one storage call: ``data`` on success, ``error`` otherwise."""

    data: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class TableRepository:
    table_name: str = ""

    def __init__(self, session: Session):
        self.session = session

    def _run(self, operation: str, fn: Callable[[], T]) -> GatewayResult[T]:
        try:
            return GatewayResult(data=fn())
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(
                "Storage operation failed",
                table=self.table_name,
                operation=operation,
                error=str(e),
            )
            return GatewayResult(error=str(e))
