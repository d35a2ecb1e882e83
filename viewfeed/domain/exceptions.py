from __future__ import annotations

from typing import Any

from viewfeed.domain.error_codes import ErrorCode
from viewfeed.errors import AppError


class ContractViolation(AppError):
    """
    Назначение:
        Вызов абстрактного контракта без конкретной реализации.
    Инварианты/гарантии:
        - Это ошибка программиста, а не рантайм-условие; retryable всегда False.
    """

    def __init__(self, operation: str, owner: str):
        super().__init__(
            category="contract",
            code=ErrorCode.NOT_IMPLEMENTED.value,
            message=f"{owner}.{operation} is not implemented",
            details={"operation": operation, "owner": owner},
        )


class InvalidConfig(AppError):
    """
    Назначение:
        Некорректные параметры подключения или конструктора источника.
    """

    def __init__(self, message: str, field: str | None = None, code: ErrorCode = ErrorCode.INVALID_CONFIG):
        super().__init__(
            category="config",
            code=code.value,
            message=message,
            details={} if field is None else {"field": field},
        )
        self.field = field


class UnknownDriverError(InvalidConfig):
    def __init__(self, driver: str, known: tuple[str, ...] = ()):
        super().__init__(
            f"Unknown database driver: {driver!r} (known: {', '.join(known) or '-'})",
            field="driver",
            code=ErrorCode.UNKNOWN_DRIVER,
        )
        self.driver = driver


class RowConversionError(AppError):
    """
    Назначение:
        Строка результата не подходит под конвертер (арность/типы).
    """

    def __init__(self, message: str, row: tuple | None = None):
        details: dict[str, Any] = {}
        if row is not None:
            details["arity"] = len(row)
        super().__init__(
            category="convert",
            code=ErrorCode.CONVERT_FAILED.value,
            message=message,
            details=details,
        )


class FetchFailure(AppError):
    """
    Назначение:
        Сбой выборки на одной из стадий connect/prepare/execute/convert.
    Инварианты/гарантии:
        - Исходная ошибка доступна через __cause__ (raise ... from exc) и свойство cause.
        - retryable=True: источник остаётся в состоянии UNFETCHED и fetch можно повторить.
    """

    def __init__(self, stage: str, message: str, details: dict[str, Any] | None = None):
        super().__init__(
            category="fetch",
            code=ErrorCode.from_stage(stage).value,
            message=message,
            retryable=True,
            details={"stage": stage, **(details or {})},
        )
        self.stage = stage

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


__all__ = [
    "ContractViolation",
    "InvalidConfig",
    "UnknownDriverError",
    "RowConversionError",
    "FetchFailure",
]
