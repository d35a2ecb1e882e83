from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок viewfeed.
    """

    NOT_IMPLEMENTED = "NOT_IMPLEMENTED"
    INVALID_CONFIG = "INVALID_CONFIG"
    UNKNOWN_DRIVER = "UNKNOWN_DRIVER"
    CONNECT_FAILED = "CONNECT_FAILED"
    PREPARE_FAILED = "PREPARE_FAILED"
    EXECUTE_FAILED = "EXECUTE_FAILED"
    CONVERT_FAILED = "CONVERT_FAILED"

    @classmethod
    def from_stage(cls, stage: str) -> "ErrorCode":
        """
        Назначение:
            Подбор кода ошибки по стадии выборки (connect/prepare/execute/convert).
        """
        by_stage = {
            "connect": cls.CONNECT_FAILED,
            "prepare": cls.PREPARE_FAILED,
            "execute": cls.EXECUTE_FAILED,
            "convert": cls.CONVERT_FAILED,
        }
        try:
            return by_stage[stage]
        except KeyError:
            raise ValueError(f"Unsupported fetch stage: {stage}") from None
