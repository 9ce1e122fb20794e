"""Economy-wide flows: fee distribution across sinks."""

from voidcore.modules.economy.fee_service import FeeService

__all__ = ["FeeService"]
