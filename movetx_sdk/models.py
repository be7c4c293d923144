"""
Data models for the MoveTx SDK.
"""
import re
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

FUNCTION_ID_PATTERN = re.compile(r"^0x[0-9a-fA-F]+::[A-Za-z_][A-Za-z0-9_]*::[A-Za-z_][A-Za-z0-9_]*$")


def _freeze(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(v) for v in value)
    return value


class CallIntent(BaseModel):
    """A state-changing entry function call, before any chain encoding"""
    model_config = ConfigDict(frozen=True)

    function: str
    type_arguments: Tuple[str, ...] = ()
    function_arguments: Tuple[Any, ...] = ()
    # Explicit Move parameter types; when omitted they come from the module ABI
    argument_types: Optional[Tuple[str, ...]] = None

    @field_validator("function")
    @classmethod
    def _check_function(cls, value: str) -> str:
        if not FUNCTION_ID_PATTERN.match(value):
            raise ValueError(f"function must look like 0x<address>::<module>::<name>, got: {value}")
        return value

    @field_validator("function_arguments", mode="before")
    @classmethod
    def _freeze_arguments(cls, value: Any) -> Any:
        return _freeze(value)

    @property
    def module_address(self) -> str:
        return self.function.split("::")[0]

    @property
    def module_name(self) -> str:
        return self.function.split("::")[1]

    @property
    def function_name(self) -> str:
        return self.function.split("::")[2]


class SponsorshipResponse(BaseModel):
    """Response of the sponsorship backend's POST /sponsor-transaction"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    transaction_hash: Optional[str] = Field(None, alias="transactionHash")
    fallback_required: Optional[bool] = Field(None, alias="fallbackRequired")
    error: Optional[str] = None
    reason: Optional[str] = None
    daily_used: Optional[int] = Field(None, alias="dailyUsed")
    daily_limit: Optional[int] = Field(None, alias="dailyLimit")

    @classmethod
    def network_error(cls) -> "SponsorshipResponse":
        """The response synthesized when the backend cannot be reached"""
        return cls(success=False, fallback_required=True, error="network error")

    @property
    def failure_message(self) -> str:
        return self.error or self.reason or "Sponsorship failed"


class SponsorshipStatus(BaseModel):
    """Response of GET /sponsorship-status"""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    daily_used: int = Field(0, alias="dailyUsed")
    daily_limit: int = Field(0, alias="dailyLimit")
    remaining: int = 0
    enabled: bool = False


class SponsorshipAvailability(BaseModel):
    available: bool
    daily_used: int
    daily_limit: int


class ExecutionResult(BaseModel):
    """Terminal status of a transaction as reported by the ledger"""
    transaction_hash: str
    success: bool
    vm_status: Optional[str] = None
    abort_reason: Optional[str] = None


class SubmissionOutcome(BaseModel):
    """Result returned to callers of TransactionClient.execute_call"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    transaction_hash: str = Field(..., alias="transactionHash")
    sponsored: bool
    fallback_reason: Optional[str] = None


@dataclass(frozen=True)
class RawSignature:
    """
    A signature produced by one signer over one signing message.

    Attributes:
        signer_address: Address of the account that signed
        signature: Raw 64-byte Ed25519 signature
    """
    signer_address: str
    signature: bytes
