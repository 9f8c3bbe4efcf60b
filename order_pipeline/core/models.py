"""
Domain models for the order pipeline.

Snapshots, records and results are immutable; every lifecycle transition
stores a brand new snapshot instead of patching the previous one.
"""
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidatorFunctionWrapHandler,
    field_validator,
)
from pydantic.alias_generators import to_camel

OFFLINE_JOB = "order.offline"
RETRY_JOB = "order.retry"


class CustomerStatus(str, Enum):
    """Customer account status."""

    GUEST = "guest"
    REGISTERED = "registered"


class OrderStage(str, Enum):
    """Lifecycle stage recorded in the order state cache."""

    STARTED = "started"
    CHARGED = "charged"
    COMPLETED = "completed"


class CustomerRecord(BaseModel):
    """Customer known to the directory."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: CustomerStatus = CustomerStatus.GUEST
    email: str


class PaymentAuthorization(BaseModel):
    """Authorization returned by a successful charge."""

    model_config = ConfigDict(frozen=True)

    auth_code: str


class StartedSnapshot(BaseModel):
    """Order seen by the pipeline, nothing charged yet."""

    model_config = ConfigDict(frozen=True)

    stage: Literal[OrderStage.STARTED] = OrderStage.STARTED
    started_at: datetime
    flag: str


class ChargedSnapshot(BaseModel):
    """Order charged; finalization pending."""

    model_config = ConfigDict(frozen=True)

    stage: Literal[OrderStage.CHARGED] = OrderStage.CHARGED
    auth: PaymentAuthorization


class CompletedSnapshot(BaseModel):
    """Order finalized after the completion delay."""

    model_config = ConfigDict(frozen=True)

    stage: Literal[OrderStage.COMPLETED] = OrderStage.COMPLETED
    completed_at: datetime


OrderSnapshot = Union[StartedSnapshot, ChargedSnapshot, CompletedSnapshot]


class OrderConfig(BaseModel):
    """
    Per-invocation tunables read from the order config JSON file.

    Keys are camelCase on disk (``offlineMode``, ``auditPath``,
    ``defaultAmount``, ``completionDelayMs``); unknown keys are ignored and
    absent keys are resolved at the call site. A value of the wrong type
    (``"offlineMode": null``, ``"defaultAmount": "ten"``) is treated as
    unset, so one bad key does not discard the rest of the file.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    offline_mode: Optional[bool] = False
    audit_path: Optional[str] = None
    default_amount: Optional[float] = None
    completion_delay_ms: Optional[float] = None

    @field_validator("*", mode="wrap")
    @classmethod
    def _unset_invalid_value(cls, value: Any, handler: ValidatorFunctionWrapHandler) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return None


class OrderOverrides(BaseModel):
    """
    Caller-supplied options for one invocation.

    Accepts snake_case or camelCase keys. Unknown keys are kept so they
    travel with queued jobs. The pipeline never mutates this object or the
    mapping it was built from.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    amount: Optional[float] = None
    template: Optional[str] = None
    flag: Optional[str] = None
    email: Optional[str] = None
    config_path: Optional[str] = None
    meta: Dict[str, Any] = Field(default_factory=dict)


class InvocationMetadata(BaseModel):
    """Runtime stamps for one invocation, kept apart from the caller's overrides."""

    model_config = ConfigDict(frozen=True)

    touched_at: datetime
    started_by: str
    extra: Dict[str, Any] = Field(default_factory=dict)


class RuntimeFlags(BaseModel):
    """Process-wide state as seen when the callback fired."""

    model_config = ConfigDict(frozen=True)

    outage_mode: bool
    retry: int


class QueueJob(BaseModel):
    """Deferred work handed to the work queue."""

    model_config = ConfigDict(frozen=True)

    type: str
    order_id: str
    payload: Dict[str, Any] = Field(default_factory=dict)
    reason: Optional[str] = None


class QueuedResult(BaseModel):
    """Result delivered when the order was deferred instead of charged."""

    model_config = ConfigDict(frozen=True)

    status: Literal["queued"] = "queued"
    order_id: str


class ChargedResult(BaseModel):
    """Result delivered once the order is charged and the customer notified."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    auth: PaymentAuthorization
    customer: CustomerRecord
    flags: RuntimeFlags
    metadata: InvocationMetadata


OrderResult = Union[QueuedResult, ChargedResult]
