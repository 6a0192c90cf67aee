from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

DEFAULT_TAG_NAME = "-"


class FetchStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class AccountEntry:
    account_id: str
    role_arn: str


@dataclass(frozen=True)
class InstanceRecord:
    account_id: str
    instance_id: str
    tag_name: str = DEFAULT_TAG_NAME
    instance_type: str = ""

    def as_row(self) -> List[str]:
        return [self.account_id, self.instance_id, self.tag_name, self.instance_type]

    @classmethod
    def from_row(cls, row: Sequence[str]) -> "InstanceRecord":
        account_id, instance_id, tag_name, instance_type = row
        return cls(
            account_id=account_id,
            instance_id=instance_id,
            tag_name=tag_name,
            instance_type=instance_type
        )


@dataclass
class AccountResult:
    """Outcome of querying one account: either its records or the failure reason"""
    account_id: str
    role_arn: str
    status: FetchStatus
    records: List[InstanceRecord] = field(default_factory=list)
    error: Optional[str] = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == FetchStatus.SUCCESS

    @classmethod
    def success(cls, account_id: str, role_arn: str,
                records: List[InstanceRecord],
                duration_seconds: float = 0.0) -> "AccountResult":
        return cls(
            account_id=account_id,
            role_arn=role_arn,
            status=FetchStatus.SUCCESS,
            records=list(records),
            duration_seconds=duration_seconds
        )

    @classmethod
    def failure(cls, account_id: str, role_arn: str, error: str,
                duration_seconds: float = 0.0) -> "AccountResult":
        return cls(
            account_id=account_id,
            role_arn=role_arn,
            status=FetchStatus.FAILURE,
            error=error,
            duration_seconds=duration_seconds
        )
