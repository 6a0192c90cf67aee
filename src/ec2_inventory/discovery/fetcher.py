"""
Per-account EC2 instance discovery via cross-account role assumption
"""
import logging
import threading
import time
from typing import Any, Dict, Iterator, List, Optional

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError, ProfileNotFound

from ..config.settings import DEFAULT_REGION, InventorySettings
from ..exceptions import ConfigError, FetchError
from ..models import DEFAULT_TAG_NAME, AccountResult, InstanceRecord

logger = logging.getLogger(__name__)

NAME_TAG_KEY = 'Name'


def extract_name_tag(tags: Optional[List[Dict[str, str]]]) -> str:
    """Return the value of the first tag keyed exactly 'Name', or '-'"""
    return next(
        (tag.get('Value', '') for tag in tags or [] if tag.get('Key') == NAME_TAG_KEY),
        DEFAULT_TAG_NAME
    )


def create_base_session(profile: Optional[str] = None,
                        region: Optional[str] = None) -> boto3.Session:
    """
    Resolve the caller's credentials once, before any account is queried.

    Raises:
        ConfigError: the named profile does not exist
    """
    try:
        session = boto3.Session(profile_name=profile, region_name=region)
        credentials = session.get_credentials()
    except ProfileNotFound as e:
        raise ConfigError(str(e)) from e

    if credentials is None:
        logger.warning("No AWS credentials found; every role assumption will fail")

    return session


class AccountFetcher:
    """Assumes a role in one account and lists its EC2 instances"""

    def __init__(self,
                 base_session: boto3.Session,
                 settings: Optional[InventorySettings] = None,
                 cancel_event: Optional[threading.Event] = None):
        self.base_session = base_session
        self.settings = settings or InventorySettings()
        self.cancel_event = cancel_event or threading.Event()
        self.region = self.settings.region or base_session.region_name or DEFAULT_REGION
        self.boto_config = BotoConfig(
            region_name=self.region,
            connect_timeout=self.settings.connect_timeout,
            read_timeout=self.settings.read_timeout,
            retries={'max_attempts': self.settings.max_attempts, 'mode': 'standard'}
        )
        self._sts = None
        self._sts_lock = threading.Lock()

    def cancel(self):
        """Ask in-flight fetches to stop at their next request boundary"""
        self.cancel_event.set()

    def _sts_client(self):
        # Sessions are not thread-safe; clients are
        with self._sts_lock:
            if self._sts is None:
                self._sts = self.base_session.client('sts', config=self.boto_config)
            return self._sts

    def assume_role(self, account_id: str, role_arn: str) -> boto3.Session:
        """Assume role in target account"""
        if not role_arn:
            raise FetchError("No role ARN configured", account_id)

        params = {
            'RoleArn': role_arn,
            'RoleSessionName': f"{self.settings.session_name}-{account_id}"[:64]
        }
        if self.settings.external_id:
            params['ExternalId'] = self.settings.external_id

        try:
            response = self._sts_client().assume_role(**params)
        except (ClientError, BotoCoreError) as e:
            raise FetchError(f"Failed to assume role {role_arn}: {e}", account_id) from e

        credentials = response['Credentials']
        return boto3.Session(
            aws_access_key_id=credentials['AccessKeyId'],
            aws_secret_access_key=credentials['SecretAccessKey'],
            aws_session_token=credentials['SessionToken'],
            region_name=self.region
        )

    def _check_deadline(self, account_id: str, deadline: float):
        if self.cancel_event.is_set():
            raise FetchError("Cancelled", account_id)
        if time.monotonic() > deadline:
            raise FetchError(f"Timed out after {self.settings.task_timeout:g}s", account_id)

    def _describe_pages(self, ec2: Any, account_id: str, deadline: float) -> Iterator[Dict[str, Any]]:
        params = {}
        if self.settings.page_size:
            params['MaxResults'] = self.settings.page_size

        while True:
            self._check_deadline(account_id, deadline)
            response = ec2.describe_instances(**params)
            yield response

            next_token = response.get('NextToken')
            if not next_token:
                return
            if not self.settings.paginate:
                logger.warning(f"[{account_id}] More instances available; only the first page was read")
                return
            params['NextToken'] = next_token

    def _records_from_page(self, account_id: str, page: Dict[str, Any]) -> List[InstanceRecord]:
        records = []
        for reservation in page.get('Reservations', []):
            for instance in reservation.get('Instances', []):
                records.append(InstanceRecord(
                    account_id=account_id,
                    instance_id=instance['InstanceId'],
                    tag_name=extract_name_tag(instance.get('Tags')),
                    instance_type=instance.get('InstanceType', '')
                ))
        return records

    def fetch_account(self, account_id: str, role_arn: str) -> AccountResult:
        """
        Query one account and return a tagged result.

        Never raises: failures are logged and returned as FAILURE results so
        that callers can tell an empty account from one that could not be
        queried.
        """
        start = time.monotonic()
        deadline = start + self.settings.task_timeout
        logger.debug(f"[{account_id}] Assuming {role_arn}")

        try:
            self._check_deadline(account_id, deadline)
            session = self.assume_role(account_id, role_arn)
            ec2 = session.client('ec2', config=self.boto_config)

            records = []
            for page in self._describe_pages(ec2, account_id, deadline):
                records.extend(self._records_from_page(account_id, page))

        except FetchError as e:
            logger.error(f"[{account_id}] {e}")
            return AccountResult.failure(account_id, role_arn, str(e), time.monotonic() - start)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[{account_id}] Failed to describe EC2 instances: {e}")
            return AccountResult.failure(account_id, role_arn, f"Failed to describe EC2 instances: {e}",
                                         time.monotonic() - start)
        except Exception as e:
            logger.exception(f"[{account_id}] Unexpected error: {e}")
            return AccountResult.failure(account_id, role_arn, f"Unexpected error: {e}",
                                         time.monotonic() - start)

        duration = time.monotonic() - start
        logger.info(f"[{account_id}] Retrieved {len(records)} instances in {duration:.1f}s")
        return AccountResult.success(account_id, role_arn, records, duration)

    def fetch(self, account_id: str, role_arn: str) -> List[InstanceRecord]:
        """Return the account's instances, or an empty list if it could not be queried"""
        return self.fetch_account(account_id, role_arn).records
