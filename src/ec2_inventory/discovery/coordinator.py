"""
Concurrent fan-out of account fetches
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import List, Mapping

from ..models import AccountResult, InstanceRecord
from ..utils.logging_config import log_execution_time
from .fetcher import AccountFetcher

logger = logging.getLogger(__name__)


class FanOutCoordinator:
    """Runs one fetch per account on a bounded thread pool and merges the results"""

    def __init__(self, fetcher: AccountFetcher, max_workers: int = 10):
        self.fetcher = fetcher
        self.max_workers = max_workers

    @log_execution_time
    def run_all_results(self, accounts: Mapping[str, str]) -> List[AccountResult]:
        """
        Query every account and wait for all of them to finish.

        Results are returned in completion order. Interrupting the wait
        cancels queued fetches and signals running ones to stop.
        """
        if not accounts:
            logger.warning("No accounts to query")
            return []

        workers = min(self.max_workers, len(accounts))
        logger.info(f"Querying EC2 instances in {len(accounts)} accounts with {workers} workers")

        results = []
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix='ec2-inventory')
        try:
            future_to_account = {
                executor.submit(self.fetcher.fetch_account, account_id, role_arn): (account_id, role_arn)
                for account_id, role_arn in accounts.items()
            }

            for future in as_completed(future_to_account):
                account_id, role_arn = future_to_account[future]
                try:
                    result = future.result()
                except Exception as e:
                    logger.error(f"[{account_id}] Fetch task failed: {e}")
                    result = AccountResult.failure(account_id, role_arn, str(e))

                results.append(result)
                logger.debug(f"Completed {len(results)}/{len(future_to_account)} accounts")

        except KeyboardInterrupt:
            logger.warning("Interrupted; cancelling outstanding account queries")
            self.fetcher.cancel()
            executor.shutdown(wait=False, cancel_futures=True)
            raise

        executor.shutdown(wait=True)

        failed = [r for r in results if not r.succeeded]
        if failed:
            logger.warning(f"{len(failed)} of {len(results)} accounts could not be queried")

        return results

    def run_all(self, accounts: Mapping[str, str]) -> List[InstanceRecord]:
        """Query every account and return all discovered instances (unordered)"""
        return merge_records(self.run_all_results(accounts))


def merge_records(results: List[AccountResult]) -> List[InstanceRecord]:
    """Concatenate the records of every successful result"""
    return [record for result in results if result.succeeded for record in result.records]
