"""Job-layer contracts shared by the CLI, scheduler, handler and API surfaces."""

from dataclasses import dataclass
from typing import Protocol

from netsuite_sync.domain import SyncRunStats


@dataclass(frozen=True)
class JobExecutionResult:
    """Outcome of one sync run.

    Attributes:
        job_name: Executed job name.
        status: `success`, `failed` (some mapping failed) or `aborted` (connection validation failed).
        stats: Run statistics collected by the orchestrator.
    """

    job_name: str
    status: str
    stats: SyncRunStats


class JobOrchestratorPort(Protocol):
    """Port for components that execute named sync jobs."""

    def job_supported_names(self) -> tuple[str, ...]:
        """Return the job names accepted by `job_execute`."""

    def job_execute(self, job_name: str) -> JobExecutionResult:
        """Run one named job to completion.

        Args:
            job_name: Name returned by `job_supported_names`.

        Returns:
            JobExecutionResult: Classified outcome with run statistics.

        Raises:
            ValueError: Raised when the job name is not supported.
        """

    def job_close(self) -> None:
        """Release HTTP clients and connection pools held for runs."""
