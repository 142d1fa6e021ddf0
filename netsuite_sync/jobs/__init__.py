"""Job layer package for sync orchestration and scheduling."""

from .interfaces import JobExecutionResult, JobOrchestratorPort
from .scheduler import SCHEDULED_JOB_ID, job_build_scheduler, job_run_logged, job_run_scheduler
from .sync_orchestrator import SyncJobOrchestrator, SyncOrchestratorConfig

__all__ = [
	"JobExecutionResult",
	"JobOrchestratorPort",
	"SCHEDULED_JOB_ID",
	"SyncJobOrchestrator",
	"SyncOrchestratorConfig",
	"job_build_scheduler",
	"job_run_logged",
	"job_run_scheduler",
]
