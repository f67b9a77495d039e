from .cluster import ClusterUnavailableError, load_cluster_clients
from .dispatcher import DispatchError, WorkerDispatcher, post_dispatch_failure
from .job_spec import build_job_spec, generate_job_name
from .status import JobStatusReporter, determine_job_status

__all__ = [
    "ClusterUnavailableError",
    "load_cluster_clients",
    "DispatchError",
    "WorkerDispatcher",
    "post_dispatch_failure",
    "build_job_spec",
    "generate_job_name",
    "JobStatusReporter",
    "determine_job_status",
]
