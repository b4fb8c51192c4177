"""
ProjStoreLib - Batch job storage and execution

This module handles persistence of Translucify batch jobs, the registry of
node executors, and the runner that pushes every job image through the
import, translucify and output nodes.
"""

from TL_Libs.ProjStoreLib.job_store import (
    create_job_file,
    list_job_files,
    load_job_name,
    load_job_data,
    save_job_data,
    normalize_job_data,
    get_jobs_dir,
)
from TL_Libs.ProjStoreLib.node_executors import (
    NodeExecutorRegistry,
    NodeTypeInfo,
    get_default_registry,
    register_default_executors,
)
from TL_Libs.ProjStoreLib.batch_runner import (
    BatchResult,
    build_batch_chain,
    run_batch_job,
)

__all__ = [
    "create_job_file",
    "list_job_files",
    "load_job_name",
    "load_job_data",
    "save_job_data",
    "normalize_job_data",
    "get_jobs_dir",
    "NodeExecutorRegistry",
    "NodeTypeInfo",
    "get_default_registry",
    "register_default_executors",
    "BatchResult",
    "build_batch_chain",
    "run_batch_job",
]
