"""
Batch runner for Translucify jobs.

Every image listed in a job is pushed through the same three-node chain:

    Image Import -> Translucify -> Output

Images are independent of one another, so the chains may run in parallel on
a thread pool. A failure in one chain is recorded and does not stop the rest.

Classes:
    BatchResult: Outcome of a batch run

Functions:
    build_batch_chain: Node dictionaries for one image
    run_batch_job: Execute a job's chains and collect results
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import concurrent.futures
import logging

from TL_Libs.constants import (
    FIELD_IMAGE_PATHS,
    FIELD_OUTPUT_DIR,
    FIELD_OUTPUT_PATH,
    FIELD_OVERWRITE,
    FIELD_SEED_X,
    FIELD_SEED_Y,
    FIELD_TOLERANCE,
)
from TL_Libs.NodesLib.image_import_node import create_import_image_node
from TL_Libs.NodesLib.output_node import create_output_node
from TL_Libs.NodesLib.translucify_node import create_translucify_node
from TL_Libs.ProjStoreLib.job_store import normalize_job_data
from TL_Libs.ProjStoreLib.node_executors import NodeExecutorRegistry, get_default_registry

logger = logging.getLogger(__name__)

# Exceptions a single chain may raise without aborting the batch
CHAIN_ERRORS = (OSError, ValueError, TypeError, KeyError)


@dataclass
class BatchResult:
    """Outcome of a batch run.

    Attributes:
        saved: Source image path -> written output path
        failed: Source image path -> error message
    """
    saved: Dict[str, Path] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        return not self.failed


def _resolve(path_str: str, base_dir: Optional[Path]) -> Path:
    path = Path(path_str)
    if base_dir is not None and not path.is_absolute():
        return base_dir / path
    return path


def build_batch_chain(
    image_path: Path,
    index: int,
    job: Dict[str, Any],
    output_dir: Path,
) -> List[Dict[str, Any]]:
    """
    Build the import, translucify and output node dictionaries for one image.

    Args:
        image_path: Image to process
        index: Position of the image in the job (used for {COUNTER})
        job: Normalized job dictionary
        output_dir: Directory outputs are confined to

    Returns:
        List of three node dictionaries in execution order
    """
    return [
        create_import_image_node(f"import-{index}", image_path),
        create_translucify_node(
            f"translucify-{index}",
            tolerance=job[FIELD_TOLERANCE],
            seed=(job[FIELD_SEED_X], job[FIELD_SEED_Y]),
        ),
        create_output_node(
            f"output-{index}",
            output_path=job[FIELD_OUTPUT_PATH],
            source_name=image_path.stem,
            counter=index,
            overwrite=job[FIELD_OVERWRITE],
            base_directory=str(output_dir.resolve()),
        ),
    ]


def _run_chain(registry: NodeExecutorRegistry, chain: List[Dict[str, Any]]) -> Any:
    inputs: List[Any] = []
    result: Any = None
    for node in chain:
        result = registry.execute(node["type"], node, inputs)
        inputs = [result]
    return result


def run_batch_job(
    job: Dict[str, Any],
    registry: Optional[NodeExecutorRegistry] = None,
    use_threading: bool = True,
    max_workers: Optional[int] = None,
    base_dir: Optional[Path] = None,
) -> BatchResult:
    """
    Run every image of a job through the translucify chain.

    Args:
        job: Job dictionary (as loaded by load_job_data; missing fields take defaults)
        registry: Executor registry (default: the global default registry)
        use_threading: Run image chains in parallel (default: True)
        max_workers: Maximum number of threads (default: None = CPU count)
        base_dir: Directory relative image and output paths are resolved against

    Returns:
        BatchResult with saved outputs and per-image failures

    Raises:
        ValueError: If the job settings are invalid
    """
    job = normalize_job_data(job, "batch")
    registry = registry or get_default_registry()
    output_dir = _resolve(job[FIELD_OUTPUT_DIR], base_dir)

    chains: List[Tuple[str, List[Dict[str, Any]]]] = []
    for index, path_str in enumerate(job[FIELD_IMAGE_PATHS]):
        image_path = _resolve(path_str, base_dir)
        chains.append((path_str, build_batch_chain(image_path, index, job, output_dir)))

    result = BatchResult()

    def record(source: str, outcome: Any = None, error: Optional[BaseException] = None) -> None:
        if error is None:
            result.saved[source] = outcome
        else:
            logger.warning(f"Failed to translucify {source}: {error}")
            result.failed[source] = str(error)

    if use_threading and len(chains) > 1:
        with concurrent.futures.ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures: Dict[concurrent.futures.Future, str] = {
                executor.submit(_run_chain, registry, chain): source
                for source, chain in chains
            }
            for future in concurrent.futures.as_completed(futures):
                source = futures[future]
                try:
                    record(source, future.result())
                except CHAIN_ERRORS as e:
                    record(source, error=e)
    else:
        for source, chain in chains:
            try:
                record(source, _run_chain(registry, chain))
            except CHAIN_ERRORS as e:
                record(source, error=e)

    logger.info(
        f"Batch '{job.get('name', '')}' finished: "
        f"{len(result.saved)} saved, {len(result.failed)} failed"
    )
    return result
