"""
Batch job file storage for Translucify.

A job file (.tljob) is a JSON document describing a batch run: which images
to process, the fill tolerance and seed, and where to write the results.

The job file schema includes:
- Job metadata (name, creation date, schema version)
- Image paths
- Fill settings (tolerance, seed_x, seed_y)
- Output settings (output_dir, output_path template, overwrite)

Functions:
    get_jobs_dir: Get (and create) the Jobs directory
    list_job_files: List all job files in the Jobs directory
    create_job_file: Create a new job file with default settings
    load_job_name: Load just the job name from a file
    load_job_data: Load and validate complete job data
    save_job_data: Save job data to file
"""

from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence
import json

from TL_Libs.constants import (
    DEFAULT_OUTPUT_TEMPLATE,
    DEFAULT_SEED_X,
    DEFAULT_SEED_Y,
    DEFAULT_TOLERANCE,
    FIELD_CREATED_AT,
    FIELD_IMAGE_PATHS,
    FIELD_NAME,
    FIELD_OUTPUT_DIR,
    FIELD_OUTPUT_PATH,
    FIELD_OVERWRITE,
    FIELD_SCHEMA_VERSION,
    FIELD_SEED_X,
    FIELD_SEED_Y,
    FIELD_TOLERANCE,
    FILENAME_REPLACEMENT_CHAR,
    JOB_EXTENSION,
    JOBS_DIR_NAME,
    SAFE_FILENAME_CHARS,
    SCHEMA_VERSION,
)


def _default_job(name: str) -> Dict[str, Any]:
    return {
        FIELD_SCHEMA_VERSION: SCHEMA_VERSION,
        FIELD_NAME: name,
        FIELD_CREATED_AT: datetime.now().isoformat(timespec="seconds"),
        FIELD_IMAGE_PATHS: [],
        FIELD_TOLERANCE: DEFAULT_TOLERANCE,
        FIELD_SEED_X: DEFAULT_SEED_X,
        FIELD_SEED_Y: DEFAULT_SEED_Y,
        FIELD_OUTPUT_DIR: "output",
        FIELD_OUTPUT_PATH: DEFAULT_OUTPUT_TEMPLATE,
        FIELD_OVERWRITE: False,
    }


def get_jobs_dir(base_dir: Path) -> Path:
    jobs_dir = base_dir / JOBS_DIR_NAME
    jobs_dir.mkdir(parents=True, exist_ok=True)
    return jobs_dir


def list_job_files(base_dir: Path) -> List[Path]:
    jobs_dir = get_jobs_dir(base_dir)
    return sorted(jobs_dir.glob(f"*{JOB_EXTENSION}"))


def create_job_file(
    base_dir: Path,
    job_name: str,
    image_paths: Optional[Sequence[Path]] = None,
    tolerance: float = DEFAULT_TOLERANCE,
) -> Path:
    """
    Create a new job file with default settings.

    Args:
        base_dir: Base directory containing the Jobs folder
        job_name: Human-readable name for the job
        image_paths: Optional initial list of images to process
        tolerance: Fill tolerance for the job

    Returns:
        Path to the created job file
    """
    jobs_dir = get_jobs_dir(base_dir)

    # Sanitize filename - keep only alphanumeric and safe characters
    safe_name = "".join(
        c if c.isalnum() or c in SAFE_FILENAME_CHARS else FILENAME_REPLACEMENT_CHAR
        for c in job_name
    ).strip(FILENAME_REPLACEMENT_CHAR)

    if not safe_name:
        safe_name = "new_job"

    job_path = jobs_dir / f"{safe_name}{JOB_EXTENSION}"
    counter = 1
    while job_path.exists():
        job_path = jobs_dir / f"{safe_name}_{counter}{JOB_EXTENSION}"
        counter += 1

    payload = _default_job(job_name)
    payload[FIELD_IMAGE_PATHS] = [str(path) for path in image_paths or []]
    payload[FIELD_TOLERANCE] = float(tolerance)

    save_job_data(job_path, payload)
    return job_path


def load_job_name(job_path: Path) -> str:
    """Return the job name, or the filename stem if the file cannot be read."""
    try:
        payload = json.loads(job_path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return job_path.stem

    if not isinstance(payload, dict):
        return job_path.stem
    return str(payload.get(FIELD_NAME) or job_path.stem)


def normalize_job_data(payload: Dict[str, Any], fallback_name: str) -> Dict[str, Any]:
    """Fill defaults for missing job fields and validate the fill settings."""
    job = _default_job(fallback_name)
    job.update({key: value for key, value in payload.items() if key in job})

    image_paths = job[FIELD_IMAGE_PATHS]
    if not isinstance(image_paths, list):
        raise ValueError(f"'{FIELD_IMAGE_PATHS}' must be a list, got {type(image_paths).__name__}")
    job[FIELD_IMAGE_PATHS] = [str(path) for path in image_paths if str(path).strip()]

    try:
        job[FIELD_TOLERANCE] = float(job[FIELD_TOLERANCE])
        job[FIELD_SEED_X] = int(job[FIELD_SEED_X])
        job[FIELD_SEED_Y] = int(job[FIELD_SEED_Y])
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid fill settings in job file: {e}") from e

    if job[FIELD_TOLERANCE] < 0:
        raise ValueError(f"tolerance must be >= 0, got {job[FIELD_TOLERANCE]}")
    if job[FIELD_SEED_X] < 0 or job[FIELD_SEED_Y] < 0:
        raise ValueError(f"seed must be non-negative, got ({job[FIELD_SEED_X]}, {job[FIELD_SEED_Y]})")

    job[FIELD_NAME] = str(job[FIELD_NAME] or fallback_name)
    job[FIELD_OUTPUT_DIR] = str(job[FIELD_OUTPUT_DIR])
    job[FIELD_OUTPUT_PATH] = str(job[FIELD_OUTPUT_PATH] or DEFAULT_OUTPUT_TEMPLATE)
    job[FIELD_OVERWRITE] = bool(job[FIELD_OVERWRITE])
    return job


def load_job_data(job_path: Path) -> Dict[str, Any]:
    """
    Load a job file, filling in defaults for missing fields.

    Args:
        job_path: Path to the job file

    Returns:
        Normalized job dictionary

    Raises:
        FileNotFoundError: If the job file does not exist
        ValueError: If the file is not valid JSON or settings are invalid
    """
    try:
        payload = json.loads(job_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Job file is not valid JSON: {job_path}: {e}") from e

    if not isinstance(payload, dict):
        raise ValueError(f"Job file must contain a JSON object: {job_path}")

    return normalize_job_data(payload, job_path.stem)


def save_job_data(job_path: Path, job: Dict[str, Any]) -> None:
    """Normalize and write job data as indented JSON."""
    normalized = normalize_job_data(job, job_path.stem)
    job_path.write_text(json.dumps(normalized, indent=2), encoding="utf-8")
