from __future__ import annotations

import os
from datetime import datetime, timedelta
from textwrap import dedent

from airflow import DAG
from airflow.providers.docker.operators.docker import DockerOperator
from docker.types import Mount

DEFAULT_ARGS = {
    "owner": "data-platform",
    "depends_on_past": False,
    "email_on_failure": False,
    "email_on_retry": False,
    "retries": 0,
}

COMPOSE_PROJECT = os.environ.get("COMPOSE_PROJECT_NAME", "fred-weekly-dashboard")
DOCKER_NETWORK = f"{COMPOSE_PROJECT}_default"
API_IMAGE = os.environ.get("API_IMAGE", "fred-weekly-dashboard-api:latest")
DATA_MOUNT = Mount(target="/app/web/public/data", source="fred_weekly_data", type="volume")

ENV_KEYS = [
    "FRED_API_KEY",
    "FRED_DATA_DIR",
    "LOG_LEVEL",
]

ENVIRONMENT = {key: value for key in ENV_KEYS if (value := os.environ.get(key))}

QUALITY_CHECK_SCRIPT = dedent(
    """
from jobs.config import TRACKED_SERIES
from storage.snapshots import get_data_dir, verify_data_dir

problems = verify_data_dir(get_data_dir(), [s.series_id for s in TRACKED_SERIES])
assert not problems, "; ".join(problems)
print(f"{len(TRACKED_SERIES)} series verified")
    """
).strip()

with DAG(
    dag_id="fetch_fred_weekly",
    description="Run the weekly FRED fetch and verify the published files",
    schedule="0 6 * * 6",
    start_date=datetime(2024, 1, 6),
    catchup=False,
    default_args=DEFAULT_ARGS,
    max_active_runs=1,
    dagrun_timeout=timedelta(minutes=30),
    tags=["fred", "dashboard"],
) as dag:

    fetch_series = DockerOperator(
        task_id="fetch_weekly_series",
        image=API_IMAGE,
        command=["python", "-m", "jobs", "fetch-weekly"],
        docker_url="unix://var/run/docker.sock",
        auto_remove=True,
        network_mode=DOCKER_NETWORK,
        environment=ENVIRONMENT,
        mounts=[DATA_MOUNT],
        mount_tmp_dir=False,
        do_xcom_push=False,
    )

    verify_published_files = DockerOperator(
        task_id="verify_published_files",
        image=API_IMAGE,
        command=["python", "-c", QUALITY_CHECK_SCRIPT],
        docker_url="unix://var/run/docker.sock",
        auto_remove=True,
        network_mode=DOCKER_NETWORK,
        environment=ENVIRONMENT,
        mounts=[DATA_MOUNT],
        mount_tmp_dir=False,
        do_xcom_push=False,
    )

    fetch_series >> verify_published_files
