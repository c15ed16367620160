"""
celery_worker.py
---------------
Defines the Celery app, the executor registry and the task that runs a node
over a batch of items on a worker. Executors register themselves through a
module-level register() hook in trestleflow.executors.
"""

import importlib
import logging
import os
from celery import Celery
from celery.signals import worker_init
from .config import BROKER_URL, RESULT_BACKEND, configure_logging

logger = logging.getLogger(__name__)

app = Celery("worker", broker=BROKER_URL, backend=RESULT_BACKEND)


# --- Plugin/dynamic executor registry ---
EXECUTOR_REGISTRY = {}


def register_executor(name, executor_cls):
    EXECUTOR_REGISTRY[name] = executor_cls


# Load all executors in executors/ as plugins (if they have register())
def load_executor_plugins():
    exec_dir = os.path.join(os.path.dirname(__file__), "executors")
    for fname in sorted(os.listdir(exec_dir)):
        if fname.endswith(".py") and not fname.startswith("__"):
            modname = f"trestleflow.executors.{fname[:-3]}"
            mod = importlib.import_module(modname)
            if hasattr(mod, "register"):
                mod.register(register_executor)


load_executor_plugins()


def get_executor(executor_name):
    if executor_name in EXECUTOR_REGISTRY:
        return EXECUTOR_REGISTRY[executor_name]()
    raise ValueError(f"Unknown executor: {executor_name}")


# Node runs are never retried: a failed item is reported, not re-sent.
@app.task
def run_node_task(executor_name, items, parameters, continue_on_fail=False, credential=None):
    from .orchestrator import run_node

    results = run_node(executor_name, items, parameters, continue_on_fail=continue_on_fail, credential=credential)
    return [r.to_dict() for r in results]


# --- Signals ---

@worker_init.connect
def worker_ready(sender=None, **kwargs):
    """Configure logging once the worker process is up."""
    configure_logging()
    logger.info("Worker initialized with executors: %s", ", ".join(sorted(EXECUTOR_REGISTRY)))
