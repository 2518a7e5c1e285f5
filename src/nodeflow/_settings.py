"""Execution settings shared by compiled graphs and the CLI."""

from pydantic import BaseModel, ConfigDict, PositiveFloat, PositiveInt


class EngineSettings(BaseModel):
    """Settings for running a compiled graph.

    Attributes:
        max_workers: Size of the worker pool for parallel nodes.
            None uses the thread pool's own default.
        task_timeout: Seconds to wait for a parallel node once its value is needed.
            None waits indefinitely.
        thread_name_prefix: Name prefix of the worker threads.

    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_workers: PositiveInt | None = None
    task_timeout: PositiveFloat | None = None
    thread_name_prefix: str = "nodeflow"
