"""Task tracking infrastructure settings."""

from pydantic import Field, model_validator

from infrastructure.configuration.base import InfrastructureSettings


class TaskSettings(InfrastructureSettings):
    """Task record storage, expiry and progress window configuration.

    Environment Variables:
        TASKS_BACKEND: Task store backend - 'memory' or 'dynamodb'
        TASKS_DYNAMODB_TABLE_NAME: DynamoDB table for task records
        TASKS_EXPIRY_DAYS: Days until a task is eligible for purge (default: 3)
        TASKS_PROGRESS_START: Progress reserved for setup (default: 10)
        TASKS_PROGRESS_END: Progress reached before finalization (default: 90)
        TASKS_STUCK_TIMEOUT_MINUTES: Running tasks idle this long are failed (default: 10)
        TASKS_CLEANUP_INTERVAL_MINUTES: Minutes between expired task purges (default: 60)
    """

    backend: str = Field(default="memory", alias="TASKS_BACKEND")
    dynamodb_table_name: str = Field(
        default="content-tasks", alias="TASKS_DYNAMODB_TABLE_NAME"
    )
    expiry_days: int = Field(default=3, alias="TASKS_EXPIRY_DAYS")
    progress_start: int = Field(default=10, alias="TASKS_PROGRESS_START")
    progress_end: int = Field(default=90, alias="TASKS_PROGRESS_END")
    stuck_timeout_minutes: int = Field(default=10, alias="TASKS_STUCK_TIMEOUT_MINUTES")
    cleanup_interval_minutes: int = Field(
        default=60, alias="TASKS_CLEANUP_INTERVAL_MINUTES"
    )

    @model_validator(mode="after")
    def validate_progress_window(self) -> "TaskSettings":
        if not 0 <= self.progress_start <= self.progress_end <= 100:
            raise ValueError(
                "TASKS_PROGRESS_START and TASKS_PROGRESS_END must satisfy "
                "0 <= start <= end <= 100"
            )
        return self
