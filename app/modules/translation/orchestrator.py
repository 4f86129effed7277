"""Bulk translation orchestrator.

Translates one resource into many locales as a tracked Task:

    1. partition fields into short (batched) and long (per-locale) sets
    2. fetch the digest map of the resource
    3. short step: one provider call for every locale, then one remote write
       per (locale, field); the whole step counts as one unit of progress
    4. long steps: one provider call per locale for all long fields; one unit
       of progress per locale
    5. complete the task with a partial-success summary, or fail it when no
       locale produced a translation

A failing step is logged and recorded; the remaining steps still run.
"""

import contextvars
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from infrastructure.logging import bind_request_context, get_module_logger
from infrastructure.operations import classify_provider_error, is_quota_error
from infrastructure.tasks import (
    Task,
    TaskLifecycleManager,
    TaskStatus,
    TaskType,
    calculate_progress,
)
from infrastructure.tasks.progress import DEFAULT_PROGRESS_END, DEFAULT_PROGRESS_START
from integrations.shopify import ContentGateway, RemoteGatewayError
from modules.translation.fields import (
    LONG_FIELDS,
    SHORT_FIELDS,
    LocaleBatchPlan,
    partition_fields,
    translation_key,
)
from modules.translation.mirror import TranslationMirror, TranslationMirrorRecord
from modules.translation.providers import TranslationProvider
from modules.translation.remote import fetch_digest_map, register_translation

logger = get_module_logger()

NO_FIELDS_MESSAGE = "No fields to translate"
NO_TARGET_LOCALES_MESSAGE = "No target locales to translate"
NOTHING_TRANSLATED_MESSAGE = (
    "No locales were successfully translated. "
    "Check AI provider settings and API credits."
)
MAX_CONCURRENCY = 5


@dataclass
class TranslationReport:
    """Outcome of one orchestrator run."""

    task_id: str
    status: TaskStatus
    translations: Dict[str, Any] = field(default_factory=dict)
    processed_locales: List[str] = field(default_factory=list)
    total_locales: int = 0
    used_batch: bool = False
    written: int = 0
    skipped_writes: int = 0
    write_errors: int = 0
    failed_steps: List[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class _RunState:
    """Mutable bookkeeping shared by the steps of one run."""

    task_id: str
    shop: str
    resource_id: str
    source_locale: str
    total_steps: int
    digest_map: Dict[str, str]
    report: TranslationReport
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class BulkTranslationOrchestrator:
    """Drives bulk translation runs and tracks them as tasks.

    Args:
        task_manager: Lifecycle manager owning the task records
        gateway: Remote content gateway for the shop being processed
        provider: AI translation provider
        mirror: Optional local mirror updated after each accepted write
        short_fields: Fields translated in one batched call
        long_fields: Fields translated per locale
        max_concurrency: Locales processed in parallel in the long phase (1-5)
        progress_start: Progress reported once the task is queued
        progress_end: Progress reported after the last step
    """

    def __init__(
        self,
        task_manager: TaskLifecycleManager,
        gateway: ContentGateway,
        provider: TranslationProvider,
        mirror: Optional[TranslationMirror] = None,
        short_fields: Iterable[str] = SHORT_FIELDS,
        long_fields: Iterable[str] = LONG_FIELDS,
        max_concurrency: int = 1,
        progress_start: int = DEFAULT_PROGRESS_START,
        progress_end: int = DEFAULT_PROGRESS_END,
    ) -> None:
        if not 1 <= max_concurrency <= MAX_CONCURRENCY:
            raise ValueError(f"max_concurrency must be between 1 and {MAX_CONCURRENCY}")
        self.task_manager = task_manager
        self.gateway = gateway
        self.provider = provider
        self.mirror = mirror
        self.short_fields = tuple(short_fields)
        self.long_fields = tuple(long_fields)
        self.max_concurrency = max_concurrency
        self.progress_start = progress_start
        self.progress_end = progress_end

    # Bulk: many fields, many locales

    def run_bulk_translation(
        self,
        shop: str,
        resource_id: str,
        fields: Mapping[str, Optional[str]],
        source_locale: str,
        target_locales: List[str],
    ) -> str:
        """Translate ``fields`` into ``target_locales`` and return the task id."""
        task = self.create_bulk_task(shop, resource_id, fields, target_locales)
        self.execute_bulk_translation(
            task.id, shop, resource_id, fields, source_locale, target_locales
        )
        return task.id

    def create_bulk_task(
        self,
        shop: str,
        resource_id: str,
        fields: Mapping[str, Optional[str]],
        target_locales: List[str],
    ) -> Task:
        plan = self._plan(fields, target_locales)
        return self.task_manager.create(
            shop,
            TaskType.BULK_TRANSLATION,
            resource_id,
            estimated_work=plan.total_steps,
        )

    def execute_bulk_translation(
        self,
        task_id: str,
        shop: str,
        resource_id: str,
        fields: Mapping[str, Optional[str]],
        source_locale: str,
        target_locales: List[str],
    ) -> TranslationReport:
        """Run a bulk translation for an existing task."""
        plan = self._plan(fields, target_locales)
        report = TranslationReport(
            task_id=task_id,
            status=TaskStatus.PENDING,
            total_locales=len(plan.target_locales),
            used_batch=plan.used_batch,
        )

        with bind_request_context(shop=shop, task_id=task_id, resource_id=resource_id):
            if plan.is_empty:
                return self._fail(report, NO_FIELDS_MESSAGE)
            if not plan.target_locales:
                return self._fail(report, NO_TARGET_LOCALES_MESSAGE)

            logger.info(
                "bulk_translation_started",
                short_fields=sorted(plan.short_fields),
                long_fields=sorted(plan.long_fields),
                target_locales=plan.target_locales,
                total_steps=plan.total_steps,
            )

            try:
                state = self._start(
                    task_id, shop, resource_id, source_locale, plan.total_steps, report
                )
                if state is None:
                    return report

                if plan.short_fields:
                    self._run_short_step(state, plan)
                if plan.long_fields:
                    self._run_long_steps(state, plan)
            except Exception as e:  # pylint: disable=broad-except
                logger.exception("bulk_translation_aborted", error=str(e))
                return self._fail(report, f"Bulk translation aborted: {e}")

            report.translations = {
                locale: dict(values) for locale, values in plan.translations.items()
            }
            report.processed_locales = plan.processed_locales()
            return self._finish(
                report,
                {
                    "translations": report.translations,
                    "processed_locales": len(report.processed_locales),
                    "total_locales": report.total_locales,
                    "used_batch": report.used_batch,
                },
            )

    def _run_short_step(self, state: _RunState, plan: LocaleBatchPlan) -> None:
        try:
            batch = self.provider.translate_batch(
                dict(plan.short_fields), state.source_locale, list(plan.target_locales)
            )
        except Exception as e:  # pylint: disable=broad-except
            self._record_step_failure(state, "short_fields", e)
            self._advance(state, plan, False)
            return

        succeeded = False
        for locale in plan.target_locales:
            values = (batch or {}).get(locale) or {}
            for field_name in plan.short_fields:
                value = values.get(field_name)
                if not value:
                    logger.warning(
                        "translation_missing_in_batch",
                        locale=locale,
                        field=field_name,
                    )
                    continue
                plan.record(locale, field_name, value)
                succeeded = True
                self._write(state, field_name, value, locale)
        self._advance(state, plan, succeeded)

    def _run_long_steps(self, state: _RunState, plan: LocaleBatchPlan) -> None:
        if self.max_concurrency == 1 or len(plan.target_locales) == 1:
            for locale in plan.target_locales:
                self._run_long_step(state, plan, locale)
            return

        workers = min(self.max_concurrency, len(plan.target_locales))
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="translation"
        ) as executor:
            futures = [
                executor.submit(
                    contextvars.copy_context().run,
                    self._run_long_step,
                    state,
                    plan,
                    locale,
                )
                for locale in plan.target_locales
            ]
            for future in futures:
                future.result()

    def _run_long_step(
        self, state: _RunState, plan: LocaleBatchPlan, locale: str
    ) -> None:
        succeeded = False
        try:
            values = self.provider.translate_single_locale(
                dict(plan.long_fields), locale, state.source_locale
            )
            for field_name in plan.long_fields:
                value = (values or {}).get(field_name)
                if not value:
                    logger.warning(
                        "translation_missing_for_locale",
                        locale=locale,
                        field=field_name,
                    )
                    continue
                plan.record(locale, field_name, value)
                succeeded = True
                self._write(state, field_name, value, locale)
        except Exception as e:  # pylint: disable=broad-except
            self._record_step_failure(state, locale, e)
        self._advance(state, plan, succeeded)

    # Single field: one field, many locales

    def translate_field_to_all_locales(
        self,
        shop: str,
        resource_id: str,
        field_name: str,
        source_text: str,
        source_locale: str,
        target_locales: List[str],
    ) -> str:
        """Translate one field into every target locale and return the task id.

        Short fields use one batched provider call; long fields one call per
        locale. Progress advances once per locale in both cases.
        """
        task = self.create_field_task(shop, resource_id, field_name, target_locales)
        self.execute_field_translation(
            task.id,
            shop,
            resource_id,
            field_name,
            source_text,
            source_locale,
            target_locales,
        )
        return task.id

    def create_field_task(
        self,
        shop: str,
        resource_id: str,
        field_name: str,
        target_locales: List[str],
    ) -> Task:
        return self.task_manager.create(
            shop,
            TaskType.BULK_TRANSLATION,
            resource_id,
            field_type=field_name,
            estimated_work=len(target_locales),
        )

    def execute_field_translation(
        self,
        task_id: str,
        shop: str,
        resource_id: str,
        field_name: str,
        source_text: str,
        source_locale: str,
        target_locales: List[str],
    ) -> TranslationReport:
        used_batch = field_name in self.short_fields
        report = TranslationReport(
            task_id=task_id,
            status=TaskStatus.PENDING,
            total_locales=len(target_locales),
            used_batch=used_batch,
        )

        with bind_request_context(
            shop=shop, task_id=task_id, resource_id=resource_id, field=field_name
        ):
            if field_name not in self.short_fields + self.long_fields:
                return self._fail(report, f"Unknown field type: {field_name}")
            if not source_text or not source_text.strip():
                return self._fail(report, NO_FIELDS_MESSAGE)
            if not target_locales:
                return self._fail(report, NO_TARGET_LOCALES_MESSAGE)

            plan = LocaleBatchPlan(
                short_fields={field_name: source_text} if used_batch else {},
                long_fields={} if used_batch else {field_name: source_text},
                target_locales=list(target_locales),
            )

            try:
                state = self._start(
                    task_id,
                    shop,
                    resource_id,
                    source_locale,
                    len(target_locales),
                    report,
                )
                if state is None:
                    return report

                if used_batch:
                    self._run_field_batch(state, plan, field_name, source_text)
                else:
                    self._run_long_steps(state, plan)
            except Exception as e:  # pylint: disable=broad-except
                logger.exception("field_translation_aborted", error=str(e))
                return self._fail(report, f"Field translation aborted: {e}")

            report.processed_locales = plan.processed_locales()
            report.translations = {
                locale: plan.translations[locale][field_name]
                for locale in report.processed_locales
            }
            return self._finish(
                report,
                {
                    "translations": report.translations,
                    "field_type": field_name,
                    "processed_locales": len(report.processed_locales),
                    "total_locales": report.total_locales,
                    "used_batch": used_batch,
                },
            )

    def _run_field_batch(
        self,
        state: _RunState,
        plan: LocaleBatchPlan,
        field_name: str,
        source_text: str,
    ) -> None:
        try:
            batch = self.provider.translate_batch(
                {field_name: source_text},
                state.source_locale,
                list(plan.target_locales),
            )
        except Exception as e:  # pylint: disable=broad-except
            self._record_step_failure(state, "short_fields", e)
            for _ in plan.target_locales:
                self._advance(state, plan, False)
            return

        for locale in plan.target_locales:
            value = ((batch or {}).get(locale) or {}).get(field_name)
            if value:
                plan.record(locale, field_name, value)
                self._write(state, field_name, value, locale)
            else:
                logger.warning(
                    "translation_missing_in_batch", locale=locale, field=field_name
                )
            self._advance(state, plan, bool(value))

    # Shared steps

    def _plan(
        self, fields: Mapping[str, Optional[str]], target_locales: List[str]
    ) -> LocaleBatchPlan:
        return partition_fields(
            fields, target_locales, self.short_fields, self.long_fields
        )

    def _start(
        self,
        task_id: str,
        shop: str,
        resource_id: str,
        source_locale: str,
        total_steps: int,
        report: TranslationReport,
    ) -> Optional[_RunState]:
        self.task_manager.mark_queued(task_id, self.progress_start, total=total_steps)
        try:
            digest_map = fetch_digest_map(self.gateway, resource_id)
        except RemoteGatewayError as e:
            logger.error("translatable_content_fetch_failed", error=str(e))
            self._fail(report, f"Failed to load translatable content: {e}")
            return None

        return _RunState(
            task_id=task_id,
            shop=shop,
            resource_id=resource_id,
            source_locale=source_locale,
            total_steps=total_steps,
            digest_map=digest_map,
            report=report,
        )

    def _write(
        self, state: _RunState, field_name: str, value: str, locale: str
    ) -> None:
        """Write one translation remotely and mirror it.

        Remote failures are counted and logged; they never end the step.
        """
        key = translation_key(field_name)
        digest = state.digest_map.get(key)
        if not digest:
            logger.info("translation_write_skipped_no_digest", key=key, locale=locale)
            with state.lock:
                state.report.skipped_writes += 1
            return

        try:
            register_translation(
                self.gateway, state.resource_id, key, value, locale, digest
            )
        except Exception as e:  # pylint: disable=broad-except
            with state.lock:
                state.report.write_errors += 1
            logger.error(
                "translation_write_failed",
                key=key,
                locale=locale,
                error=str(e),
                transient=isinstance(e, RemoteGatewayError)
                and e.classify().is_transient,
            )
            return

        with state.lock:
            state.report.written += 1
        if self.mirror is None:
            return
        try:
            self.mirror.upsert(
                TranslationMirrorRecord(
                    shop=state.shop,
                    resource_id=state.resource_id,
                    key=key,
                    locale=locale,
                    value=value,
                    digest=digest,
                )
            )
        except Exception as e:  # pylint: disable=broad-except
            logger.error(
                "translation_mirror_write_failed", key=key, locale=locale, error=str(e)
            )

    def _advance(
        self, state: _RunState, plan: LocaleBatchPlan, succeeded: bool
    ) -> None:
        with state.lock:
            done = plan.finish_step(succeeded)
            progress = calculate_progress(
                done, state.total_steps, self.progress_start, self.progress_end
            )
            self.task_manager.set_progress(
                state.task_id, progress, processed=done, total=state.total_steps
            )

    def _record_step_failure(
        self, state: _RunState, step: str, error: Exception
    ) -> None:
        message = str(error)
        with state.lock:
            state.report.failed_steps.append(step)
        classified = classify_provider_error(error)
        if is_quota_error(message):
            logger.error(
                "quota_exceeded",
                step=step,
                error=message,
                error_code=classified.error_code,
            )
        else:
            logger.error(
                "translation_step_failed",
                step=step,
                error=message,
                error_type=type(error).__name__,
            )

    def _fail(self, report: TranslationReport, message: str) -> TranslationReport:
        self.task_manager.fail(report.task_id, message)
        report.status = TaskStatus.FAILED
        report.error = message
        logger.warning("translation_task_failed", error=message)
        return report

    def _finish(
        self, report: TranslationReport, summary: Dict[str, Any]
    ) -> TranslationReport:
        if not report.processed_locales:
            return self._fail(report, NOTHING_TRANSLATED_MESSAGE)

        self.task_manager.complete(report.task_id, summary)
        report.status = TaskStatus.COMPLETED
        logger.info(
            "translation_task_completed",
            processed_locales=len(report.processed_locales),
            total_locales=report.total_locales,
            written=report.written,
            skipped_writes=report.skipped_writes,
            write_errors=report.write_errors,
            failed_steps=report.failed_steps,
        )
        return report
