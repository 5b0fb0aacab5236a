"""Section scheduler: drives a plan through gating, segmentation and generation.

Priority-1 sections run to completion before any priority-2 section starts.
At most max_concurrent_sections sections are in flight, and every external
call (judgment or generation attempt) holds one of max_concurrency call slots.
The run-wide artifact quota lives in RunState; a unit that finds it spent is
skipped without evaluator or generation calls.

Failures are isolated per section and reported as section_error events. Only
AuthFailureError escapes: it cancels the remaining sections and aborts the run.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Literal, Optional

from core.generation import (
    Artifact,
    AuthFailureError,
    DiagramGenerator,
    GenerationError,
    RateLimitedError,
    SubmitOptions,
)
from workflows.shared.llm_utils import JudgeOptions, JudgmentClient
from workflows.shared.retry_utils import Sleep, linear_delay, with_retry
from workflows.shared.text_utils import truncate
from workflows.visualize.config import VisualizeConfig
from workflows.visualize.events import DiagramEvent, SectionErrorEvent, StreamEmitter
from workflows.visualize.nodes import (
    PreparedSection,
    evaluate_content,
    prepare_section,
    segment_content,
)
from workflows.visualize.state import (
    DocumentInput,
    Plan,
    PlanItem,
    RunState,
    Section,
    SectionOutcome,
)

logger = logging.getLogger(__name__)

QUOTA_EXHAUSTED = "quota exhausted"

UnitStatus = Literal["done", "skipped", "failed"]


@dataclass
class RunContext:
    """Collaborators for one run."""

    judge: JudgmentClient
    generator: DiagramGenerator
    emitter: StreamEmitter
    config: VisualizeConfig = field(default_factory=VisualizeConfig)
    sleep: Optional[Sleep] = None


@dataclass
class _UnitResult:
    status: UnitStatus
    artifact: Optional[Artifact] = None
    error: Optional[str] = None


class _SlottedJudge:
    """Judgment client that holds a call slot for the duration of each call."""

    def __init__(self, judge: JudgmentClient, run_state: RunState):
        self._judge = judge
        self._run_state = run_state

    async def judge(
        self,
        system_prompt: str,
        user_message: str,
        options: Optional[JudgeOptions] = None,
    ) -> str:
        async with self._run_state.call_slot():
            return await self._judge.judge(system_prompt, user_message, options)


class SectionScheduler:
    """Executes one plan against one document.

    Usage:
        scheduler = SectionScheduler(RunContext(judge, generator, emitter, config))
        outcomes = await scheduler.run(plan, document)
    """

    def __init__(self, context: RunContext, run_state: RunState | None = None):
        self.context = context
        self.config = context.config
        self.run_state = run_state or RunState(
            max_artifacts=self.config.max_artifacts,
            max_concurrency=self.config.max_concurrency,
        )
        self._judge = _SlottedJudge(context.judge, self.run_state)
        self._section_slots = asyncio.Semaphore(self.config.max_concurrent_sections)

    async def run(self, plan: Plan, document: DocumentInput) -> list[SectionOutcome]:
        """Process every admitted plan item and return one outcome per item.

        Raises:
            AuthFailureError: The generation service rejected credentials
        """
        sections = {s.id: s for s in document.sections}
        admitted = plan.admitted_items
        outcomes: list[SectionOutcome] = []

        for priority in (1, 2):
            batch = [item for item in admitted if item.priority == priority]
            if not batch:
                continue
            logger.info(f"Starting priority {priority} batch: {len(batch)} sections")
            outcomes.extend(await self._run_batch(batch, sections))

        logger.info(
            f"Run finished: {self.run_state.total_artifacts_emitted}/"
            f"{self.run_state.max_artifacts} artifacts, {len(outcomes)} sections"
        )
        return outcomes

    async def _run_batch(
        self, items: list[PlanItem], sections: dict[str, Section]
    ) -> list[SectionOutcome]:
        tasks = [
            asyncio.create_task(self._guarded_section(item, sections.get(item.section_id)))
            for item in items
        ]
        try:
            return list(await asyncio.gather(*tasks))
        except AuthFailureError:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _guarded_section(
        self, item: PlanItem, section: Optional[Section]
    ) -> SectionOutcome:
        async with self._section_slots:
            try:
                if section is None:
                    return self._finish(
                        item, "errored", "failed", f"Section {item.section_id} not found"
                    )
                return await self._process_section(item, section)
            except AuthFailureError:
                raise
            except Exception as e:
                logger.exception(f"Section {item.section_id} failed: {e}")
                return self._finish(item, "errored", "failed", f"Section failed: {e}")

    def _finish(
        self,
        item: PlanItem,
        status: Literal["rejected", "errored", "skipped"],
        outcome: Literal["rejected", "failed", "skipped"],
        reason: str,
    ) -> SectionOutcome:
        self.context.emitter.emit(
            SectionErrorEvent(
                section_id=item.section_id,
                heading=item.heading,
                reason=reason,
                outcome=outcome,
            )
        )
        logger.info(f"Section {item.section_id} {status}: {reason}")
        return SectionOutcome(
            section_id=item.section_id, heading=item.heading, status=status, reason=reason
        )

    async def _process_section(self, item: PlanItem, section: Section) -> SectionOutcome:
        if self.run_state.quota_exhausted:
            return self._finish(item, "skipped", "skipped", QUOTA_EXHAUSTED)

        prepared = prepare_section(section)
        context = f"Section: {item.heading}"

        evaluation = await evaluate_content(prepared.text, context, self._judge, self.config)
        if not evaluation.worthy:
            return self._finish(
                item, "rejected", "rejected", f"Content rejected: {evaluation.reason}"
            )

        segments = await segment_content(
            prepared.text,
            context,
            self._judge,
            self.config,
            section_id=section.id,
            archetype=item.diagram_archetype,
        )
        cap = self.config.max_segments_per_section
        if len(segments) > cap:
            logger.info(
                f"Section {section.id}: processing {cap} of {len(segments)} segments"
            )
            segments = segments[:cap]

        options = SubmitOptions(
            style_id=self.config.style_for(prepared.content_type),
            context_before=prepared.context_before or None,
            context_after=prepared.context_after or None,
        )

        artifacts: list[Artifact] = []
        rejected = skipped = 0
        errors: list[str] = []

        for segment in segments:
            if self.run_state.quota_exhausted:
                skipped += 1
                continue
            evaluation = await evaluate_content(
                segment.text, f"{context} / {segment.title}", self._judge, self.config
            )
            if not evaluation.worthy:
                rejected += 1
                continue
            result = await self._generate_unit(
                segment.text, options, item, segment.id, segment.title
            )
            if result.status == "done":
                artifacts.append(result.artifact)
            elif result.status == "skipped":
                skipped += 1
            else:
                errors.append(result.error or "unknown error")

        if artifacts:
            return SectionOutcome(
                section_id=item.section_id,
                heading=item.heading,
                status="done",
                artifacts=artifacts,
            )

        logger.debug(
            f"Section {section.id}: {rejected} rejected, {skipped} skipped, "
            f"{len(errors)} failed of {len(segments)} segments"
        )
        return await self._fallback(item, prepared, options, len(segments), rejected, errors)

    async def _fallback(
        self,
        item: PlanItem,
        prepared: PreparedSection,
        options: SubmitOptions,
        segment_count: int,
        rejected: int,
        errors: list[str],
    ) -> SectionOutcome:
        """One attempt from the whole section text after zero segment artifacts."""
        if self.run_state.quota_exhausted:
            return self._finish(item, "skipped", "skipped", QUOTA_EXHAUSTED)

        logger.info(f"Section {item.section_id}: no segment artifacts, trying full text")
        text = truncate(prepared.text.strip(), self.config.generation_max_chars)
        result = await self._generate_unit(text, options, item, None, item.heading)

        if result.status == "done":
            return SectionOutcome(
                section_id=item.section_id,
                heading=item.heading,
                status="done",
                artifacts=[result.artifact],
            )
        if result.status == "skipped":
            return self._finish(item, "skipped", "skipped", QUOTA_EXHAUSTED)

        if segment_count and rejected == segment_count:
            return self._finish(
                item,
                "rejected",
                "rejected",
                f"All content rejected; fallback generation failed: {result.error}",
            )
        detail = "; ".join(errors + [f"fallback: {result.error}"])
        return self._finish(item, "errored", "failed", f"Generation failed: {detail}")

    async def _generate_unit(
        self,
        text: str,
        options: SubmitOptions,
        item: PlanItem,
        segment_id: Optional[str],
        title: str,
    ) -> _UnitResult:
        """Reserve quota, generate with rate-limit retries, then commit and emit."""
        if not await self.run_state.try_reserve():
            return _UnitResult(status="skipped")

        committed = False
        label = f"{item.section_id}/{segment_id or 'section'}"

        async def attempt() -> Artifact:
            async with self.run_state.call_slot():
                return await self.context.generator.generate(
                    text, options, item.section_id, segment_id
                )

        try:
            artifact = await with_retry(
                attempt,
                retry_on=RateLimitedError,
                max_retries=self.config.max_retries,
                delay=linear_delay(self.config.retry_base_delay),
                sleep=self.context.sleep,
                label=f"Generation {label}",
            )
        except AuthFailureError:
            raise
        except GenerationError as e:
            logger.warning(f"Generation {label} failed: {e.message}")
            return _UnitResult(status="failed", error=e.message)
        else:
            await self.run_state.commit()
            committed = True
            self.context.emitter.emit(
                DiagramEvent(
                    section_id=item.section_id,
                    segment_id=segment_id,
                    title=title,
                    artifact=artifact.content,
                )
            )
            return _UnitResult(status="done", artifact=artifact)
        finally:
            if not committed:
                await self.run_state.release()
