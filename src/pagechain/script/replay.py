"""Replay a ``ChainScript`` onto a ``Page`` builder."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pagechain.page import Page
from pagechain.queue import PendingResult
from pagechain.script.models import ChainScript, ChainStep, ChainStepType
from pagechain.serializer import JSFunction, PageScript

logger = logging.getLogger(__name__)


def apply_script(
    page: Page,
    script: ChainScript,
    artifacts_dir: Path | str | None = None,
) -> dict[str, PendingResult[Any]]:
    """Append every step of *script* to *page*, in order.

    Nothing runs here; call ``page.run()`` afterwards.

    Args:
        page: The builder to append to.
        script: The validated chain script.
        artifacts_dir: Base directory for relative screenshot / PDF paths.

    Returns:
        Pending results of ``evaluate_with_return`` steps, keyed by step
        ``name`` (``step_<index>`` when unnamed), in step order.

    Raises:
        SerializationError: If a step's arguments cannot be serialized.
    """
    results: dict[str, PendingResult[Any]] = {}
    base = Path(artifacts_dir) if artifacts_dir is not None else None

    for index, step in enumerate(script.steps):
        pending = _apply_step(page, step, base)
        if pending is not None:
            results[step.name or f"step_{index}"] = pending

    logger.debug("Script %s queued %d step(s)", script.name, len(script.steps))
    return results


def _apply_step(page: Page, step: ChainStep, base: Path | None) -> PendingResult[Any] | None:
    action = step.action

    if action is ChainStepType.GOTO:
        page.goto(step.url)
    elif action is ChainStepType.CLOSE_PAGE:
        page.close_page()
    elif action is ChainStepType.BACK:
        page.back(**step.options)
    elif action is ChainStepType.FORWARD:
        page.forward(**step.options)
    elif action is ChainStepType.REFRESH:
        page.refresh(**step.options)
    elif action is ChainStepType.WITH_USER_AGENT:
        page.with_user_agent(step.user_agent)
    elif action is ChainStepType.WITH_AUTH:
        page.with_auth(step.username, step.password)
    elif action is ChainStepType.SAVE_SCREENSHOT:
        page.save_screenshot(_artifact_path(step.path, base), **step.options)
    elif action is ChainStepType.SAVE_PDF:
        page.save_pdf(_artifact_path(step.path, base), **step.options)
    elif action is ChainStepType.WAIT_FOR_NAVIGATION:
        page.wait_for_navigation(timeout=step.timeout_ms)
    elif action is ChainStepType.WAIT_FOR_ELEMENT:
        page.wait_for_element(step.selector, timeout=step.timeout_ms)
    elif action is ChainStepType.WAIT_FOR_EVALUATION:
        page.wait_for_evaluation(_page_script(step), *step.args, timeout=step.timeout_ms)
    elif action is ChainStepType.EVALUATE:
        page.evaluate(_page_script(step), *step.args)
    elif action is ChainStepType.EVALUATE_WITH_RETURN:
        return page.evaluate_with_return(_page_script(step), *step.args)
    return None


def _page_script(step: ChainStep) -> PageScript:
    return JSFunction(step.script) if step.function else step.script


def _artifact_path(path: str, base: Path | None) -> str:
    target = Path(path)
    if base is not None and not target.is_absolute():
        target = base / target
    return str(target)
