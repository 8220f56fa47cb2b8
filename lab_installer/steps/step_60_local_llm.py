from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, List

import requests

from ..config import lab_config_from_state
from ..lib import ollama
from ..lib.readiness import ensure_ready
from ..state_store import add_warning, record_decision

logger = logging.getLogger(__name__)


class LocalLLMStep:
    """Ollama runtime plus the models the LLM labs use.

    Optional for the rest of the lab: every failure here is a warning.
    """

    step_id = "60_local_llm"
    title = "Local LLM Runtime (Ollama)"

    def __init__(
        self,
        *,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._sleep = sleep
        self._clock = clock

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = lab_config_from_state(state)
        dry_run = cfg.dry_run

        if not cfg.llm_enabled:
            logger.info("Local LLM disabled in config; skipping")
            return state

        if ollama.is_installed():
            logger.info("Ollama already installed; skipping install")
        else:
            try:
                ollama.install(
                    cfg.platform_id,
                    install_script=cfg.llm_install_script,
                    winget_id=cfg.llm_winget_id,
                    dry_run=dry_run,
                )
            except RuntimeError as e:
                logger.warning("Ollama install failed: %s", e)
                add_warning(state, self.step_id, "ollama_install_failed", error=str(e))
                return state

        svc = ollama.OllamaService(
            cfg.platform_id,
            service_name=cfg.llm_service_name,
            api_base=cfg.llm_api_base,
            dry_run=dry_run,
        )
        try:
            svc.start()
        except RuntimeError as e:
            logger.warning("Starting Ollama failed: %s", e)
            add_warning(state, self.step_id, "ollama_start_failed", error=str(e))

        ready = ensure_ready(
            svc.is_ready,
            restart=svc.restart,
            interval_s=cfg.llm_poll_interval_s,
            max_wait_s=cfg.llm_max_wait_s,
            sleep=self._sleep,
            clock=self._clock,
            name="Ollama",
        )
        record_decision(state, "llm_ready", ready)
        if not ready:
            logger.warning("Ollama is not responding; LLM labs will not work until it is started manually")
            add_warning(state, self.step_id, "ollama_not_ready")
            return state

        try:
            present = svc.list_models()
        except requests.RequestException as e:
            logger.warning("Could not list installed models: %s", e)
            present = []

        pulled: List[str] = []
        for model in cfg.llm_models:
            if ollama.model_present(model, present):
                logger.info("Model %s already downloaded; skipping", model)
                continue
            logger.info("Pulling model %s (this may take several minutes)...", model)
            try:
                svc.pull(model)
                pulled.append(model)
            except RuntimeError as e:
                logger.warning("Pulling %s failed: %s", model, e)
                add_warning(state, self.step_id, "model_pull_failed", model=model)

        record_decision(state, "llm_models_pulled", pulled)
        return state
