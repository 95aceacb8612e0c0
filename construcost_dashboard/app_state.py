"""Application wiring.

Services are built once per browser session and kept in Streamlit's session
state; pages receive them from :func:`get_services` instead of reaching for
module-level singletons.  Everything here takes the session-state mapping as
an argument so it can be exercised with a plain ``dict``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import MutableMapping, Optional

from .config import LOG_LEVEL, STORE_DIR, ensure_data_directories
from .extraction import DocumentExtractionClient
from .form_session import BudgetFormSession
from .image_editing import ImageTransformClient
from .logging_config import configure_logging
from .models import Budget
from .persistent_store import JsonKeyValueStore
from .repository import BudgetRepository, SettingsRepository

logger = logging.getLogger(__name__)

SERVICES_KEY = 'construcost_services'
FORM_KEY = 'budget_form_session'
# Part of every form widget key; bumping it makes the widgets re-read the draft
FORM_REVISION_KEY = 'budget_form_rev'


@dataclass
class Services:
    store: JsonKeyValueStore
    budgets: BudgetRepository
    settings: SettingsRepository
    extraction: DocumentExtractionClient
    images: ImageTransformClient


def build_services(store_dir: Optional[Path] = None) -> Services:
    store = JsonKeyValueStore(store_dir or STORE_DIR)
    return Services(
        store=store,
        budgets=BudgetRepository(store),
        settings=SettingsRepository(store),
        extraction=DocumentExtractionClient(),
        images=ImageTransformClient(),
    )


def get_services(session_state: MutableMapping) -> Services:
    """Return the session's services, building them on first use."""
    services = session_state.get(SERVICES_KEY)
    if services is None:
        configure_logging(LOG_LEVEL)
        ensure_data_directories()
        services = build_services()
        session_state[SERVICES_KEY] = services
        logger.info("Services initialised (store: %s)", services.store.root)
    return services


def open_form(session_state: MutableMapping, services: Services,
              budget: Optional[Budget] = None) -> BudgetFormSession:
    """Start a create (``budget=None``) or edit session, replacing any open one."""
    form = BudgetFormSession(services.budgets, budget)
    session_state[FORM_KEY] = form
    bump_form_revision(session_state)
    return form


def bump_form_revision(session_state: MutableMapping) -> int:
    revision = session_state.get(FORM_REVISION_KEY, 0) + 1
    session_state[FORM_REVISION_KEY] = revision
    return revision


def current_form(session_state: MutableMapping) -> Optional[BudgetFormSession]:
    return session_state.get(FORM_KEY)


def close_form(session_state: MutableMapping) -> None:
    session_state.pop(FORM_KEY, None)
