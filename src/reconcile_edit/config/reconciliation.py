"""Settings for the edit pipeline itself."""

from __future__ import annotations

from dataclasses import dataclass

from reconcile_edit.domain.model import Datatype
from reconcile_edit.domain.ports import ITEM_ID_KIND

from .env import optional_env_var

DEFAULT_LABEL_LANGUAGE = "en"
DEFAULT_EDIT_SUMMARY = "Reconciled edit"


@dataclass(frozen=True, slots=True)
class ReconcileConfig:
    default_label_language: str = DEFAULT_LABEL_LANGUAGE
    identifying_datatype: str = Datatype.URL
    item_id_kind: str = ITEM_ID_KIND
    edit_summary: str = DEFAULT_EDIT_SUMMARY


def get_reconcile_config() -> ReconcileConfig:
    language = optional_env_var("RECONCILE_EDIT_LABEL_LANGUAGE", DEFAULT_LABEL_LANGUAGE)
    return ReconcileConfig(default_label_language=language or DEFAULT_LABEL_LANGUAGE)
