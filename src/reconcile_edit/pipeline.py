"""Edit pipeline: read, resolve, merge, save.

The pipeline composes its stages but does not choose adapters. Every structural check
on both payloads runs before the first collaborator call, and at most one write is
attempted per run.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from reconcile_edit.domain.edit_strategy import PutStrategy
from reconcile_edit.domain.reconciliation import ReconciliationService
from reconcile_edit.input.directive import DirectiveReader
from reconcile_edit.input.normalizer import InputNormalizer

if TYPE_CHECKING:
    from reconcile_edit.config.reconciliation import ReconcileConfig
    from reconcile_edit.domain.edit_strategy import EditStrategy
    from reconcile_edit.domain.model import Draft, Item, ItemId
    from reconcile_edit.domain.ports import (
        PropertyDatatypeLookup,
        PropertyLabelResolver,
        RecordRepositories,
        RecordStore,
        RevisionId,
    )
    from reconcile_edit.domain.reconciliation import Base

log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class EditOutcome:
    item_id: ItemId
    revision_id: RevisionId
    created: bool
    record: Item


@dataclass(slots=True)
class EditPipeline:
    """Run one reconciliation edit from raw payloads to a saved record."""

    normalizer: InputNormalizer
    reconciliation: ReconciliationService
    store: RecordStore
    directives: DirectiveReader = field(default_factory=DirectiveReader)
    strategy: EditStrategy = field(default_factory=PutStrategy)
    summary: str = "Reconciled edit"

    def run(self, entity_payload: object, directive_payload: object) -> EditOutcome:
        directive_input = self.directives.read(directive_payload)
        entity_input = self.normalizer.read(entity_payload)

        directive = self.directives.resolve(directive_input, self.normalizer)
        draft = self.normalizer.build(entity_input, directive.identifying_property)

        base = self.reconciliation.resolve(draft.identifying_property, draft.identifying_value)
        record = self.strategy.apply(base, draft)
        result = self.store.save(
            record,
            base_revision_id=base.revision_id,
            summary=self._summary_for(draft, base),
        )
        return EditOutcome(
            item_id=result.item_id,
            revision_id=result.revision_id,
            created=result.created,
            record=record,
        )

    def _summary_for(self, draft: Draft, base: Base) -> str:
        return (
            f"{self.summary} ({base.status}): "
            f"{draft.identifying_property}={draft.identifying_value}"
        )


def build_pipeline(
    repositories: RecordRepositories,
    *,
    config: ReconcileConfig,
    datatypes: PropertyDatatypeLookup | None = None,
    labels: PropertyLabelResolver | None = None,
) -> EditPipeline:
    """Wire a pipeline over ``repositories``.

    ``datatypes`` and ``labels`` replace the repositories' own property ports, e.g.
    with a remote Wikibase property source.
    """

    return EditPipeline(
        normalizer=InputNormalizer(
            datatypes=datatypes or repositories.datatypes,
            labels=labels or repositories.labels,
            default_label_language=config.default_label_language,
        ),
        reconciliation=ReconciliationService(
            links=repositories.links,
            entity_ids=repositories.entity_ids,
            revisions=repositories.revisions,
            id_generator=repositories.id_generator,
            item_id_kind=config.item_id_kind,
        ),
        store=repositories.records,
        directives=DirectiveReader(required_datatype=config.identifying_datatype),
        summary=config.edit_summary,
    )
