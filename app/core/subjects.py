"""
Typed references to domain objects of any kind.

A SubjectRef is a ``{kind, id}`` pair naming one row of a registered model,
e.g. ``SubjectRef("conversation", 42)``. It lets generic infrastructure (the
activity log) point at conversations, messages or users without a generic
foreign key. Each app registers its kinds in ``AppConfig.ready()``:

    from core.subjects import subjects

    class ChatConfig(AppConfig):
        def ready(self):
            subjects.register("conversation", self.get_model("Conversation"))

and resolution goes through the explicit per-kind table:

    ref = subjects.ref_for(conversation)     # SubjectRef("conversation", 42)
    obj = subjects.resolve(ref)              # Conversation or None
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.exceptions import ValidationError

if TYPE_CHECKING:
    from django.db import models


@dataclass(frozen=True)
class SubjectRef:
    """Reference to a single object of a registered kind."""

    kind: str
    id: int

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"


class SubjectRegistry:
    """Maps subject kinds to the models that back them."""

    def __init__(self) -> None:
        self._models: dict[str, type[models.Model]] = {}

    def register(self, kind: str, model: type[models.Model]) -> None:
        """
        Register model as the backing table for kind.

        Re-registering the same pair is a no-op so that ready() may run
        more than once (test runners, autoreload).
        """
        existing = self._models.get(kind)
        if existing is not None and existing is not model:
            raise ValueError(
                f"Subject kind {kind!r} is already registered to {existing.__name__}"
            )
        self._models[kind] = model

    @property
    def kinds(self) -> list[str]:
        return sorted(self._models)

    def model_for(self, kind: str) -> type[models.Model]:
        try:
            return self._models[kind]
        except KeyError:
            raise ValidationError(
                f"Unknown subject kind: {kind}",
                error_code="UNKNOWN_SUBJECT_KIND",
                details={"kind": kind},
            ) from None

    def kind_for(self, instance: models.Model) -> str:
        for kind, model in self._models.items():
            if isinstance(instance, model):
                return kind
        raise ValidationError(
            f"{instance.__class__.__name__} is not a registered subject",
            error_code="UNKNOWN_SUBJECT_KIND",
        )

    def ref_for(self, instance: models.Model) -> SubjectRef:
        return SubjectRef(kind=self.kind_for(instance), id=instance.pk)

    def resolve(self, ref: SubjectRef) -> models.Model | None:
        """Fetch the object ref points at, or None if it no longer exists."""
        model = self.model_for(ref.kind)
        return model._default_manager.filter(pk=ref.id).first()


subjects = SubjectRegistry()
