"""
StoredCollection model — one row per record collection.

Backs DatabaseRecordStore: a whole collection is read and replaced as a
single JSON document, so a save is atomic from any reader's point of view.
"""

from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils.translation import gettext_lazy as _

from depot.models.enums import Collection


class StoredCollection(models.Model):
    """Persisted record collection (stock, transfers, purchase orders, ...)."""

    name = models.CharField(
        max_length=50,
        unique=True,
        choices=Collection.choices,
        verbose_name=_('Collection'),
    )
    records = models.JSONField(
        default=list,
        encoder=DjangoJSONEncoder,
        blank=True,
        verbose_name=_('Records'),
    )
    updated_at = models.DateTimeField(auto_now=True, verbose_name=_('Updated at'))

    class Meta:
        verbose_name = _('Stored collection')
        verbose_name_plural = _('Stored collections')
        ordering = ['name']

    def __str__(self) -> str:
        return f"{self.name} ({len(self.records or [])} records)"
