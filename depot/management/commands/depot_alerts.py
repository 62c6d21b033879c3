"""
Management command to list current stock alerts.

Usage:
    python manage.py depot_alerts
    python manage.py depot_alerts --severity critical
    python manage.py depot_alerts --status snoozed --warehouse 2
    python manage.py depot_alerts --all
"""

from django.core.management.base import BaseCommand, CommandError

from depot.exceptions import DepotError
from depot.models.enums import AlertSeverity, AlertStatus
from depot.service import get_depot


class Command(BaseCommand):
    """List stock alerts command."""

    help = 'Lists current low-stock and overstock alerts'

    def add_arguments(self, parser):
        parser.add_argument(
            '--severity',
            choices=AlertSeverity.values,
            help='Only alerts of this severity',
        )
        status = parser.add_mutually_exclusive_group()
        status.add_argument(
            '--status',
            choices=AlertStatus.values,
            default=AlertStatus.ACTIVE,
            help='Only alerts in this status (default: active)',
        )
        status.add_argument(
            '--all',
            action='store_true',
            help='Alerts in any status',
        )
        parser.add_argument(
            '--warehouse',
            type=int,
            help='Only alerts of this warehouse id',
        )

    def handle(self, *args, **options):
        status = None if options['all'] else options['status']
        try:
            alerts = get_depot().query_alerts(
                severity=options['severity'],
                status=status,
                warehouse_id=options['warehouse'],
            )
        except DepotError as e:
            raise CommandError(e.message) from e

        for alert in alerts:
            line = (
                f"[{alert.severity}] {alert.sku or alert.product_id} "
                f"@ {alert.warehouse_code or alert.warehouse_id}: "
                f"{alert.current_stock}/{alert.reorder_point} "
                f"({alert.stock_status}, {alert.status})"
            )
            if alert.recommended_quantity:
                line += f" reorder {alert.recommended_quantity}"
            style = self.style.ERROR if alert.severity == AlertSeverity.CRITICAL else self.style.WARNING
            self.stdout.write(style(line))

        self.stdout.write(self.style.SUCCESS(f'{len(alerts)} alert(s)'))
