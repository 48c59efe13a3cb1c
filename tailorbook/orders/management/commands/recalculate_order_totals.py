from django.core.management.base import BaseCommand
from django.db import transaction

from tailorbook.core.cache_signals import suspend_cache_signals, invalidate_dashboard_cache
from tailorbook.orders.models import Order, Material


class Command(BaseCommand):
    help = 'Recomputes stored order balances and material total costs'

    def add_arguments(self, parser):
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report what would change without saving anything',
        )
        parser.add_argument(
            '--shop',
            type=int,
            help='Only repair records of this shop ID',
        )

    def handle(self, *args, **options):
        dry_run = options['dry_run']
        if dry_run:
            self.stdout.write(self.style.WARNING("DRY RUN MODE: No changes will be saved."))

        orders = Order.objects.all().order_by('id')
        materials = Material.objects.select_related('order').order_by('id')
        if options.get('shop'):
            orders = orders.filter(shop_id=options['shop'])
            materials = materials.filter(order__shop_id=options['shop'])

        self.stdout.write(f"Checking {orders.count()} orders and {materials.count()} materials...")
        touched_shops = set()
        fixed_orders = 0
        fixed_materials = 0

        with suspend_cache_signals(), transaction.atomic():
            for material in materials:
                expected = material.compute_total_cost()
                if material.total_cost != expected:
                    self.stdout.write(self.style.NOTICE(
                        f"  - Material {material.id} ({material.name}): total {material.total_cost} -> {expected}"
                    ))
                    fixed_materials += 1
                    touched_shops.add(material.order.shop_id)
                    if not dry_run:
                        material.save(update_fields=['total_cost', 'updated_at'])

            for order in orders:
                expected = order.compute_balance()
                if order.balance != expected:
                    self.stdout.write(self.style.NOTICE(
                        f"  - Order {order.id} ({order.customer_name}): balance {order.balance} -> {expected}"
                    ))
                    fixed_orders += 1
                    touched_shops.add(order.shop_id)
                    if not dry_run:
                        order.save(update_fields=['balance', 'updated_at'])

        if dry_run:
            self.stdout.write(self.style.WARNING(
                f"\nDry run complete. {fixed_orders} orders and {fixed_materials} materials would be updated."
            ))
            return

        for shop_id in touched_shops:
            invalidate_dashboard_cache(shop_id)
        self.stdout.write(self.style.SUCCESS(
            f"\nRecalculation complete. Updated {fixed_orders} orders and {fixed_materials} materials."
        ))
