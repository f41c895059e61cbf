"""Bundle and tolerance configuration — commands and handlers.

Both commands are upserts: configuring an existing bundle or tolerance
updates it in place instead of creating a second row.
"""

import json

import structlog
from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from warehouse.domain import warehouse
from warehouse.grosir.bundle import BundleConfig
from warehouse.grosir.lookup import find_bundle_config, find_tolerance
from warehouse.grosir.tolerance import GrosirTolerance

logger = structlog.get_logger(__name__)


@warehouse.command(part_of="BundleConfig")
class ConfigureBundle:
    product_id = Identifier(required=True)
    supplier_id = Identifier()
    bundle_name = String(max_length=255)
    total_units = Integer(required=True)
    size_breakdown = Text(required=True)  # JSON object: size -> units per bundle
    bundle_cost = Float(required=True)
    min_bundle_order = Integer(default=1)


@warehouse.command(part_of="GrosirTolerance")
class SetTolerance:
    product_id = Identifier(required=True)
    variant_id = Identifier()
    size = String(max_length=20)
    max_excess_units = Integer(required=True)


@warehouse.command_handler(part_of=BundleConfig)
class BundleConfigurationHandler:
    @handle(ConfigureBundle)
    def configure_bundle(self, command):
        size_breakdown = (
            json.loads(command.size_breakdown) if isinstance(command.size_breakdown, str) else command.size_breakdown
        )
        repo = current_domain.repository_for(BundleConfig)
        config = find_bundle_config(command.product_id, supplier_id=command.supplier_id)

        if config is None:
            config = BundleConfig.configure(
                product_id=command.product_id,
                supplier_id=command.supplier_id,
                bundle_name=command.bundle_name,
                total_units=command.total_units,
                size_breakdown=size_breakdown,
                bundle_cost=command.bundle_cost,
                min_bundle_order=command.min_bundle_order,
            )
        else:
            config.reconfigure(
                total_units=command.total_units,
                size_breakdown=size_breakdown,
                bundle_cost=command.bundle_cost,
                bundle_name=command.bundle_name,
                min_bundle_order=command.min_bundle_order,
            )
        repo.add(config)

        logger.info("Bundle configured", product_id=str(command.product_id), sizes=list(size_breakdown))
        return str(config.id)


@warehouse.command_handler(part_of=GrosirTolerance)
class ToleranceConfigurationHandler:
    @handle(SetTolerance)
    def set_tolerance(self, command):
        repo = current_domain.repository_for(GrosirTolerance)
        tolerance = find_tolerance(command.product_id, command.variant_id)

        if tolerance is None:
            tolerance = GrosirTolerance.configure(
                product_id=command.product_id,
                variant_id=command.variant_id,
                size=command.size,
                max_excess_units=command.max_excess_units,
            )
        else:
            if command.size:
                tolerance.size = command.size
            tolerance.change_maximum(command.max_excess_units)
        repo.add(tolerance)
        return str(tolerance.id)
