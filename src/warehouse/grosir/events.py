"""Domain events for grosir bundle configuration and per-size tolerances."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from warehouse.domain import warehouse


@warehouse.event(part_of="BundleConfig")
class BundleConfigured:
    """A product's factory bundle composition was created or changed."""

    __version__ = 1

    bundle_config_id = Identifier(required=True)
    product_id = Identifier(required=True)
    supplier_id = Identifier()
    bundle_name = String()
    total_units = Integer(required=True)
    size_breakdown = Text(required=True)  # JSON object: size -> units per bundle
    bundle_cost = Float(required=True)
    configured_at = DateTime(required=True)


@warehouse.event(part_of="GrosirTolerance")
class ToleranceConfigured:
    __version__ = 1

    tolerance_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    size = String()
    max_excess_units = Integer(required=True)
    current_excess = Integer(required=True)
    configured_at = DateTime(required=True)


@warehouse.event(part_of="GrosirTolerance")
class VariantLocked:
    """A size's excess stock passed its maximum; bundle restocks that include it are blocked."""

    __version__ = 1

    tolerance_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    size = String()
    current_excess = Integer(required=True)
    max_excess_units = Integer(required=True)
    reason = String(required=True)
    locked_at = DateTime(required=True)


@warehouse.event(part_of="GrosirTolerance")
class VariantUnlocked:
    """A locked size sold down to within its maximum excess again."""

    __version__ = 1

    tolerance_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_id = Identifier()
    size = String()
    current_excess = Integer(required=True)
    max_excess_units = Integer(required=True)
    unlocked_at = DateTime(required=True)
