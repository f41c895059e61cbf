"""Stock alert management — operator commands and the active-alert query."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from warehouse.alerting.stock_alert import AlertStatus, StockAlert
from warehouse.domain import warehouse


@warehouse.command(part_of="StockAlert")
class AcknowledgeAlert:
    alert_id = Identifier(required=True)
    acknowledged_by = String(required=True, max_length=100)


@warehouse.command(part_of="StockAlert")
class ResolveAlert:
    alert_id = Identifier(required=True)


@warehouse.command_handler(part_of=StockAlert)
class AlertManagementHandler:
    @handle(AcknowledgeAlert)
    def acknowledge_alert(self, command):
        repo = current_domain.repository_for(StockAlert)
        alert = repo.get(command.alert_id)
        alert.acknowledge(command.acknowledged_by)
        repo.add(alert)
        return alert.status

    @handle(ResolveAlert)
    def resolve_alert(self, command):
        repo = current_domain.repository_for(StockAlert)
        alert = repo.get(command.alert_id)
        alert.resolve()
        repo.add(alert)
        return alert.status


def list_active_alerts():
    """Active (unacknowledged) alerts, newest first."""
    alerts = (
        current_domain.repository_for(StockAlert)._dao.query.filter(status=AlertStatus.ACTIVE.value).all().items
    )
    return sorted(alerts, key=lambda a: a.triggered_at, reverse=True)
