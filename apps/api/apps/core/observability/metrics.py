"""
Prometheus metrics for clinic-management writes.
"""
from prometheus_client import Counter, Histogram


class MetricsRegistry:
    """
    Central metrics registry.

    Provides typed access to all application metrics.
    """

    def __init__(self):
        self._setup_metrics()

    def _setup_metrics(self):
        # ===================================================================
        # HTTP Metrics
        # ===================================================================
        self.http_requests_total = Counter(
            'clinic_http_requests_total',
            'Total HTTP requests',
            ['method', 'status']
        )

        # ===================================================================
        # Clinic Metrics
        # ===================================================================
        self.clinic_saves_total = Counter(
            'clinic_saves_total',
            'Clinic create/update operations',
            ['operation']
        )

        self.clinic_deletes_total = Counter(
            'clinic_deletes_total',
            'Clinic soft-delete attempts',
            ['result']
        )

        # ===================================================================
        # Appointment Metrics
        # ===================================================================
        self.appointment_saves_total = Counter(
            'appointment_saves_total',
            'Appointment upserts',
            ['visit_created']
        )

        self.appointment_save_duration_seconds = Histogram(
            'appointment_save_duration_seconds',
            'Duration of the appointment save transaction',
            buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
        )

        self.appointment_status_changes_total = Counter(
            'appointment_status_changes_total',
            'Appointment status changes',
            ['status']
        )

        # ===================================================================
        # Sync Metrics
        # ===================================================================
        self.sync_deltas_total = Counter(
            'sync_deltas_total',
            'Deltas applied from offline clients',
            ['entity', 'operation', 'result']
        )


metrics = MetricsRegistry()
