from bus_sg.monitoring.metrics import get_metrics, record_lookup, record_request

__all__ = ["get_metrics", "record_lookup", "record_request"]
