from grantflow.services.audit.audit_logger import AuditLogger

__all__ = ["AuditLogger"]
